"""
Phone number database models.

Phone numbers belong to an organization and are used to attribute
incoming webhook events to a tenant.
"""

from fusioncaller.db.phone_numbers.model import PhoneNumber
from fusioncaller.db.phone_numbers.repository import PhoneNumberRepository

__all__ = ["PhoneNumber", "PhoneNumberRepository"]
