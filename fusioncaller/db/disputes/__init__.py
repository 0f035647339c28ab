"""Call dispute models."""

from fusioncaller.db.disputes.model import CallDispute
from fusioncaller.db.disputes.repository import DisputeRepository

__all__ = ["CallDispute", "DisputeRepository"]
