"""Call database models and repository."""

from fusioncaller.db.calls.model import Call
from fusioncaller.db.calls.repository import CallRepository

__all__ = ["Call", "CallRepository"]
