"""Vapi API integration (call control)."""

from fusioncaller.integrations.vapi.call_control import (
    TerminationResult,
    VapiCallControl,
    get_call_control,
    set_call_control,
)
from fusioncaller.integrations.vapi.config import VapiSettings, get_vapi_settings

__all__ = [
    "TerminationResult",
    "VapiCallControl",
    "VapiSettings",
    "get_call_control",
    "get_vapi_settings",
    "set_call_control",
]
