"""Client module - API clients and form auto-save for the wellness sessions API."""

from .api import ApiError, AuthClient, SessionClient
from .autosave import AutoSaver, AutoSaveStatus, simple_auto_saver, validated_auto_saver

__all__ = [
    "ApiError",
    "AuthClient",
    "SessionClient",
    "AutoSaver",
    "AutoSaveStatus",
    "simple_auto_saver",
    "validated_auto_saver",
]
