"""Data sources for the account digest."""

from .affirmations import AffirmationClient
from .okx import OkxClient, okx_client_from_settings

__all__ = ["AffirmationClient", "OkxClient", "okx_client_from_settings"]
