"""Error taxonomy shared by every layer.

Every error carries a ``user_message`` suitable for printing as-is; the
exception text itself keeps the technical detail for the log.
"""
from __future__ import annotations

from typing import Optional


class ArenaTrackerError(Exception):
    """Base class for all tracker errors."""

    default_user_message = "Something went wrong"

    def __init__(self, message: str = "", *, user_message: Optional[str] = None) -> None:
        super().__init__(message or self.default_user_message)
        self.user_message = user_message or self.default_user_message


# ── Remote ─────────────────────────────────────────────────────────────────

class RemoteError(ArenaTrackerError):
    default_user_message = "Request to the match provider failed"


class CredentialMissingError(RemoteError):
    default_user_message = "The API proxy has no Riot API token configured (set RIOT_API_TOKEN on the proxy)"


class UnauthorizedError(RemoteError):
    default_user_message = "API token expired or invalid. Please update the proxy's RIOT_API_TOKEN"


class ForbiddenError(RemoteError):
    default_user_message = "API access forbidden. Check your API token permissions"


class RateLimitedError(RemoteError):
    default_user_message = "Rate limit exceeded. Please try again later"

    def __init__(self, message: str = "", *, retry_after: Optional[float] = None, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class SchemaMismatchError(RemoteError):
    default_user_message = "Unexpected response format from API"


class NotFoundError(RemoteError):
    default_user_message = "No data found"


class TransportError(RemoteError):
    default_user_message = "Could not reach the match provider"


class RemoteHTTPError(RemoteError):
    def __init__(self, status_code: int, message: str = "", **kwargs) -> None:
        kwargs.setdefault("user_message", f"API Error ({status_code}): {message or 'Unknown error'}")
        super().__init__(message or f"HTTP {status_code}", **kwargs)
        self.status_code = status_code


# ── Local ──────────────────────────────────────────────────────────────────

class UserInputInvalidError(ArenaTrackerError):
    default_user_message = "Please enter both game name and tag line"


class SyncError(ArenaTrackerError):
    default_user_message = "Failed to update match history"


class StoreError(ArenaTrackerError):
    default_user_message = "Local storage is unavailable"
