"""Domain layer - Entities, enums, errors and interfaces."""
from .enums import Region, HistoryScope, ProgressCategory, SyncState
from .entities import (
    RiotId, RemoteAccount, Participant, MatchDetail, MatchResult,
    ArenaProgress, ProgressScope,
)
from .errors import (
    ArenaTrackerError, RemoteError, CredentialMissingError, UnauthorizedError,
    ForbiddenError, RateLimitedError, SchemaMismatchError, NotFoundError,
    TransportError, RemoteHTTPError, UserInputInvalidError, SyncError, StoreError,
)
from .interfaces import IMatchClient, ISettingsStore, IMatchCacheStore

__all__ = [
    # Enums
    'Region',
    'HistoryScope',
    'ProgressCategory',
    'SyncState',
    # Entities
    'RiotId',
    'RemoteAccount',
    'Participant',
    'MatchDetail',
    'MatchResult',
    'ArenaProgress',
    'ProgressScope',
    # Errors
    'ArenaTrackerError',
    'RemoteError',
    'CredentialMissingError',
    'UnauthorizedError',
    'ForbiddenError',
    'RateLimitedError',
    'SchemaMismatchError',
    'NotFoundError',
    'TransportError',
    'RemoteHTTPError',
    'UserInputInvalidError',
    'SyncError',
    'StoreError',
    # Interfaces
    'IMatchClient',
    'ISettingsStore',
    'IMatchCacheStore',
]
