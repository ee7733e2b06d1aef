"""Domain interfaces."""
from .repository import IMatchClient, ISettingsStore, IMatchCacheStore

__all__ = [
    'IMatchClient',
    'ISettingsStore',
    'IMatchCacheStore',
]
