"""Infrastructure layer - API client and local stores."""
from .api import RiotMatchClient, RateLimiter, RetryPolicy
from .repositories import SettingsStore, MatchCacheStore

__all__ = [
    'RiotMatchClient',
    'RateLimiter',
    'RetryPolicy',
    'SettingsStore',
    'MatchCacheStore',
]
