"""Infrastructure repositories module."""
from .settings_store import SettingsStore
from .match_cache_store import MatchCacheStore
from .slimming import slim_match_detail, to_match_detail

__all__ = [
    'SettingsStore',
    'MatchCacheStore',
    'slim_match_detail',
    'to_match_detail',
]
