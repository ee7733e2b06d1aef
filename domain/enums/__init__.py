"""Domain enumerations."""
from .region import Region
from .history_scope import HistoryScope
from .progress_category import ProgressCategory
from .sync_state import SyncState

__all__ = [
    'Region',
    'HistoryScope',
    'ProgressCategory',
    'SyncState',
]
