"""Application services root exports."""
from .progress_aggregator import aggregate, season_slice
from .sync_engine import SyncEngine, SyncReport
from .backup_service import BackupService, BackupDocument

__all__ = [
    "aggregate",
    "season_slice",
    "SyncEngine",
    "SyncReport",
    "BackupService",
    "BackupDocument",
]
