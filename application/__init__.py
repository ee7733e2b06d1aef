"""Application layer - sync engine, progress aggregation and backups."""
from .services import SyncEngine, SyncReport, BackupService, aggregate

__all__ = [
    'SyncEngine',
    'SyncReport',
    'BackupService',
    'aggregate',
]
