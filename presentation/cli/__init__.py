"""Presentation CLI exports."""
from .session import TrackerSession
from .sync_command import SyncCommand
from .progress_command import ProgressCommand
from .data_command import DataCommand

__all__ = [
    "TrackerSession",
    "SyncCommand",
    "ProgressCommand",
    "DataCommand",
]
