"""Presentation layer - User interfaces."""
from .cli import SyncCommand, ProgressCommand, DataCommand

__all__ = [
    "SyncCommand",
    "ProgressCommand",
    "DataCommand",
]
