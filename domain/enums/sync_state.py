"""Sync engine states, one pass per trigger."""
from enum import Enum


class SyncState(Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    LISTING_IDS = "listing_ids"
    BATCHING = "batching"
    MERGING = "merging"
    PERSISTING = "persisting"
    ERROR = "error"
