"""Domain entities."""
from .account import RiotId, RemoteAccount
from .participant import Participant
from .match import MatchDetail, MatchResult
from .progress import ArenaProgress
from .scope import ProgressScope

__all__ = [
    'RiotId',
    'RemoteAccount',
    'Participant',
    'MatchDetail',
    'MatchResult',
    'ArenaProgress',
    'ProgressScope',
]
