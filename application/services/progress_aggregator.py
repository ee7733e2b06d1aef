"""Pure derivation of arena progress from the match history."""
from typing import List, Optional, Sequence

from domain.entities import ArenaProgress, MatchResult, ProgressScope


def season_slice(history: Sequence[MatchResult], season_cutoff: Optional[str]) -> List[MatchResult]:
    """The cutoff entry and everything newer; the whole history if the cutoff is unset or unknown."""
    if season_cutoff:
        for index, entry in enumerate(history):
            if entry.match_id == season_cutoff:
                return list(history[: index + 1])
    return list(history)


def aggregate(
    history: Sequence[MatchResult],
    season_cutoff: Optional[str] = None,
    scope: Optional[ProgressScope] = None,
) -> ArenaProgress:
    """
    Turn a newest-first history into per-champion completion sets.

    The season cutoff is applied first, then the history scope narrows the
    result to its first N entries. Each remaining match counts its champion
    as played; placement 4 or better adds a top 4, placement 1 a win.
    """
    entries = (scope or ProgressScope()).apply(season_slice(history, season_cutoff))

    first_plays: List[str] = []
    top4s: List[str] = []
    wins: List[str] = []
    for entry in entries:
        first_plays.append(entry.champion)
        if entry.placement <= 4:
            top4s.append(entry.champion)
        if entry.placement == 1:
            wins.append(entry.champion)

    return ArenaProgress(
        first_plays=first_plays,
        top4s=top4s,
        wins=wins,
        first_place_champions=wins,
    )
