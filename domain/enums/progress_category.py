"""Progress categories a champion can be tracked in."""
from enum import Enum


class ProgressCategory(Enum):
    WINS = "wins"
    TOP4S = "top4s"
    FIRST_PLAYS = "firstPlays"

    @property
    def label(self) -> str:
        names = {
            "wins": "Wins",
            "top4s": "Top 4",
            "firstPlays": "Played",
        }
        return names[self.value]
