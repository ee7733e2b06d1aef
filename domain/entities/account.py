"""Player identity entities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import UserInputInvalidError


@dataclass(frozen=True)
class RiotId:
    """Human-readable identity (``gameName#tagLine``) as typed by the user."""

    game_name: str
    tag_line: str

    @classmethod
    def parse(cls, raw: str, tag_line: Optional[str] = None) -> "RiotId":
        """Build from ``"Name#TAG"`` or from separate name and tag parts.

        ``#`` characters are stripped from the tag line, and both parts must
        be non-empty after trimming.
        """
        if tag_line is None:
            game_name, _, tag_line = raw.partition("#")
        else:
            game_name = raw
        game_name = game_name.strip()
        tag_line = tag_line.replace("#", "").strip()
        if not game_name or not tag_line:
            raise UserInputInvalidError(f"invalid riot id {raw!r}")
        return cls(game_name=game_name, tag_line=tag_line)

    def __str__(self) -> str:
        return f"{self.game_name}#{self.tag_line}"

    def to_dict(self) -> Dict[str, Any]:
        return {"gameName": self.game_name, "tagLine": self.tag_line}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RiotId":
        return cls(game_name=str(data.get("gameName", "")), tag_line=str(data.get("tagLine", "")))


@dataclass(frozen=True)
class RemoteAccount:
    """Account as resolved by the provider; ``puuid`` is the stable id."""

    puuid: str
    game_name: str
    tag_line: str

    @property
    def riot_id(self) -> RiotId:
        return RiotId(game_name=self.game_name, tag_line=self.tag_line)
