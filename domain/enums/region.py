"""Region enumeration for League of Legends servers."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class Region(Enum):
    """League of Legends platform servers.

    Match ids are prefixed with the platform they were played on
    (``EUW1_7012345678``), which is how a stored result finds its server.
    """

    # Europe
    EUW1 = "euw1"  # Europe West
    EUN1 = "eun1"  # Europe Nordic & East
    TR1 = "tr1"    # Turkey
    RU = "ru"      # Russia
    ME1 = "me1"    # Middle East

    # Americas
    NA1 = "na1"    # North America
    BR1 = "br1"    # Brazil
    LA1 = "la1"    # Latin America North
    LA2 = "la2"    # Latin America South

    # Asia
    KR = "kr"      # Korea
    JP1 = "jp1"    # Japan

    # SEA & Oceania
    OC1 = "oc1"    # Oceania
    SG2 = "sg2"    # Singapore
    TW2 = "tw2"    # Taiwan
    VN2 = "vn2"    # Vietnam

    @property
    def platform_route(self) -> str:
        return self.value

    @property
    def friendly(self) -> str:
        """Short label used by community sites (e.g. ``eune``)."""
        mapping = {
            "eun1": "eune",
            "euw1": "euw",
            "na1": "na",
            "br1": "br",
            "la1": "lan",
            "la2": "las",
            "jp1": "jp",
            "oc1": "oce",
            "tr1": "tr",
            "me1": "me",
        }
        if self.value in mapping:
            return mapping[self.value]
        code = self.value
        if code and code[-1].isdigit():
            return code[:-1]
        return code

    @classmethod
    def from_match_id(cls, match_id: str) -> Optional["Region"]:
        prefix, sep, _ = match_id.partition("_")
        if not sep:
            return None
        try:
            return cls(prefix.lower())
        except ValueError:
            return None
