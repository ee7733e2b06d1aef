"""Reduce match payloads to the fields progress tracking reads."""
from typing import Any, Dict, Union

from pydantic import ValidationError

from domain.entities import MatchDetail
from infrastructure.api.schemas import MatchPayload

MatchLike = Union[MatchDetail, Dict[str, Any]]


def to_match_detail(payload: MatchLike) -> MatchDetail:
    """
    Accept any of the shapes a match can arrive in:
      - a ``MatchDetail`` (already slim),
      - a slim document ``{"timestamp", "participants": [{"puuid", "champion", ...}]}``,
      - a raw provider payload ``{"info": {"gameCreation", "participants"}}``.

    Raises ValueError when the payload is none of these.
    """
    if isinstance(payload, MatchDetail):
        return payload
    if not isinstance(payload, dict):
        raise ValueError(f"unsupported match payload type: {type(payload).__name__}")

    if "info" in payload:
        try:
            return MatchPayload.model_validate(payload).to_entity()
        except ValidationError as e:
            raise ValueError(f"malformed raw match payload: {e.error_count()} error(s)") from e

    try:
        return MatchDetail.from_dict(payload)
    except (KeyError, TypeError, ValueError) as e:
        raise ValueError(f"malformed slim match payload: {e}") from e


def slim_match_detail(payload: MatchLike) -> Dict[str, Any]:
    """Slim document for storage; applying it twice changes nothing."""
    return to_match_detail(payload).to_dict()
