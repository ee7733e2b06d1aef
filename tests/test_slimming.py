import pytest

from domain.entities import MatchDetail, Participant
from infrastructure.repositories.slimming import slim_match_detail, to_match_detail

RAW = {
    "metadata": {"matchId": "EUW1_9", "participants": ["p-1", "p-2"]},
    "info": {
        "gameCreation": 1_710_000_000_000,
        "gameDuration": 1500,
        "queueId": 1700,
        "participants": [
            {"puuid": "p-1", "championName": "Lux", "placement": 1, "arenaScore": 4,
             "playerAugment1": 7, "playerAugment2": 8, "kills": 12, "items": [1, 2, 3]},
            {"puuid": "p-2", "championName": "Sett", "placement": 5, "kills": 3},
        ],
    },
}


def test_raw_payload_is_reduced_to_tracked_fields():
    assert slim_match_detail(RAW) == {
        "timestamp": 1_710_000_000_000,
        "participants": [
            {"puuid": "p-1", "champion": "Lux", "placement": 1, "score": 4, "augments": [7, 8]},
            {"puuid": "p-2", "champion": "Sett", "placement": 5},
        ],
    }


def test_slimming_is_idempotent():
    once = slim_match_detail(RAW)
    assert slim_match_detail(once) == once


def test_entities_pass_through():
    detail = MatchDetail(timestamp=5, participants=[Participant("p", "Ahri", 3)])
    assert to_match_detail(detail) is detail
    assert slim_match_detail(detail) == {
        "timestamp": 5,
        "participants": [{"puuid": "p", "champion": "Ahri", "placement": 3}],
    }


@pytest.mark.parametrize("payload", [
    "not a match",
    {"info": {"participants": []}},
    {"timestamp": 1, "participants": [{"puuid": "p"}]},
    {"participants": []},
])
def test_unusable_payloads_raise_value_error(payload):
    with pytest.raises(ValueError):
        slim_match_detail(payload)
