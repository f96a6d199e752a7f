import pytest

from models import PlacementRecord, Recipe, RoundOutcome, RoundResult, Side
from services.history_service import build_round_history, count_wins
from services.scoring_service import evaluate_placements

RECIPE = Recipe(left_track=1, left_token="A", right_track=6, right_token="B")
LEFT_OK = PlacementRecord(token="A", track=1)
RIGHT_OK = PlacementRecord(token="B", track=6)


def test_exact_match_wins():
    assert evaluate_placements(RECIPE, LEFT_OK, RIGHT_OK) == []


@pytest.mark.parametrize("left, right, wrong", [
    (PlacementRecord("C", 1), RIGHT_OK, [Side.LEFT]),
    (PlacementRecord("A", 2), RIGHT_OK, [Side.LEFT]),
    (LEFT_OK, PlacementRecord("A", 6), [Side.RIGHT]),
    (LEFT_OK, PlacementRecord("B", 7), [Side.RIGHT]),
    (PlacementRecord("B", 1), PlacementRecord("A", 6), [Side.LEFT, Side.RIGHT]),
])
def test_any_single_field_mismatch_loses(left, right, wrong):
    assert evaluate_placements(RECIPE, left, right) == wrong


def test_unset_placement_never_matches():
    assert evaluate_placements(RECIPE, None, RIGHT_OK) == [Side.LEFT]


def test_round_history_is_ordered_and_explains_losses():
    results = [
        RoundResult(2, RECIPE, LEFT_OK, PlacementRecord("B", 7), RoundOutcome.LOST),
        RoundResult(1, RECIPE, LEFT_OK, RIGHT_OK, RoundOutcome.WON),
    ]

    history = build_round_history(results)

    assert [entry["round_number"] for entry in history] == [1, 2]
    assert history[0]["wrong_sides"] == []
    assert history[1]["wrong_sides"] == ["RIGHT"]
    assert history[1]["right"] == {"token": "B", "track": 7}
    assert history[1]["recipe"]["right_track"] == 6
    assert count_wins(results) == 1
