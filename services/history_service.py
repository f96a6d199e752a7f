"""
Round history service.

Builds a per-session round history so the frontend can render the
results of every finished round directly from the server.
"""
from typing import Any, Dict, Iterable, List, Optional

from models import PlacementRecord, RoundOutcome, RoundResult
from services.scoring_service import evaluate_placements


def _placement_dict(placement: Optional[PlacementRecord]) -> Optional[Dict[str, Any]]:
    if placement is None:
        return None
    return {"token": placement.token, "track": placement.track}


def build_round_history(results: Iterable[RoundResult]) -> List[Dict[str, Any]]:
    """
    Return an ordered list of finished rounds (oldest first).

    Each entry contains the recipe, both placements and the sides that
    did not match, so a lost round can be explained without replaying it.
    """
    history: List[Dict[str, Any]] = []

    for result in sorted(results, key=lambda r: r.round_number):
        recipe = result.recipe
        entry: Dict[str, Any] = {
            "round_number": result.round_number,
            "recipe": {
                "left_track": recipe.left_track,
                "left_token": recipe.left_token,
                "right_track": recipe.right_track,
                "right_token": recipe.right_token,
            },
            "left": _placement_dict(result.left),
            "right": _placement_dict(result.right),
            "outcome": result.outcome.value,
            "wrong_sides": [
                side.value for side in evaluate_placements(recipe, result.left, result.right)
            ],
        }
        history.append(entry)

    return history


def count_wins(results: Iterable[RoundResult]) -> int:
    return sum(1 for result in results if result.outcome == RoundOutcome.WON)
