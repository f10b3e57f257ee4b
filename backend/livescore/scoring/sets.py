"""Helpers for set-based sports (badminton, volleyball)."""

from typing import Callable, Dict, Iterable, List, Tuple

from ..services.validation import ValidationError, validate_period_scores
from .common import COMPLETED, count_won, other, period_breakdown


def score_line(state: Dict) -> str:
    return ", ".join(f"{row['A']}-{row['B']}" for row in period_breakdown(state))


def describe_result(state: Dict, names: Dict[str, str]) -> str:
    """``"<winner> won 2-1 (21-19, 18-21, 21-15)"``."""

    winner = state.get("winner")
    if state["status"] != COMPLETED or winner not in ("A", "B"):
        return "Match in progress"
    loser = other(winner)
    line = score_line(state)
    text = f"{names[winner]} won {count_won(state, winner)}-{count_won(state, loser)}"
    return f"{text} ({line})" if line else text


def record_sets(
    set_scores: Iterable[Tuple[int, int]],
    state: Dict,
    apply: Callable[[Dict, Dict], Dict],
    wins_set: Callable[[Dict, int, int, int], bool],
) -> Tuple[List[Dict], Dict]:
    """Generate the events that reproduce finished set scores.

    Points alternate until the losing side reaches its final score, then the
    winner takes the remaining rallies, so no set can end early. Each score
    must be a legal finish under ``state["config"]``.
    """

    pairs = [tuple(pair) for pair in set_scores]
    validate_period_scores(
        [{"A": a, "B": b} for a, b in pairs], max_sets=len(state["periodsWon"])
    )
    events: List[Dict] = []

    def _push(ev: Dict) -> None:
        nonlocal state
        events.append(ev)
        state = apply(ev, state)

    for index, (sa, sb) in enumerate(pairs, start=1):
        if state["status"] == COMPLETED:
            raise ValidationError(f"Set #{index} was recorded after the match ended.")
        if index > 1:
            _push({"type": "START_PERIOD"})
        period = state["currentPeriod"]
        winner = "A" if sa > sb else "B"
        loser = other(winner)
        win_pts, lose_pts = max(sa, sb), min(sa, sb)
        if not wins_set(state, period, win_pts, lose_pts) or wins_set(
            state, period, win_pts - 1, lose_pts
        ):
            raise ValidationError(f"Set #{index} score {sa}-{sb} is not a legal finish.")

        for _ in range(lose_pts):
            _push({"type": "POINT", "by": winner})
            _push({"type": "POINT", "by": loser})
        for _ in range(win_pts - lose_pts):
            _push({"type": "POINT", "by": winner})

    return events, state

