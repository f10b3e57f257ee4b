"""Badminton scoring engine.

Rally scoring to 21 points with a win-by-2 requirement and a 30-point cap.
Matches default to best-of-3 games. The rally winner serves next and the
winner of a game serves first in the following one.
"""

from typing import Dict, Iterable, List, Optional, Tuple

from . import sets
from .common import (
    COMPLETED,
    SIDES,
    base_state,
    close_period,
    count_won,
    empty_flags,
    initial_side,
    is_live,
    is_match_over,
    is_period_over,
    leader,
    other,
    period_breakdown,
    periods_needed,
    side_of,
    start_period,
)

SPORT = "badminton"


def init_state(config: Dict, roster: Optional[Dict] = None) -> Dict:
    """Initialise scoreboard state for badminton."""

    cfg = {
        "pointsTo": config.get("pointsTo", 21),
        "winBy": config.get("winBy", 2),
        "bestOf": config.get("bestOf", 3),
        "maxPoint": config.get("maxPoint", 30),
        "firstServer": initial_side(config, "firstServer"),
    }
    return base_state(SPORT, cfg, cfg["bestOf"], cfg["firstServer"])


def _wins_game(cfg: Dict, ps: int, po: int) -> bool:
    max_point = cfg.get("maxPoint")
    if isinstance(max_point, int) and max_point > 0 and ps >= max_point and ps > po:
        return True
    return ps >= cfg["pointsTo"] and ps - po >= cfg["winBy"]


def _refresh_flags(state: Dict) -> None:
    cfg = state["config"]
    flags = empty_flags()
    if state["status"] == COMPLETED:
        state["flags"] = flags
        return

    pts = state["points"]
    deuce_at = cfg["pointsTo"] - 1
    flags["deuce"] = pts["A"] >= deuce_at and pts["B"] >= deuce_at

    games_needed = periods_needed(cfg.get("bestOf"))
    for side in SIDES:
        # only the leader can be on game point, even at 29-all under the cap
        if pts[side] <= pts[other(side)]:
            continue
        if _wins_game(cfg, pts[side] + 1, pts[other(side)]):
            flags["setPoint"] = True
            flags["pointFor"].append(side)
            if games_needed and count_won(state, side) + 1 >= games_needed:
                flags["matchPoint"] = True
    state["flags"] = flags


def _close_game(state: Dict, side: str) -> None:
    games_needed = periods_needed(state["config"].get("bestOf"))
    close_period(state, side, state["points"], games_needed)
    state["points"] = {"A": 0, "B": 0}
    state["holder"] = side


def apply(event: Dict, state: Dict) -> Dict:
    """Apply an event to the current state.

    Handles ``POINT``, ``TOGGLE_SERVICE``, ``START_PERIOD`` and ``END_PERIOD``.
    Anything else, or an event that is not valid for the current status,
    leaves ``state`` untouched.
    """

    etype = event.get("type")

    if etype == "POINT":
        side = side_of(event)
        if side is None or not is_live(state):
            return state
        opp = other(side)
        state["points"][side] += 1
        state["holder"] = side
        if _wins_game(state["config"], state["points"][side], state["points"][opp]):
            _close_game(state, side)

    elif etype == "TOGGLE_SERVICE":
        if state["status"] == COMPLETED:
            return state
        state["holder"] = other(state["holder"])

    elif etype == "START_PERIOD":
        if not start_period(state):
            return state

    elif etype == "END_PERIOD":
        side = leader(state["points"])
        if not is_live(state) or side not in SIDES:
            return state
        _close_game(state, side)

    else:
        return state

    _refresh_flags(state)
    return state


def summary(state: Dict) -> Dict:
    return {
        "points": state["points"],
        "games": {side: count_won(state, side) for side in SIDES},
        "gameScores": state["periodScores"],
        "server": state["holder"],
        "config": state["config"],
    }


def breakdown(state: Dict) -> List[Dict]:
    return period_breakdown(state)


def describe_result(state: Dict, names: Dict[str, str]) -> str:
    return sets.describe_result(state, names)


def _legal_finish(state: Dict, period: int, ps: int, po: int) -> bool:
    return _wins_game(state["config"], ps, po)


def record_sets(set_scores: Iterable[Tuple[int, int]], state: Optional[Dict] = None):
    """Generate point events to reach the provided game scores.

    ``set_scores`` is an iterable of ``(points_A, points_B)`` tuples. Returns
    the events and the state after applying them.
    """

    state = state or init_state({})
    return sets.record_sets(set_scores, state, apply, _legal_finish)
