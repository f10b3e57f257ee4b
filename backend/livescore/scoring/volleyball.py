"""Volleyball scoring engine.

Rally scoring, best-of-5 sets. Sets 1-4 are played to 25 and the deciding set
to 15; every set needs a two-point margin and there is no cap. A side that
wins a rally on the opponent's serve gains the serve and rotates.
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

SPORT = "volleyball"


def init_state(config: Dict, roster: Optional[Dict] = None) -> Dict:
    """Initialise scoreboard state for volleyball.

    ``config`` may contain ``pointsTo`` (default ``25``), ``decidingPointsTo``
    (default ``15``), ``winBy``, ``bestOf`` (default ``5``),
    ``timeoutsPerSet`` (default ``2``), ``rotationSize`` (default ``6``) and
    ``firstServer``.
    """

    cfg = {
        "pointsTo": config.get("pointsTo", 25),
        "decidingPointsTo": config.get("decidingPointsTo", 15),
        "winBy": config.get("winBy", 2),
        "bestOf": config.get("bestOf", 5),
        "timeoutsPerSet": config.get("timeoutsPerSet", 2),
        "rotationSize": config.get("rotationSize", 6),
        "firstServer": initial_side(config, "firstServer"),
    }
    state = base_state(SPORT, cfg, cfg["bestOf"], cfg["firstServer"])
    positions = list(range(1, cfg["rotationSize"] + 1))
    state["rotations"] = {"A": list(positions), "B": list(positions)}
    state["timeouts"] = {"A": [0] * cfg["bestOf"], "B": [0] * cfg["bestOf"]}
    state["timeoutActive"] = None
    state["setFirstServer"] = cfg["firstServer"]
    return state


def points_to(cfg: Dict, period: int) -> int:
    """Target score for ``period``; the deciding set uses ``decidingPointsTo``."""

    if cfg.get("bestOf") and period >= cfg["bestOf"]:
        return cfg["decidingPointsTo"]
    return cfg["pointsTo"]


def _wins_set(cfg: Dict, period: int, ps: int, po: int) -> bool:
    return ps >= points_to(cfg, period) and ps - po >= cfg["winBy"]


def _refresh_flags(state: Dict) -> None:
    cfg = state["config"]
    flags = empty_flags()
    if state["status"] == COMPLETED:
        state["flags"] = flags
        return

    period = state["currentPeriod"]
    pts = state["points"]
    deuce_at = points_to(cfg, period) - 1
    flags["deuce"] = pts["A"] >= deuce_at and pts["B"] >= deuce_at

    sets_needed = periods_needed(cfg.get("bestOf"))
    for side in SIDES:
        if _wins_set(cfg, period, pts[side] + 1, pts[other(side)]):
            flags["setPoint"] = True
            flags["pointFor"].append(side)
            if sets_needed and count_won(state, side) + 1 >= sets_needed:
                flags["matchPoint"] = True
    state["flags"] = flags


def _rotate_on_side_out(order: List[int]) -> List[int]:
    return order[-1:] + order[:-1]


def _close_set(state: Dict, side: str) -> None:
    sets_needed = periods_needed(state["config"].get("bestOf"))
    close_period(state, side, state["points"], sets_needed)
    state["points"] = {"A": 0, "B": 0}
    state["timeoutActive"] = None
    if state["status"] != COMPLETED:
        # the side that received first in the previous set serves first
        state["setFirstServer"] = other(state["setFirstServer"])
        state["holder"] = state["setFirstServer"]


def apply(event: Dict, state: Dict) -> Dict:
    """Apply an event to the current state.

    Handles ``POINT``, ``TIMEOUT``, ``END_TIMEOUT``, ``ROTATE``,
    ``TOGGLE_SERVICE``, ``START_PERIOD`` and ``END_PERIOD``.
    """

    etype = event.get("type")
    cfg = state["config"]

    if etype == "POINT":
        side = side_of(event)
        if side is None or not is_live(state):
            return state
        state["timeoutActive"] = None
        if state["holder"] != side:
            state["rotations"][side] = _rotate_on_side_out(state["rotations"][side])
            state["holder"] = side
        state["points"][side] += 1
        if _wins_set(cfg, state["currentPeriod"], state["points"][side], state["points"][other(side)]):
            _close_set(state, side)

    elif etype == "TIMEOUT":
        side = side_of(event)
        if side is None or not is_live(state) or state["timeoutActive"]:
            return state
        index = state["currentPeriod"] - 1
        if state["timeouts"][side][index] >= cfg["timeoutsPerSet"]:
            return state
        state["timeouts"][side][index] += 1
        state["timeoutActive"] = side

    elif etype == "END_TIMEOUT":
        if not state["timeoutActive"]:
            return state
        state["timeoutActive"] = None

    elif etype == "ROTATE":
        side = side_of(event)
        if side is None or state["status"] == COMPLETED:
            return state
        order = state["rotations"][side]
        state["rotations"][side] = order[1:] + order[:1]

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
        _close_set(state, side)

    else:
        return state

    _refresh_flags(state)
    return state


def timeouts_left(state: Dict, side: str) -> int:
    index = state["currentPeriod"] - 1
    return max(state["config"]["timeoutsPerSet"] - state["timeouts"][side][index], 0)


def summary(state: Dict) -> Dict:
    return {
        "points": state["points"],
        "sets": {side: count_won(state, side) for side in SIDES},
        "setScores": state["periodScores"],
        "server": state["holder"],
        "rotations": state["rotations"],
        "timeouts": {
            side: state["timeouts"][side][: state["currentPeriod"]]
            for side in SIDES
        },
        "config": state["config"],
    }


def breakdown(state: Dict) -> List[Dict]:
    return period_breakdown(state)


def describe_result(state: Dict, names: Dict[str, str]) -> str:
    return sets.describe_result(state, names)


def _legal_finish(state: Dict, period: int, ps: int, po: int) -> bool:
    return _wins_set(state["config"], period, ps, po)


def record_sets(set_scores: Iterable[Tuple[int, int]], state: Optional[Dict] = None):
    """Generate rally events to reach the provided set scores."""

    state = state or init_state({})
    return sets.record_sets(set_scores, state, apply, _legal_finish)
