"""State helpers shared by the sport rule modules.

Every rule module keeps its scoreboard in a plain, JSON-ready ``dict`` so the
same value can be persisted, snapshotted for undo and compared for equality.
The keys common to all sports are:

``sport``, ``config``, ``currentPeriod`` (1-based), ``periodsWon`` (one slot
per period, ``"A"``/``"B"``/``"draw"``/``None``), ``points`` (points in the
active period, or running totals for cumulative sports), ``periodScores``
(score of each closed period), ``holder`` (side serving or raiding),
``flags``, ``status`` and ``winner``.
"""

from typing import Dict, List, Optional

SIDES = ("A", "B")

IN_PROGRESS = "in_progress"
PERIOD_OVER = "period_over"
COMPLETED = "completed"

DRAW = "draw"


def other(side: str) -> str:
    return "B" if side == "A" else "A"


def periods_needed(best_of: Optional[int]) -> Optional[int]:
    return best_of // 2 + 1 if best_of else None


def empty_flags() -> Dict:
    return {"setPoint": False, "matchPoint": False, "deuce": False, "pointFor": []}


def base_state(sport: str, config: Dict, periods: int, holder: Optional[str]) -> Dict:
    return {
        "sport": sport,
        "config": config,
        "currentPeriod": 1,
        "periodsWon": [None] * periods,
        "points": {"A": 0, "B": 0},
        "periodScores": [],
        "holder": holder,
        "flags": empty_flags(),
        "status": IN_PROGRESS,
        "winner": None,
    }


def side_of(event: Dict, key: str = "by") -> Optional[str]:
    side = event.get(key)
    return side if side in SIDES else None


def initial_side(config: Dict, key: str, default: str = "A") -> str:
    side = config.get(key, default)
    return side if side in SIDES else default


def count_won(state: Dict, side: str) -> int:
    return sum(1 for winner in state["periodsWon"] if winner == side)


def leader(scores: Dict) -> str:
    """Side ahead in ``scores``, or ``DRAW`` when level."""

    if scores["A"] > scores["B"]:
        return "A"
    if scores["B"] > scores["A"]:
        return "B"
    return DRAW


def is_live(state: Dict) -> bool:
    return state["status"] == IN_PROGRESS


def start_period(state: Dict) -> bool:
    """Leave the ``period_over`` interval. Returns ``False`` when not applicable."""

    if state["status"] != PERIOD_OVER:
        return False
    state["status"] = IN_PROGRESS
    return True


def close_period(state: Dict, period_winner: str, score: Dict, periods_to_win: Optional[int]) -> None:
    """Record the end of the active period and advance the state machine.

    The match completes when ``period_winner`` reaches ``periods_to_win``, or
    when the last period slot has been filled.
    """

    index = state["currentPeriod"] - 1
    state["periodsWon"][index] = period_winner
    state["periodScores"].append({"A": score["A"], "B": score["B"]})
    state["flags"] = empty_flags()

    decided = (
        periods_to_win is not None
        and period_winner in SIDES
        and count_won(state, period_winner) >= periods_to_win
    )
    if decided:
        state["status"] = COMPLETED
        state["winner"] = period_winner
    elif state["currentPeriod"] >= len(state["periodsWon"]):
        state["status"] = COMPLETED
        state["winner"] = None
    else:
        state["currentPeriod"] += 1
        state["status"] = PERIOD_OVER


def period_breakdown(state: Dict) -> List[Dict]:
    rows = []
    for index, score in enumerate(state["periodScores"]):
        winner = state["periodsWon"][index] if index < len(state["periodsWon"]) else None
        rows.append(
            {"period": index + 1, "A": score["A"], "B": score["B"], "winner": winner}
        )
    return rows


def is_period_over(state: Dict) -> bool:
    return state["status"] in (PERIOD_OVER, COMPLETED)


def is_match_over(state: Dict) -> bool:
    return state["status"] == COMPLETED
