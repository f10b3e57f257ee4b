"""Turn a completed score state into a :class:`MatchResult`."""

import copy
from datetime import datetime
from typing import Any, Dict

from ..exceptions import MatchInProgressError
from ..schemas import Match, MatchResult, PeriodScore
from ..scoring import get_rules
from ..scoring.common import COMPLETED, SIDES, count_won, other


def compile_result(
    match: Match, final_state: Dict[str, Any], *, completed_at: datetime
) -> MatchResult:
    """Build the immutable result record of a finished match.

    Pure function: ``final_state`` is not modified and the same arguments
    always give an equal result. Raises
    :class:`MatchInProgressError` unless the state is ``completed``.
    """

    if final_state["status"] != COMPLETED:
        raise MatchInProgressError(match.id, final_state["status"])

    rules = get_rules(final_state["sport"])
    names = {side: match.name_of(side) for side in SIDES}
    winner = final_state.get("winner")
    if winner not in SIDES:
        winner = None

    return MatchResult(
        matchId=match.id,
        sport=final_state["sport"],
        winner=winner,
        winnerName=names[winner] if winner else None,
        loserName=names[other(winner)] if winner else None,
        isDraw=winner is None,
        periodsWon={side: count_won(final_state, side) for side in SIDES},
        periods=[PeriodScore(**row) for row in rules.breakdown(final_state)],
        summary=rules.describe_result(final_state, names),
        stats=copy.deepcopy(rules.summary(final_state)),
        completedAt=completed_at,
    )


def completed_record(match: Match, result: MatchResult) -> Dict[str, Any]:
    """The ``completed`` record: the match merged with its result."""

    record = match.model_dump(mode="json")
    record["status"] = "completed"
    record["result"] = result.model_dump(mode="json")
    return record
