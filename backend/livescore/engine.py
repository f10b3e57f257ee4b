"""Sport-agnostic scoring engine.

The engine owns one match session: it picks the rule module for the match's
sport, applies actions through it, keeps the undo history and writes every
transition to the lifecycle store. Actions that the rules ignore (scoring
after completion, a second click on a finished set, unknown action types)
leave the state untouched and record nothing.
"""

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from .exceptions import MatchInProgressError
from .history import HistoryStack
from .schemas import Match, MatchResult
from .scoring import get_rules
from .scoring.common import COMPLETED
from .services.results import compile_result
from .time_utils import utc_now
from .utils.sentry import report_exception

logger = logging.getLogger(__name__)


def rule_config(match: Match) -> Dict[str, Any]:
    """Per-match rule overrides, with the match format hint as ``bestOf``."""

    cfg = dict(match.rules)
    if match.bestOf and "bestOf" not in cfg:
        cfg["bestOf"] = match.bestOf
    return cfg


class ScoringEngine:
    def __init__(self, store=None) -> None:
        self.store = store
        self.match: Optional[Match] = None
        self.rules = None
        self.history = HistoryStack()
        self.result: Optional[MatchResult] = None

    @classmethod
    def from_store(cls, store, match_id: str) -> Tuple["ScoringEngine", Dict[str, Any]]:
        """Resume a session from ``store``. Returns the engine and its state."""

        loaded = store.load(match_id)
        engine = cls(store)
        state = engine.initialize(loaded.match, loaded.state, history=loaded.history)
        engine.result = loaded.result
        return engine, state

    def initialize(
        self,
        match: Match,
        prior_state: Optional[Dict[str, Any]] = None,
        history: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Start or resume scoring ``match``.

        A supplied ``prior_state`` is returned unchanged. Raises
        :class:`~livescore.exceptions.UnsupportedSportError` when no rule
        module is registered for ``match.sport``.
        """

        rules = get_rules(match.sport)
        self.rules = rules
        self.match = match
        self.history = HistoryStack.from_entries(history)
        self.result = None

        if prior_state is not None:
            logger.info(
                "Resuming %s match %s at period %s (%d undo steps)",
                match.sport,
                match.id,
                prior_state.get("currentPeriod"),
                len(self.history),
            )
            return prior_state

        state = rules.init_state(rule_config(match), roster=match.roster())
        logger.info("Starting %s match %s", match.sport, match.id)
        if match.status == "scheduled":
            self.match = match.with_status("live")
            self._persist(state, match=self.match, reset_history=True)
        else:
            self._persist(state, reset_history=True)
        return state

    def apply_action(self, state: Dict[str, Any], action: Dict[str, Any]) -> Dict[str, Any]:
        """Apply ``action`` and return the new state.

        ``state`` itself is never modified. When the action changes nothing
        the very same ``state`` object is returned and no history is kept.
        """

        self._require_rules()
        if self.result is not None:
            logger.debug("Ignoring %s: match %s is finalized", action.get("type"), self.match.id)
            return state

        before = copy.deepcopy(state)
        after = self.rules.apply(action, copy.deepcopy(state))
        if after == before:
            logger.debug("Ignoring %s for match %s", action.get("type"), self.match.id)
            return state

        self.history.push(before)
        if after["status"] != before["status"] or after["currentPeriod"] != before["currentPeriod"]:
            self._log_transition(before, after)
        self._persist(after, pushed=before)
        return after

    def undo(self, state: Dict[str, Any]) -> Dict[str, Any]:
        """Revert the last applied action; ``state`` is returned as is when
        there is nothing to undo or the match has been finalized."""

        self._require_rules()
        if self.result is not None or not self.history:
            return state
        previous = self.history.pop()
        logger.debug("Undo on match %s (%d steps left)", self.match.id, len(self.history))
        self._persist(previous, popped=True)
        return previous

    def finalize(self, state: Dict[str, Any]) -> MatchResult:
        """Compile and store the result of a completed match.

        The completed record is written only once; later calls return the
        same result.
        """

        self._require_rules()
        if self.result is not None:
            return self.result
        if state["status"] != COMPLETED:
            raise MatchInProgressError(self.match.id, state["status"])

        result = compile_result(self.match, state, completed_at=utc_now())
        self.result = result
        self.match = self.match.with_status("completed")
        logger.info("Finalized match %s: %s", self.match.id, result.summary)
        if self.store is not None:
            try:
                self.store.save_completed(self.match, result)
            except Exception as exc:
                logger.exception("Failed to store result of match %s", self.match.id)
                report_exception(exc)
        return result

    def can_undo(self) -> bool:
        return self.result is None and bool(self.history)

    def is_period_over(self, state: Dict[str, Any]) -> bool:
        self._require_rules()
        return self.rules.is_period_over(state)

    def is_match_over(self, state: Dict[str, Any]) -> bool:
        self._require_rules()
        return self.rules.is_match_over(state)

    def summary(self, state: Dict[str, Any]) -> Dict[str, Any]:
        self._require_rules()
        return self.rules.summary(state)

    def _require_rules(self) -> None:
        if self.rules is None or self.match is None:
            raise RuntimeError("ScoringEngine.initialize() must be called first")

    def _log_transition(self, before: Dict[str, Any], after: Dict[str, Any]) -> None:
        if after["status"] == COMPLETED:
            logger.info(
                "Match %s completed; winner=%s periods=%s",
                self.match.id,
                after.get("winner"),
                after["periodsWon"],
            )
        elif after["currentPeriod"] != before["currentPeriod"]:
            logger.info(
                "Match %s: period %s closed (%s)",
                self.match.id,
                before["currentPeriod"],
                after["periodsWon"][before["currentPeriod"] - 1],
            )

    def _persist(
        self,
        state: Dict[str, Any],
        match: Optional[Match] = None,
        *,
        pushed: Optional[Dict[str, Any]] = None,
        popped: bool = False,
        reset_history: bool = False,
    ) -> None:
        """Write ``state`` and the one history entry that changed with it."""

        if self.store is None:
            return
        match_id = self.match.id
        depth = len(self.history)
        try:
            self.store.save(match_id, match=match, state=state)
            if reset_history:
                self.store.replace_history(match_id, state["sport"], self.history.entries())
            elif pushed is not None:
                self.store.push_history(match_id, depth - 1, pushed)
            elif popped:
                self.store.pop_history(match_id, state["sport"], depth)
        except Exception as exc:
            logger.exception("Failed to persist score state of match %s", self.match.id)
            report_exception(exc)
