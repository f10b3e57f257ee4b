"""Match lifecycle store.

Every match id ``M`` owns these records, namespaced with
:data:`livescore.config.KEY_PREFIX`:

* ``{prefix}:{M}`` - the :class:`~livescore.schemas.Match` record.
* ``{prefix}:{M}:summary`` - the live score state keyed by sport, its
  ``lastUpdated`` timestamp.
* ``{prefix}:{M}:history:{sport}:{n}`` - undo snapshot ``n`` (oldest is
  ``0``), one record per snapshot so an action only writes its own entry.
* ``{prefix}:{M}:completed`` - the match merged with its
  :class:`~livescore.schemas.MatchResult`, written exactly once.

Backends are plain key/value stores with last-write-wins semantics.
"""

import copy
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select

from . import config, db
from .exceptions import MatchNotFoundError
from .models import ScoreRecord
from .schemas import LoadedMatch, Match, MatchResult
from .services.results import completed_record
from .services.validation import validate_roster_for_sport
from .time_utils import utc_now_iso

logger = logging.getLogger(__name__)

SUMMARY_SUFFIX = "summary"
COMPLETED_SUFFIX = "completed"
HISTORY_SUFFIX = "history"


def match_key(match_id: str, prefix: Optional[str] = None) -> str:
    return f"{prefix or config.KEY_PREFIX}:{match_id}"


def summary_key(match_id: str, prefix: Optional[str] = None) -> str:
    return f"{match_key(match_id, prefix)}:{SUMMARY_SUFFIX}"


def completed_key(match_id: str, prefix: Optional[str] = None) -> str:
    return f"{match_key(match_id, prefix)}:{COMPLETED_SUFFIX}"


def history_key(match_id: str, sport: str, index: int, prefix: Optional[str] = None) -> str:
    return f"{history_prefix(match_id, sport, prefix)}{index:06d}"


def history_prefix(match_id: str, sport: str = "", prefix: Optional[str] = None) -> str:
    base = f"{match_key(match_id, prefix)}:{HISTORY_SUFFIX}:"
    return f"{base}{sport}:" if sport else base


class MemoryBackend:
    """Process-local backend. Values are copied on the way in and out."""

    def __init__(self) -> None:
        self._data: Dict[str, Dict[str, Any]] = {}

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def set(self, key: str, value: Dict[str, Any], *, match_id: str) -> None:
        self._data[key] = copy.deepcopy(value)

    def delete(self, *keys: str) -> None:
        for key in keys:
            self._data.pop(key, None)

    def keys(self, suffix: str = "", *, prefix: str = "") -> List[str]:
        return sorted(k for k in self._data if k.startswith(prefix) and k.endswith(suffix))


class SqlBackend:
    """Relational backend storing one ``score_record`` row per key."""

    def __init__(self, *, create_tables: bool = True) -> None:
        if create_tables:
            db.create_all()

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        with db.get_session() as session:
            record = session.get(ScoreRecord, key)
            return copy.deepcopy(record.payload) if record is not None else None

    def set(self, key: str, value: Dict[str, Any], *, match_id: str) -> None:
        with db.get_session() as session, session.begin():
            record = session.get(ScoreRecord, key)
            if record is None:
                session.add(ScoreRecord(key=key, match_id=match_id, payload=value))
            else:
                record.payload = value
                record.match_id = match_id

    def delete(self, *keys: str) -> None:
        if not keys:
            return
        with db.get_session() as session, session.begin():
            session.execute(delete(ScoreRecord).where(ScoreRecord.key.in_(keys)))

    def keys(self, suffix: str = "", *, prefix: str = "") -> List[str]:
        stmt = select(ScoreRecord.key).order_by(ScoreRecord.key)
        if prefix:
            stmt = stmt.where(ScoreRecord.key.startswith(prefix, autoescape=True))
        if suffix:
            stmt = stmt.where(ScoreRecord.key.endswith(suffix, autoescape=True))
        with db.get_session() as session:
            return list(session.scalars(stmt))


class LifecycleStore:
    """Typed access to the per-match records of a backend."""

    def __init__(
        self,
        backend=None,
        *,
        prefix: Optional[str] = None,
        persist_history: Optional[bool] = None,
    ) -> None:
        self.backend = backend if backend is not None else MemoryBackend()
        self.prefix = config._canon_prefix(prefix) if prefix else config.KEY_PREFIX
        self.persist_history = (
            config.PERSIST_HISTORY if persist_history is None else persist_history
        )

    def create(self, match: Match) -> Match:
        """Persist a new match record after checking its rosters."""

        validate_roster_for_sport(match.sport, match.roster())
        self._put_match(match)
        logger.info("Created %s match %s", match.sport, match.id)
        return match

    def load(self, match_id: str) -> LoadedMatch:
        """Read every record of ``match_id``.

        Raises :class:`MatchNotFoundError` when neither the match record nor
        its completed record exists.
        """

        raw_match = self.backend.get(match_key(match_id, self.prefix))
        completed = self.backend.get(completed_key(match_id, self.prefix))
        if raw_match is None and completed is None:
            raise MatchNotFoundError(match_id)

        result = None
        if completed is not None:
            result = MatchResult.model_validate(completed["result"])
            if raw_match is None:
                raw_match = {k: v for k, v in completed.items() if k != "result"}
        match = Match.model_validate(raw_match)

        summary = self.backend.get(summary_key(match_id, self.prefix)) or {}
        state = summary.get(match.sport)
        history = self.load_history(match_id, match.sport)
        return LoadedMatch(
            match=match,
            state=state,
            history=history,
            result=result,
            lastUpdated=summary.get("lastUpdated"),
        )

    def save(
        self,
        match_id: str,
        *,
        match: Optional[Match] = None,
        state: Optional[Dict[str, Any]] = None,
        result: Optional[MatchResult] = None,
    ) -> None:
        """Write whichever parts are given. Missing parts are left as stored."""

        if match is not None:
            self._put_match(match)
        if state is not None:
            self.save_state(match_id, state)
        if result is not None:
            if match is None:
                match = self.load(match_id).match
            self.save_completed(match, result)

    def save_state(self, match_id: str, state: Dict[str, Any]) -> None:
        key = summary_key(match_id, self.prefix)
        sport = state["sport"]
        summary = self.backend.get(key) or {}
        summary[sport] = state
        summary["lastUpdated"] = utc_now_iso()
        self.backend.set(key, summary, match_id=match_id)

    def load_history(self, match_id: str, sport: str) -> List[Dict[str, Any]]:
        if not self.persist_history:
            return []
        keys = self.backend.keys(prefix=history_prefix(match_id, sport, self.prefix))
        return [entry for entry in map(self.backend.get, keys) if entry is not None]

    def push_history(self, match_id: str, index: int, snapshot: Dict[str, Any]) -> None:
        """Store undo snapshot ``index``. Earlier snapshots are not rewritten."""

        if self.persist_history:
            key = history_key(match_id, snapshot["sport"], index, self.prefix)
            self.backend.set(key, snapshot, match_id=match_id)

    def pop_history(self, match_id: str, sport: str, index: int) -> None:
        if self.persist_history:
            self.backend.delete(history_key(match_id, sport, index, self.prefix))

    def replace_history(
        self, match_id: str, sport: str, entries: List[Dict[str, Any]]
    ) -> None:
        if not self.persist_history:
            return
        self._clear_history(match_id, sport)
        for index, snapshot in enumerate(entries):
            self.push_history(match_id, index, snapshot)

    def save_completed(self, match: Match, result: MatchResult) -> bool:
        """Write the completed record once. Returns ``False`` if it already existed."""

        key = completed_key(match.id, self.prefix)
        if self.backend.get(key) is not None:
            logger.info("Match %s already has a completed record", match.id)
            return False
        self.backend.set(key, completed_record(match, result), match_id=match.id)
        self._put_match(match.with_status("completed"))
        logger.info("Stored result for match %s: %s", match.id, result.summary)
        return True

    def is_completed(self, match_id: str) -> bool:
        return self.backend.get(completed_key(match_id, self.prefix)) is not None

    def completed_ids(self) -> List[str]:
        start = len(self.prefix) + 1
        end = -(len(COMPLETED_SUFFIX) + 1)
        return [
            key[start:end]
            for key in self.backend.keys(f":{COMPLETED_SUFFIX}")
            if key.startswith(f"{self.prefix}:")
        ]

    def delete(self, match_id: str) -> None:
        self.backend.delete(
            match_key(match_id, self.prefix),
            summary_key(match_id, self.prefix),
            completed_key(match_id, self.prefix),
        )
        self._clear_history(match_id)
        logger.info("Deleted records of match %s", match_id)

    def _clear_history(self, match_id: str, sport: str = "") -> None:
        keys = self.backend.keys(prefix=history_prefix(match_id, sport, self.prefix))
        self.backend.delete(*keys)

    def _put_match(self, match: Match) -> None:
        self.backend.set(
            match_key(match.id, self.prefix),
            match.model_dump(mode="json"),
            match_id=match.id,
        )
