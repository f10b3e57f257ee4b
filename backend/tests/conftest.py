import os
import sys

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Honour an externally provided DATABASE_URL (e.g. CI may point at Postgres)
# but fall back to an in-memory SQLite database so local runs stay isolated.
DEFAULT_DB_URL = os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from livescore import db  # noqa: E402
from livescore.schemas import Match  # noqa: E402
from livescore.store import LifecycleStore, MemoryBackend, SqlBackend  # noqa: E402


@pytest.fixture()
def fresh_db(monkeypatch):
    """Give each SQL-backed test its own engine (and in-memory database)."""

    monkeypatch.setenv("DATABASE_URL", os.getenv("DATABASE_URL") or DEFAULT_DB_URL)
    db.dispose()
    yield
    if db.engine is not None:
        db.Base.metadata.drop_all(db.engine)
    db.dispose()


@pytest.fixture()
def memory_store():
    return LifecycleStore(MemoryBackend(), prefix="match", persist_history=True)


@pytest.fixture()
def sql_store(fresh_db):
    return LifecycleStore(SqlBackend(), prefix="match", persist_history=True)


@pytest.fixture(params=["memory", "sql"])
def any_store(request):
    if request.param == "memory":
        return request.getfixturevalue("memory_store")
    return request.getfixturevalue("sql_store")


def _players(prefix, count):
    return [{"id": f"{prefix}{i}", "name": f"Player {prefix}{i}"} for i in range(1, count + 1)]


@pytest.fixture()
def make_match():
    """Factory for ``Match`` records: ``make_match("kabaddi", players=7)``."""

    def _make(sport="badminton", *, match_id="m1", players=0, **extra):
        data = {
            "id": match_id,
            "sport": sport,
            "contestants": {
                "A": {"name": "Team A", "players": _players("a", players)},
                "B": {"name": "Team B", "players": _players("b", players)},
            },
        }
        data.update(extra)
        return Match.model_validate(data)

    return _make
