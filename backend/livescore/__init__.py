"""Multi-sport live scoring core.

The package never initialises error reporting by itself. A host application
calls :func:`init_sentry` once at start-up (it reads ``SENTRY_DSN``,
``SENTRY_ENVIRONMENT`` and ``SENTRY_TRACES_SAMPLE_RATE``); until then the
failures the engine reports are only logged.
"""

from .engine import ScoringEngine
from .exceptions import (
    DomainException,
    MatchInProgressError,
    MatchNotFoundError,
    UnsupportedSportError,
)
from .history import HistoryStack
from .store import LifecycleStore, MemoryBackend, SqlBackend
from .utils.sentry import init_sentry

__all__ = [
    "DomainException",
    "HistoryStack",
    "LifecycleStore",
    "MatchInProgressError",
    "MatchNotFoundError",
    "MemoryBackend",
    "ScoringEngine",
    "SqlBackend",
    "UnsupportedSportError",
    "init_sentry",
]
