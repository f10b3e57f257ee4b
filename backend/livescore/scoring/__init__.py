"""Scoring engines for the various sports.

Each module exposes ``init_state``, ``apply``, ``is_period_over``,
``is_match_over``, ``summary``, ``breakdown`` and ``describe_result``.
"""

from types import ModuleType

from ..exceptions import UnsupportedSportError
from . import badminton, cricket, kabaddi, volleyball

RULES = {
    badminton.SPORT: badminton,
    cricket.SPORT: cricket,
    kabaddi.SPORT: kabaddi,
    volleyball.SPORT: volleyball,
}


def get_rules(sport: str) -> ModuleType:
    """Return the rule module registered for ``sport``."""

    try:
        return RULES[(sport or "").strip().lower()]
    except KeyError:
        raise UnsupportedSportError(sport) from None


__all__ = [
    "RULES",
    "badminton",
    "cricket",
    "get_rules",
    "kabaddi",
    "volleyball",
]
