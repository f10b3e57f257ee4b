from typing import Any, Dict, List, Optional, Sequence

class ValidationError(Exception):
    """Raised when submitted scores or rosters are invalid."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def validate_period_scores(
    sets: List[Dict[str, Any]],
    *,
    max_sets: Optional[int] = None,
) -> None:
    """Validate a list of period score dictionaries.

    Rules:
    - At least one period is required
    - Number of periods must be <= ``max_sets`` (if provided)
    - Each period must be an object ``{A, B}``
    - ``A`` and ``B`` must be integers >= 0 (booleans are rejected)
    - Ties are not allowed (``A`` != ``B``)

    Upper bounds depend on the sport's rule config and are checked by the
    caller against ``pointsTo`` and ``maxPoint``.
    """

    if not isinstance(sets, list) or len(sets) == 0:
        raise ValidationError("At least one set is required.")
    if max_sets is not None and len(sets) > max_sets:
        raise ValidationError(f"Too many sets. Max allowed is {max_sets}.")

    for i, s in enumerate(sets, start=1):
        if not isinstance(s, dict):
            raise ValidationError(f"Set #{i} must be an object with fields A and B.")
        if "A" not in s or "B" not in s:
            raise ValidationError(f"Set #{i} must include both A and B.")

        vA, vB = s["A"], s["B"]

        # Reject booleans explicitly (bool is a subclass of int in Python)
        if isinstance(vA, bool) or isinstance(vB, bool):
            raise ValidationError(f"Set #{i} scores must be integers (not booleans).")

        try:
            a = int(vA)
            b = int(vB)
        except (TypeError, ValueError):
            raise ValidationError(f"Set #{i} scores must be integers.")

        if a < 0 or b < 0:
            raise ValidationError(f"Set #{i} scores must be >= 0.")
        if a == b:
            raise ValidationError(f"Set #{i} cannot be a tie.")

    return None


SPORT_RULES: dict[str, dict[str, object]] = {
    "badminton": {"team_sizes": {1, 2}},
    "volleyball": {"max_players": 14},
    "kabaddi": {"max_players": 12},
    "cricket": {"min_players": 2, "max_players": 11},
}


def _sport_label(sport_id: str) -> str:
    return sport_id.replace("_", " ").title() or "Sport"


def validate_roster_for_sport(
    sport_id: str, side_players: Dict[str, Sequence[Any]]
) -> None:
    """Check roster sizes of both contestants.

    Empty rosters are always accepted: scoring then happens at contestant level
    without per-player attribution.
    """

    rules = SPORT_RULES.get(sport_id)
    if not rules:
        return

    label = _sport_label(sport_id)
    team_sizes = rules.get("team_sizes")
    min_players = rules.get("min_players")
    max_players = rules.get("max_players")

    for side, players in side_players.items():
        size = len(players)
        if size == 0:
            continue
        if isinstance(team_sizes, set) and team_sizes and size not in team_sizes:
            formatted = ", ".join(str(v) for v in sorted(team_sizes))
            raise ValidationError(
                f"{label} matches must use {formatted} players per side."
            )
        if isinstance(min_players, int) and size < min_players:
            raise ValidationError(
                f"{label} side {side} needs at least {min_players} player(s)."
            )
        if isinstance(max_players, int) and size > max_players:
            raise ValidationError(
                f"{label} side {side} supports at most {max_players} player(s)."
            )
