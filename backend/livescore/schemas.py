from typing import Any, Dict, List, Literal, Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .time_utils import coerce_utc

Side = Literal["A", "B"]

MatchStatus = Literal["scheduled", "live", "completed"]

ACTION_TYPES = (
    "POINT",
    "START_PERIOD",
    "END_PERIOD",
    "TOGGLE_SERVICE",
    "TIMEOUT",
    "END_TIMEOUT",
    "ROTATE",
    "ALL_OUT",
    "TOGGLE_PLAYER",
    "START_RAID",
    "END_RAID",
    "DELIVERY",
    "EXTRA",
    "WICKET",
    "SWAP_STRIKE",
    "SET_BATTERS",
    "SET_BOWLER",
)


def _clean_text(value: Any, field: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValueError(f"{field} must not be empty")
    return trimmed


class Player(BaseModel):
    id: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=100)
    onCourt: bool = True
    number: Optional[str] = None
    position: Optional[str] = None

    @field_validator("id", "name", mode="before")
    @classmethod
    def _validate_text(cls, value: str, info) -> str:
        return _clean_text(value, info.field_name)

    @field_validator("number", mode="before")
    @classmethod
    def _normalize_number(cls, value: Any) -> Optional[str]:
        if value is None or value == "":
            return None
        return str(value)


class Contestant(BaseModel):
    """A team or player pair taking one side of a match."""

    name: str = Field(..., min_length=1, max_length=200)
    players: List[Player] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        return _clean_text(value, "name")

    @model_validator(mode="after")
    def _unique_players(self) -> "Contestant":
        ids = [p.id for p in self.players]
        if len(ids) != len(set(ids)):
            raise ValueError("player ids must be unique within a contestant")
        return self


class Venue(BaseModel):
    name: str = "Local Venue"
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None


class Match(BaseModel):
    """A scheduled contest between side ``A`` and side ``B``.

    Records are frozen; status transitions go through :meth:`with_status`.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1, max_length=100)
    sport: str = Field(..., min_length=1, max_length=50)
    contestants: Dict[Side, Contestant]
    venue: Optional[Venue] = None
    scheduledAt: Optional[datetime] = None
    format: Optional[str] = None
    bestOf: Optional[int] = Field(default=None, ge=1)
    rules: Dict[str, Any] = Field(default_factory=dict)
    status: MatchStatus = "scheduled"

    @field_validator("id", mode="before")
    @classmethod
    def _validate_id(cls, value: str) -> str:
        trimmed = _clean_text(value, "id")
        if ":" in trimmed or any(ch.isspace() for ch in trimmed):
            raise ValueError("id must not contain whitespace or ':'")
        return trimmed

    @field_validator("sport", mode="before")
    @classmethod
    def _normalize_sport(cls, value: str) -> str:
        return _clean_text(value, "sport").lower()

    @field_validator("scheduledAt")
    @classmethod
    def _normalize_scheduled_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return coerce_utc(value)

    @model_validator(mode="after")
    def _require_both_sides(self) -> "Match":
        if set(self.contestants) != {"A", "B"}:
            raise ValueError("contestants must include sides A and B")
        return self

    def contestant(self, side: str) -> Contestant:
        return self.contestants[side]  # type: ignore[index]

    def name_of(self, side: Optional[str]) -> Optional[str]:
        if side not in ("A", "B"):
            return None
        return self.contestant(side).name

    def roster(self) -> Dict[str, List[Dict[str, Any]]]:
        """Players per side as plain dicts, the shape rule modules consume."""

        return {
            side: [p.model_dump() for p in contestant.players]
            for side, contestant in self.contestants.items()
        }

    def with_status(self, status: MatchStatus) -> "Match":
        return self.model_copy(update={"status": status})


class ActionIn(BaseModel):
    """Validated scoring action coming from a UI collaborator.

    The engine itself accepts plain dicts and ignores anything it does not
    understand; this schema lets callers reject malformed input early.
    """

    model_config = ConfigDict(extra="forbid")

    type: Literal[ACTION_TYPES]  # type: ignore[valid-type]
    by: Optional[Side] = None
    side: Optional[Side] = None
    kind: Optional[Literal["raid", "tackle", "bonus", "wide", "no_ball", "bye", "leg_bye"]] = None
    playerId: Optional[str] = None
    outcome: Optional[Literal["success", "failure", "empty"]] = None
    runs: Optional[int] = Field(default=None, ge=0, le=7)
    dismissal: Optional[str] = None
    incoming: Optional[str] = None
    striker: Optional[str] = None
    nonStriker: Optional[str] = None

    @model_validator(mode="after")
    def _validate_fields(self) -> "ActionIn":
        required = {
            "POINT": ("by",),
            "TIMEOUT": ("by",),
            "ROTATE": ("by",),
            "START_RAID": ("by",),
            "ALL_OUT": ("side",),
            "TOGGLE_PLAYER": ("side", "playerId"),
            "END_RAID": ("outcome",),
            "DELIVERY": ("runs",),
            "EXTRA": ("kind",),
            "WICKET": ("dismissal",),
            "SET_BATTERS": ("striker", "nonStriker"),
            "SET_BOWLER": ("playerId",),
        }.get(self.type, ())
        missing = [field for field in required if getattr(self, field) is None]
        if missing:
            raise ValueError(
                f"{self.type} actions require: {', '.join(missing)}"
            )
        if self.type == "EXTRA" and self.kind not in ("wide", "no_ball", "bye", "leg_bye"):
            raise ValueError("EXTRA kind must be wide, no_ball, bye or leg_bye")
        if self.type == "POINT" and self.kind not in (None, "raid", "tackle", "bonus"):
            raise ValueError("POINT kind must be raid, tackle or bonus")
        return self

    def to_action(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class PeriodScore(BaseModel):
    """Final score of one set, half or innings."""

    period: int
    A: int
    B: int
    winner: Optional[str] = None


class MatchResult(BaseModel):
    """Immutable summary written once when a match completes."""

    model_config = ConfigDict(frozen=True)

    matchId: str
    sport: str
    winner: Optional[Side] = None
    winnerName: Optional[str] = None
    loserName: Optional[str] = None
    isDraw: bool = False
    periodsWon: Dict[Side, int] = Field(default_factory=lambda: {"A": 0, "B": 0})
    periods: List[PeriodScore] = Field(default_factory=list)
    summary: str
    stats: Dict[str, Any] = Field(default_factory=dict)
    completedAt: datetime

    @field_validator("completedAt")
    @classmethod
    def _normalize_completed_at(cls, value: datetime) -> datetime:
        return coerce_utc(value)


class LoadedMatch(BaseModel):
    """Everything the lifecycle store knows about one match id."""

    match: Match
    state: Optional[Dict[str, Any]] = None
    history: List[Dict[str, Any]] = Field(default_factory=list)
    result: Optional[MatchResult] = None
    lastUpdated: Optional[str] = None
