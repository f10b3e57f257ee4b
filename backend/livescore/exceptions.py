class DomainException(Exception):
    """Base class for domain-specific exceptions."""

    def __init__(
        self,
        title: str,
        *,
        code: str,
        detail: str | None = None,
    ) -> None:
        super().__init__(detail or title)
        self.title = title
        self.detail = detail
        self.code = code


class UnsupportedSportError(DomainException):
    def __init__(self, sport: str) -> None:
        super().__init__(
            title="Unsupported sport",
            detail=f"no scoring rules registered for sport '{sport}'",
            code="unsupported_sport",
        )
        self.sport = sport


class MatchNotFoundError(DomainException):
    def __init__(self, match_id: str) -> None:
        super().__init__(
            title="Match not found",
            detail=f"match '{match_id}' not found",
            code="match_not_found",
        )
        self.match_id = match_id


class MatchInProgressError(DomainException):
    def __init__(self, match_id: str | None, status: str) -> None:
        super().__init__(
            title="Match in progress",
            detail=f"match '{match_id}' cannot be finalized while {status}",
            code="match_in_progress",
        )
        self.match_id = match_id
        self.status = status
