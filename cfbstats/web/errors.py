from __future__ import annotations


class QueryError(RuntimeError):
    pass


class DataUnavailable(QueryError):
    """A must-succeed read could not reach the store (or the scouting API)."""


class InvalidCategory(QueryError, ValueError):
    def __init__(self, category: str, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Unknown leaderboard category {category!r}; expected one of {', '.join(allowed)}")
        self.category = category
        self.allowed = allowed


class RequestCancelled(QueryError):
    pass
