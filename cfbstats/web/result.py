from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, Optional, TypeVar

from cfbstats.database.query import Query
from cfbstats.database.store import Store, StoreError
from cfbstats.web.errors import DataUnavailable

if TYPE_CHECKING:
    from cfbstats.web.context import RequestContext


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Status(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """
    Outcome of one fetch: OK(data), EMPTY (the store answered with nothing) or
    FAILED(reason). Callers choose whether EMPTY and FAILED render the same way.
    """

    status: Status
    data: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls, data: T) -> "FetchResult[T]":
        return cls(Status.OK, data)

    @classmethod
    def empty(cls, data: Optional[T] = None) -> "FetchResult[T]":
        return cls(Status.EMPTY, data)

    @classmethod
    def failed(cls, reason: str) -> "FetchResult[T]":
        return cls(Status.FAILED, None, reason)

    @classmethod
    def of(cls, value: Any) -> "FetchResult[Any]":
        if value is None:
            return cls.empty(None)
        if isinstance(value, (list, tuple, dict, set)) and not value:
            return cls.empty(value)
        empty = getattr(value, "empty", None)  # pandas DataFrame
        if isinstance(empty, bool) and empty:
            return cls.empty(value)
        return cls.ok(value)

    @property
    def is_ok(self) -> bool:
        return self.status is Status.OK

    @property
    def is_empty(self) -> bool:
        return self.status is Status.EMPTY

    @property
    def is_failed(self) -> bool:
        return self.status is Status.FAILED

    def unwrap(self) -> Optional[T]:
        if self.status is Status.FAILED:
            raise DataUnavailable(self.reason or "data unavailable")
        return self.data

    def data_or(self, default: T) -> T:
        if self.status is Status.FAILED or self.data is None:
            return default
        return self.data

    def to_dict(self) -> dict[str, Any]:
        return {"status": self.status.value, "data": self.data, "reason": self.reason}


def _check(ctx: Optional["RequestContext"]) -> None:
    if ctx is not None:
        ctx.raise_if_cancelled()


def fetch_rows(store: Store, query: Query, ctx: Optional["RequestContext"] = None) -> FetchResult[list[dict[str, Any]]]:
    _check(ctx)
    try:
        rows = store.execute(query)
    except StoreError as e:
        return FetchResult.failed(f"{query.describe()}: {e}")
    _check(ctx)
    return FetchResult.ok(rows) if rows else FetchResult.empty([])


def best_effort_rows(store: Store, query: Query, ctx: Optional["RequestContext"] = None) -> list[dict[str, Any]]:
    """List/default reads: a failure degrades to [] and is logged."""
    res = fetch_rows(store, query, ctx)
    if res.is_failed:
        logger.warning("Best-effort read degraded to empty (%s)", res.reason)
        return []
    return res.data or []


def required_rows(store: Store, query: Query, ctx: Optional["RequestContext"] = None) -> list[dict[str, Any]]:
    """Detail reads: a failure raises DataUnavailable for the caller's error view."""
    res = fetch_rows(store, query, ctx)
    if res.is_failed:
        logger.error("Required read failed (%s)", res.reason)
    return res.unwrap() or []
