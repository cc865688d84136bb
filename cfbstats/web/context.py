from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Any, Callable, Hashable, Optional

from cfbstats.database.store import StoreError
from cfbstats.utils.env import getenv_int
from cfbstats.web.errors import DataUnavailable, RequestCancelled
from cfbstats.web.result import FetchResult


logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.05


class RequestContext:
    """
    Per-request state shared by every fetch of one page: a cancellation flag
    and the fan-out width. Cancelling stops new fetches from being issued and
    makes in-flight ones discard their result.
    """

    def __init__(self, *, max_workers: Optional[int] = None) -> None:
        self._cancelled = threading.Event()
        self.max_workers = max(1, max_workers or getenv_int("CFB_FANOUT_WORKERS", 8))
        self._memo: dict[Hashable, Any] = {}
        self._memo_lock = threading.Lock()

    def memoize(self, key: Hashable, fn: Callable[[], Any]) -> Any:
        """Request-scoped memo; empty/falsy results are not kept so a later call can retry."""
        with self._memo_lock:
            if key in self._memo:
                return self._memo[key]
        value = fn()
        if not value:
            return value
        with self._memo_lock:
            return self._memo.setdefault(key, value)

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise RequestCancelled("request cancelled")


def _run(ctx: RequestContext, name: str, fn: Callable[[], Any]) -> FetchResult[Any]:
    ctx.raise_if_cancelled()
    try:
        value = fn()
    except (DataUnavailable, StoreError) as e:
        logger.warning("Region %s failed: %s", name, e)
        return FetchResult.failed(str(e))
    ctx.raise_if_cancelled()
    return FetchResult.of(value)


def gather(ctx: RequestContext, **tasks: Callable[[], Any]) -> dict[str, FetchResult[Any]]:
    """
    Run independent fetches concurrently and wait for all of them.

    Each task owns its failure boundary: store failures become FAILED results
    instead of failing the whole page. Other exceptions (e.g. InvalidCategory)
    propagate. If the context is cancelled, pending tasks are dropped and
    RequestCancelled is raised.
    """
    ctx.raise_if_cancelled()
    if not tasks:
        return {}

    pool = ThreadPoolExecutor(max_workers=min(ctx.max_workers, len(tasks)), thread_name_prefix="cfb-fetch")
    futures: dict[Future[FetchResult[Any]], str] = {
        pool.submit(_run, ctx, name, fn): name for name, fn in tasks.items()
    }
    results: dict[str, FetchResult[Any]] = {}
    try:
        pending = set(futures)
        while pending:
            done, pending = wait(pending, timeout=_POLL_SECONDS, return_when=FIRST_COMPLETED)
            for fut in done:
                results[futures[fut]] = fut.result()
            if pending and ctx.cancelled:
                raise RequestCancelled("request cancelled")
    except BaseException:
        for fut in futures:
            fut.cancel()
        pool.shutdown(wait=False, cancel_futures=True)
        raise
    pool.shutdown(wait=True)
    return {name: results[name] for name in tasks}
