from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from cfbstats.database.query import Query
from cfbstats.database.store import StoreError
from cfbstats.utils.env import getenv_float, getenv_str


logger = logging.getLogger(__name__)


class SupabaseError(StoreError):
    pass


@dataclass(frozen=True)
class SupabaseConfig:
    url: str
    service_role_key: str
    timeout_seconds: float = 15.0
    page_size: int = 1000

    @classmethod
    def from_env(cls) -> "SupabaseConfig":
        url = getenv_str("SUPABASE_URL")
        key = getenv_str("SUPABASE_SERVICE_ROLE_KEY") or getenv_str("SUPABASE_ANON_KEY")
        if not url or not key:
            raise SupabaseError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (or SUPABASE_ANON_KEY) are required")
        return cls(
            url=url,
            service_role_key=key,
            timeout_seconds=getenv_float("SUPABASE_TIMEOUT_SECONDS", default=15.0),
        )


class SupabaseClient:
    """
    Minimal read-only PostgREST client.

    A requests.Session is safe to share across the worker threads of one page
    fan-out; nothing else here is mutable.
    """

    def __init__(self, config: SupabaseConfig, *, session: Optional[requests.Session] = None) -> None:
        self._cfg = config
        self._base_url = config.url.rstrip("/") + "/rest/v1"
        self._session = session or requests.Session()

    def _headers(self, schema: Optional[str]) -> dict[str, str]:
        h = {
            "apikey": self._cfg.service_role_key,
            "Authorization": f"Bearer {self._cfg.service_role_key}",
            "Accept": "application/json",
        }
        if schema:
            h["Accept-Profile"] = schema
        return h

    def _get(self, query: Query) -> list[dict[str, Any]]:
        url = f"{self._base_url}/{query.table}"
        try:
            resp = self._session.get(
                url,
                params=query.to_postgrest_params(),
                headers=self._headers(query.schema),
                timeout=self._cfg.timeout_seconds,
            )
        except requests.RequestException as e:
            raise SupabaseError(f"Request failed: GET {query.table}: {e}") from e

        if not resp.ok:
            detail = (resp.text or "")[:200]
            raise SupabaseError(f"HTTP {resp.status_code} for GET {query.table}: {detail}")
        try:
            data = resp.json()
        except ValueError as e:
            raise SupabaseError(f"Invalid JSON from {query.table}") from e
        if not isinstance(data, list):
            raise SupabaseError(f"Unexpected payload from {query.table}: {type(data).__name__}")
        return data

    def execute(self, query: Query) -> list[dict[str, Any]]:
        # PostgREST caps responses (1000 rows by default); page until a short page.
        if query.row_limit is not None and query.row_limit <= self._cfg.page_size:
            return self._get(query)

        out: list[dict[str, Any]] = []
        remaining = query.row_limit
        offset = query.row_offset
        while True:
            size = self._cfg.page_size if remaining is None else min(self._cfg.page_size, remaining)
            rows = self._get(query.limit(size).offset(offset))
            out.extend(rows)
            if remaining is not None:
                remaining -= len(rows)
                if remaining <= 0:
                    break
            if len(rows) < size:
                break
            offset += len(rows)
        logger.debug("Fetched %d rows from %s in pages", len(out), query.table)
        return out
