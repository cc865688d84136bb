from __future__ import annotations

import logging
from typing import Any, Protocol

from cfbstats.database.query import Query
from cfbstats.utils.env import getenv_choice


logger = logging.getLogger(__name__)

STORE_KINDS = ("supabase", "sqlite")


class StoreError(RuntimeError):
    """The store could not answer a query (network, HTTP error, database error)."""


class Store(Protocol):
    def execute(self, query: Query) -> list[dict[str, Any]]:
        ...


def store_from_env() -> Store:
    """
    Build the configured store.

    CFB_STORE=supabase (default) talks to the hosted PostgREST API;
    CFB_STORE=sqlite reads the local mirror at CFB_DB_PATH.
    """
    kind = getenv_choice("CFB_STORE", STORE_KINDS, "supabase")
    if kind == "sqlite":
        from cfbstats.database.connection import connect
        from cfbstats.database.sqlite_store import SqliteStore

        logger.info("Using sqlite store")
        return SqliteStore(connect())
    from cfbstats.database.supabase_client import SupabaseClient, SupabaseConfig

    return SupabaseClient(SupabaseConfig.from_env())
