from __future__ import annotations

import sqlite3
import threading
from typing import Any

from cfbstats.database.query import AnyOf, Predicate, Query
from cfbstats.database.store import StoreError


def _q(ident: str) -> str:
    # Identifiers are already validated by Query; quote to dodge keywords.
    return f'"{ident}"'


def _predicate_sql(p: Predicate, params: list[Any]) -> str:
    col = _q(p.column)
    if p.op == "is_null":
        return f"{col} IS NULL"
    if p.op == "not_null":
        return f"{col} IS NOT NULL"
    if p.op == "in":
        if not p.value:
            return "0"
        params.extend(p.value)
        return f"{col} IN ({','.join('?' for _ in p.value)})"
    if p.op == "icontains":
        params.append(f"%{str(p.value or '').lower()}%")
        return f"LOWER({col}) LIKE ?"
    sql_op = {"eq": "=", "neq": "!=", "gt": ">", "gte": ">=", "lt": "<", "lte": "<="}[p.op]
    params.append(p.value)
    return f"{col} {sql_op} ?"


def compile_query(query: Query) -> tuple[str, list[Any]]:
    params: list[Any] = []
    cols = "*" if query.columns == ("*",) else ", ".join(_q(c) for c in query.columns)
    sql = f"SELECT {cols} FROM {_q(query.table)}"

    clauses: list[str] = []
    for cond in query.where:
        if isinstance(cond, AnyOf):
            inner = [_predicate_sql(p, params) for p in cond.predicates]
            clauses.append("(" + " OR ".join(inner or ["0"]) + ")")
        else:
            clauses.append(_predicate_sql(cond, params))
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)

    if query.order_by:
        parts = []
        for o in query.order_by:
            part = f"{_q(o.column)} {'ASC' if o.ascending else 'DESC'}"
            part += " NULLS LAST" if o.nulls_last else " NULLS FIRST"
            parts.append(part)
        sql += " ORDER BY " + ", ".join(parts)

    if query.row_limit is not None or query.row_offset:
        sql += " LIMIT ? OFFSET ?"
        params.append(-1 if query.row_limit is None else query.row_limit)
        params.append(query.row_offset)
    return sql, params


class SqliteStore:
    """Executes Query objects against the local sqlite mirror."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn
        self._lock = threading.Lock()

    def execute(self, query: Query) -> list[dict[str, Any]]:
        sql, params = compile_query(query)
        try:
            with self._lock:
                cur = self._conn.execute(sql, params)
                cols = [c[0] for c in cur.description] if cur.description else []
                return [dict(zip(cols, row)) for row in cur.fetchall()]
        except sqlite3.Error as e:
            raise StoreError(f"sqlite query on {query.table} failed: {e}") from e
