from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional, Union

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Operators understood by every Store implementation.
OPS = {"eq", "neq", "gt", "gte", "lt", "lte", "in", "is_null", "not_null", "icontains"}


def check_ident(name: str) -> str:
    if not _IDENT_RE.match(name or ""):
        raise ValueError(f"Invalid column/table name: {name!r}")
    return name


@dataclass(frozen=True)
class Predicate:
    column: str
    op: str
    value: Any = None

    def __post_init__(self) -> None:
        check_ident(self.column)
        if self.op not in OPS:
            raise ValueError(f"Unknown operator: {self.op!r}")
        if self.op == "in" and not isinstance(self.value, tuple):
            object.__setattr__(self, "value", tuple(self.value or ()))


@dataclass(frozen=True)
class AnyOf:
    """OR group: the row matches when any of the predicates match."""

    predicates: tuple[Predicate, ...]


Condition = Union[Predicate, AnyOf]


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True
    nulls_last: bool = True


def eq(column: str, value: Any) -> Predicate:
    return Predicate(column, "eq", value)


def icontains(column: str, needle: str) -> Predicate:
    return Predicate(column, "icontains", needle)


@dataclass(frozen=True)
class Query:
    """
    Read-only query description: table, columns, predicates, ordering, limit.

    Builder methods return a new Query so partially built queries can be shared:

        base = Query("games").eq("season", 2025).eq("completed", True)
        week2 = base.eq("week", 2).order("start_date").order("id")
    """

    table: str
    columns: tuple[str, ...] = ("*",)
    where: tuple[Condition, ...] = ()
    order_by: tuple[Order, ...] = ()
    row_limit: Optional[int] = None
    row_offset: int = 0
    schema: Optional[str] = None
    tag: str = field(default="", compare=False)

    def __post_init__(self) -> None:
        check_ident(self.table)
        for c in self.columns:
            if c != "*":
                check_ident(c)

    # --- builders -------------------------------------------------------
    def select(self, *columns: str) -> "Query":
        cols: list[str] = []
        for c in columns:
            cols.extend(p.strip() for p in c.split(",") if p.strip())
        return replace(self, columns=tuple(cols) or ("*",))

    def filter(self, *conditions: Condition) -> "Query":
        return replace(self, where=self.where + tuple(conditions))

    def eq(self, column: str, value: Any) -> "Query":
        return self.filter(Predicate(column, "eq", value))

    def neq(self, column: str, value: Any) -> "Query":
        return self.filter(Predicate(column, "neq", value))

    def gt(self, column: str, value: Any) -> "Query":
        return self.filter(Predicate(column, "gt", value))

    def gte(self, column: str, value: Any) -> "Query":
        return self.filter(Predicate(column, "gte", value))

    def lt(self, column: str, value: Any) -> "Query":
        return self.filter(Predicate(column, "lt", value))

    def lte(self, column: str, value: Any) -> "Query":
        return self.filter(Predicate(column, "lte", value))

    def in_(self, column: str, values: Iterable[Any]) -> "Query":
        return self.filter(Predicate(column, "in", tuple(values)))

    def is_null(self, column: str) -> "Query":
        return self.filter(Predicate(column, "is_null"))

    def not_null(self, column: str) -> "Query":
        return self.filter(Predicate(column, "not_null"))

    def icontains(self, column: str, needle: str) -> "Query":
        return self.filter(Predicate(column, "icontains", needle))

    def any_of(self, *predicates: Predicate) -> "Query":
        return self.filter(AnyOf(tuple(predicates)))

    def order(self, column: str, *, ascending: bool = True, nulls_last: bool = True) -> "Query":
        check_ident(column)
        return replace(self, order_by=self.order_by + (Order(column, ascending, nulls_last),))

    def limit(self, n: int) -> "Query":
        return replace(self, row_limit=max(int(n), 0))

    def offset(self, n: int) -> "Query":
        return replace(self, row_offset=max(int(n), 0))

    def in_schema(self, schema: str) -> "Query":
        return replace(self, schema=check_ident(schema))

    def describe(self) -> str:
        return self.tag or self.table

    # --- PostgREST rendering -------------------------------------------
    def to_postgrest_params(self) -> list[tuple[str, str]]:
        """Render as PostgREST query-string pairs (repeatable keys, so a list)."""
        params: list[tuple[str, str]] = [("select", ",".join(self.columns))]
        for cond in self.where:
            if isinstance(cond, AnyOf):
                inner = ",".join(_postgrest_inline(p) for p in cond.predicates)
                params.append(("or", f"({inner})"))
            else:
                params.append((cond.column, _postgrest_value(cond)))
        if self.order_by:
            parts = []
            for o in self.order_by:
                s = f"{o.column}.{'asc' if o.ascending else 'desc'}"
                s += ".nullslast" if o.nulls_last else ".nullsfirst"
                parts.append(s)
            params.append(("order", ",".join(parts)))
        if self.row_limit is not None:
            params.append(("limit", str(self.row_limit)))
        if self.row_offset:
            params.append(("offset", str(self.row_offset)))
        return params


def _literal(v: Any) -> str:
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    return str(v)


def _quoted(v: Any) -> str:
    s = _literal(v)
    if any(ch in s for ch in ',()"'):
        return '"' + s.replace('"', '\\"') + '"'
    return s


def _postgrest_value(p: Predicate) -> str:
    if p.op == "in":
        return "in.(" + ",".join(_quoted(v) for v in p.value) + ")"
    if p.op == "is_null":
        return "is.null"
    if p.op == "not_null":
        return "not.is.null"
    if p.op == "icontains":
        needle = str(p.value or "").replace("*", "")
        return f"ilike.*{needle}*"
    return f"{p.op}.{_literal(p.value)}"


def _postgrest_inline(p: Predicate) -> str:
    # Inside or=(...) values containing separators must be quoted.
    if p.op in {"eq", "neq", "gt", "gte", "lt", "lte"}:
        return f"{p.column}.{p.op}.{_quoted(p.value)}"
    return f"{p.column}.{_postgrest_value(p)}"
