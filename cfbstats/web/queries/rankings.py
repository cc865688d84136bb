from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd

from cfbstats.database.query import Query
from cfbstats.database.store import Store
from cfbstats.web.context import RequestContext, gather
from cfbstats.web.queries.shared import _safe_int, _uniq_sorted_int, get_team_lookup, team_fields
from cfbstats.web.result import best_effort_rows


logger = logging.getLogger(__name__)

FBS_POLLS: tuple[str, ...] = ("AP Top 25", "Coaches Poll", "Playoff Committee Rankings")
PRIMARY_POLL = "AP Top 25"

RANKING_COLUMNS = "season,week,poll,school,rank,conference,first_place_votes,points"


def ranking_sort_key(r: dict[str, Any]) -> tuple:
    """Ranked ascending, then unranked (votes only) by points descending, then school."""
    rank = _safe_int(r.get("rank"))
    points = _safe_int(r.get("points")) or 0
    return (rank is None, rank if rank is not None else 0, -points, r.get("school") or "")


def _dedupe_best(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # A school can appear twice when the feed repeats a row; keep its best placing.
    best: dict[str, dict[str, Any]] = {}
    for r in rows:
        school = r.get("school")
        if not school:
            continue
        prev = best.get(school)
        if prev is None or ranking_sort_key(r) < ranking_sort_key(prev):
            best[school] = r
    return sorted(best.values(), key=ranking_sort_key)


def get_available_ranking_seasons(store: Store, *, ctx: Optional[RequestContext] = None) -> list[int]:
    rows = best_effort_rows(
        store,
        Query("rankings").select("season").in_("poll", FBS_POLLS).order("season", ascending=False),
        ctx,
    )
    return _uniq_sorted_int([r.get("season") for r in rows], desc=True)


def get_available_polls(store: Store, season: int, *, ctx: Optional[RequestContext] = None) -> list[str]:
    """Polls published for the season, in the store's order of first appearance."""
    rows = best_effort_rows(
        store,
        Query("rankings").select("poll").eq("season", season).in_("poll", FBS_POLLS),
        ctx,
    )
    polls: list[str] = []
    for r in rows:
        p = r.get("poll")
        if p and p not in polls:
            polls.append(p)
    return polls


def choose_default_poll(polls: list[str]) -> str:
    if PRIMARY_POLL in polls:
        return PRIMARY_POLL
    return polls[0] if polls else PRIMARY_POLL


def get_latest_ranking_week(store: Store, season: int, poll: str, *, ctx: Optional[RequestContext] = None) -> int:
    rows = best_effort_rows(
        store,
        Query("rankings").select("week").eq("season", season).eq("poll", poll).order("week", ascending=False).limit(1),
        ctx,
    )
    week = _safe_int(rows[0].get("week")) if rows else None
    return week or 1


def get_rankings_for_week(
    store: Store,
    season: int,
    week: int,
    poll: str,
    *,
    ctx: Optional[RequestContext] = None,
) -> list[dict[str, Any]]:
    """
    One poll release, enriched with logo/color, W-L record and movement vs the
    previous week (positive = moved up). Best-effort.
    """
    lookup = get_team_lookup(store, ctx=ctx)
    base = Query("rankings").eq("season", season).eq("poll", poll)
    parts = gather(
        ctx or RequestContext(),
        current=lambda: best_effort_rows(store, base.select(RANKING_COLUMNS).eq("week", week).order("rank"), ctx),
        previous=lambda: best_effort_rows(store, base.select("school,rank,points").eq("week", week - 1), ctx),
        records=lambda: best_effort_rows(
            store,
            Query("records").select("team,total__wins,total__losses").eq("year", season).eq("classification", "fbs"),
            ctx,
        ),
    )

    prev_rank: dict[str, int] = {}
    for r in _dedupe_best(parts["previous"].data_or([])):
        rank = _safe_int(r.get("rank"))
        if rank is not None:
            prev_rank[r["school"]] = rank
    records = {r["team"]: r for r in parts["records"].data_or([]) if r.get("team")}

    out = []
    for r in _dedupe_best(parts["current"].data_or([])):
        school = r["school"]
        rank = _safe_int(r.get("rank"))
        prev = prev_rank.get(school)
        rec = records.get(school) or {}
        out.append({
            "season": _safe_int(r.get("season")),
            "week": _safe_int(r.get("week")),
            "poll": r.get("poll"),
            "school": school,
            "conference": r.get("conference"),
            "rank": rank,
            "points": _safe_int(r.get("points")) or 0,
            "first_place_votes": _safe_int(r.get("first_place_votes")) or 0,
            **team_fields(lookup, school),
            "wins": _safe_int(rec.get("total__wins")) or 0,
            "losses": _safe_int(rec.get("total__losses")) or 0,
            "prev_rank": prev,
            "movement": (prev - rank) if (prev is not None and rank is not None) else None,
        })
    return out


def get_rankings_all_weeks(store: Store, season: int, poll: str, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    """
    Every published week of a poll, ascending. A team that dropped out of a
    week simply has no entry for it.
    """
    lookup = get_team_lookup(store, ctx=ctx)
    rows = best_effort_rows(
        store,
        Query("rankings")
        .select(RANKING_COLUMNS)
        .eq("season", season)
        .eq("poll", poll)
        .order("week")
        .order("rank"),
        ctx,
    )

    by_week: dict[int, list[dict[str, Any]]] = {}
    for r in rows:
        w = _safe_int(r.get("week"))
        if w is None:
            continue
        by_week.setdefault(w, []).append(r)

    out = []
    for w in sorted(by_week):
        entries = [
            {
                "school": r["school"],
                "rank": _safe_int(r.get("rank")),
                "points": _safe_int(r.get("points")) or 0,
                "conference": r.get("conference"),
                "color": team_fields(lookup, r["school"])["color"],
            }
            for r in _dedupe_best(by_week[w])
        ]
        out.append({"week": w, "rankings": entries})
    return out


def rankings_matrix(all_weeks: list[dict[str, Any]]) -> pd.DataFrame:
    """
    School x week rank table for a bump chart. Weeks a school was not ranked
    are NaN (a gap), never zero. Rows ordered by best rank reached, then school.
    """
    records = [
        {"school": e["school"], "week": wk["week"], "rank": e["rank"]}
        for wk in all_weeks
        for e in wk["rankings"]
        if e.get("rank") is not None
    ]
    weeks = [wk["week"] for wk in all_weeks]
    if not records:
        return pd.DataFrame(columns=weeks, dtype="float64")

    df = pd.DataFrame.from_records(records)
    matrix = df.pivot_table(index="school", columns="week", values="rank", aggfunc="min")
    matrix = matrix.reindex(columns=weeks).astype("float64")
    best = matrix.min(axis=1)
    order = sorted(matrix.index, key=lambda school: (best[school], school))
    return matrix.loc[order]
