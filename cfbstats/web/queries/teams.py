from __future__ import annotations

from typing import Any, Optional

from cfbstats.database.query import Query
from cfbstats.database.store import Store
from cfbstats.web.context import RequestContext, gather
from cfbstats.web.queries.shared import _safe_float, _safe_int, get_team_by_slug
from cfbstats.web.result import best_effort_rows


def _first(rows: list[dict[str, Any]]) -> Optional[dict[str, Any]]:
    return rows[0] if rows else None


def get_team_metrics(store: Store, team: str, season: int, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    row = _first(best_effort_rows(store, Query("team_epa_season").eq("team", team).eq("season", season).limit(1), ctx))
    if row is None:
        return None
    return {
        "team": team,
        "season": season,
        "games": _safe_int(row.get("games")),
        "plays": _safe_int(row.get("plays")),
        "epa_per_play": _safe_float(row.get("epa_per_play")),
        "success_rate": _safe_float(row.get("success_rate")),
        "explosiveness": _safe_float(row.get("explosiveness")),
        "off_epa_rank": _safe_int(row.get("off_epa_rank")),
        "def_epa_rank": _safe_int(row.get("def_epa_rank")),
    }


def get_team_style(store: Store, team: str, season: int, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    row = _first(best_effort_rows(store, Query("team_style_profile").eq("team", team).eq("season", season).limit(1), ctx))
    if row is None:
        return None
    return {
        "team": team,
        "season": season,
        "run_rate": _safe_float(row.get("run_rate")),
        "pass_rate": _safe_float(row.get("pass_rate")),
        "epa_rushing": _safe_float(row.get("epa_rushing")),
        "epa_passing": _safe_float(row.get("epa_passing")),
        "plays_per_game": _safe_float(row.get("plays_per_game")),
        "offensive_identity": row.get("offensive_identity"),
    }


def get_team_trajectory(store: Store, team: str, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    """Season-by-season EPA, win% and recruiting rank, oldest season first."""
    rows = best_effort_rows(store, Query("team_season_trajectory").eq("team", team).order("season"), ctx)
    return [
        {
            "season": _safe_int(r.get("season")),
            "epa_per_play": _safe_float(r.get("epa_per_play")),
            "epa_delta": _safe_float(r.get("epa_delta")),
            "win_pct": _safe_float(r.get("win_pct")),
            "recruiting_rank": _safe_int(r.get("recruiting_rank")),
        }
        for r in rows
    ]


def get_team_drive_patterns(store: Store, team: str, season: int, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    """
    Drives grouped by start yard, end yard and outcome for the field-arc chart,
    most frequent first. Best-effort.
    """
    rows = best_effort_rows(
        store,
        Query("team_drive_patterns", tag="drive patterns")
        .select("outcome,start_yard,end_yard,count,avg_plays,avg_yards")
        .eq("team", team)
        .eq("season", season)
        .order("count", ascending=False)
        .order("outcome")
        .order("start_yard"),
        ctx,
    )
    return [
        {
            "outcome": r.get("outcome"),
            "start_yard": _safe_int(r.get("start_yard")),
            "end_yard": _safe_int(r.get("end_yard")),
            "count": _safe_int(r.get("count")) or 0,
            "avg_plays": _safe_float(r.get("avg_plays")),
            "avg_yards": _safe_float(r.get("avg_yards")),
        }
        for r in rows
        if r.get("outcome")
    ]


def get_team_page(store: Store, slug: str, season: int, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    """
    Team header plus metrics, style, trajectory and drive patterns. Returns
    None for an unknown slug; raises DataUnavailable if the team itself
    cannot be read.
    """
    team = get_team_by_slug(store, slug, ctx=ctx)
    if team is None:
        return None
    school = team["school"]
    parts = gather(
        ctx or RequestContext(),
        metrics=lambda: get_team_metrics(store, school, season, ctx=ctx),
        style=lambda: get_team_style(store, school, season, ctx=ctx),
        trajectory=lambda: get_team_trajectory(store, school, ctx=ctx),
        drive_patterns=lambda: get_team_drive_patterns(store, school, season, ctx=ctx),
    )
    return {
        "team": team,
        "season": season,
        "metrics": parts["metrics"].data,
        "style": parts["style"].data,
        "trajectory": parts["trajectory"].data_or([]),
        "drive_patterns": parts["drive_patterns"].data_or([]),
    }
