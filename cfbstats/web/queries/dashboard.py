from __future__ import annotations

import logging
from typing import Any, Optional

from cfbstats.database.query import Query
from cfbstats.database.store import Store
from cfbstats.web.context import RequestContext, gather
from cfbstats.web.queries.games import _winner
from cfbstats.web.queries.shared import _safe_float, _safe_int, get_team_lookup, team_fields
from cfbstats.web.result import best_effort_rows


logger = logging.getLogger(__name__)

RANKING_WEIGHTS = {"offense": 0.4, "defense": 0.4, "special_teams": 0.2}

# Rank normalisation assumes ~134 FBS teams: rank 1 -> ~100, rank 134 -> 0.
MAX_TEAMS = 134
MISSING_RANK = 999


def get_top_movers(store: Store, season: int, *, ctx: Optional[RequestContext] = None, count: int = 3) -> dict[str, list[dict[str, Any]]]:
    """Biggest EPA/play risers and fallers vs the prior season."""
    lookup = get_team_lookup(store, ctx=ctx)
    rows = best_effort_rows(
        store,
        Query("team_season_trajectory", tag="trajectory")
        .select("team,epa_per_play,epa_delta")
        .eq("season", season)
        .not_null("epa_delta"),
        ctx,
    )
    fbs = [r for r in rows if r.get("team") in lookup]

    def mover(r: dict[str, Any], direction: str) -> dict[str, Any]:
        return {
            "team": r["team"],
            **team_fields(lookup, r["team"]),
            "current_epa": _safe_float(r.get("epa_per_play")) or 0.0,
            "epa_delta": _safe_float(r.get("epa_delta")) or 0.0,
            "direction": direction,
        }

    up = sorted((r for r in fbs if (_safe_float(r.get("epa_delta")) or 0) > 0), key=lambda r: (-float(r["epa_delta"]), r["team"]))
    down = sorted((r for r in fbs if (_safe_float(r.get("epa_delta")) or 0) < 0), key=lambda r: (float(r["epa_delta"]), r["team"]))
    return {
        "risers": [mover(r, "up") for r in up[:count]],
        "fallers": [mover(r, "down") for r in down[:count]],
    }


def get_recent_games(store: Store, season: int, limit: int = 5, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    """Most recent completed FBS-vs-FBS games, newest first (id desc breaks date ties)."""
    if limit <= 0:
        return []
    lookup = get_team_lookup(store, ctx=ctx)
    rows = best_effort_rows(
        store,
        Query("games", tag="recent games")
        .select("id,home_team,away_team,home_points,away_points,start_date,conference_game")
        .eq("season", season)
        .eq("completed", True)
        .not_null("home_points")
        .not_null("away_points")
        .order("start_date", ascending=False)
        .order("id", ascending=False)
        .limit(limit * 3),  # extra rows, non-FBS games are dropped below
        ctx,
    )

    out = []
    for g in rows:
        home, away = g.get("home_team"), g.get("away_team")
        if home not in lookup or away not in lookup:
            continue
        hp = _safe_int(g.get("home_points")) or 0
        ap = _safe_int(g.get("away_points")) or 0
        out.append({
            "id": _safe_int(g.get("id")) or 0,
            "home_team": home,
            "home_points": hp,
            "away_team": away,
            "away_points": ap,
            "date": g.get("start_date") or "",
            "conference_game": bool(g.get("conference_game")),
            "winner": _winner(hp, ap),
            **team_fields(lookup, home, "home_"),
            **team_fields(lookup, away, "away_"),
        })
        if len(out) >= limit:
            break
    return out


def composite_score(off_rank: Optional[int], def_rank: Optional[int], st_rating: Optional[float]) -> float:
    off = max(0.0, (MAX_TEAMS - (off_rank or MISSING_RANK)) / MAX_TEAMS * 100)
    dfn = max(0.0, (MAX_TEAMS - (def_rank or MISSING_RANK)) / MAX_TEAMS * 100)
    # SP+ special teams rating is roughly -3..+3
    st = min(100.0, max(0.0, ((st_rating or 0.0) + 3) / 6 * 100))
    return (
        off * RANKING_WEIGHTS["offense"]
        + dfn * RANKING_WEIGHTS["defense"]
        + st * RANKING_WEIGHTS["special_teams"]
    )


def get_standings(store: Store, season: int, limit: int = 10, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    lookup = get_team_lookup(store, ctx=ctx)
    parts = gather(
        ctx or RequestContext(),
        metrics=lambda: best_effort_rows(
            store, Query("team_epa_season").select("team,off_epa_rank,def_epa_rank").eq("season", season), ctx
        ),
        special_teams=lambda: best_effort_rows(
            store, Query("team_special_teams_sos").select("team,sp_st_rating").eq("season", season), ctx
        ),
        records=lambda: best_effort_rows(
            store,
            Query("records").select("team,total__wins,total__losses").eq("year", season).eq("classification", "fbs"),
            ctx,
        ),
    )
    metrics = {r["team"]: r for r in parts["metrics"].data_or([]) if r.get("team")}
    st = {r["team"]: _safe_float(r.get("sp_st_rating")) for r in parts["special_teams"].data_or([]) if r.get("team")}
    records = {r["team"]: r for r in parts["records"].data_or([]) if r.get("team")}

    standings = []
    for team in lookup:
        m = metrics.get(team)
        if not m:
            continue
        rec = records.get(team) or {}
        standings.append({
            "team": team,
            **team_fields(lookup, team),
            "wins": _safe_int(rec.get("total__wins")) or 0,
            "losses": _safe_int(rec.get("total__losses")) or 0,
            "composite_score": composite_score(
                _safe_int(m.get("off_epa_rank")), _safe_int(m.get("def_epa_rank")), st.get(team)
            ),
        })

    standings.sort(key=lambda s: (-s["composite_score"], s["team"]))
    for i, s in enumerate(standings, start=1):
        s["rank"] = i
    return standings[:limit]


def _leaders(rows: list[dict[str, Any]], key: str, lookup: dict, top_n: int) -> list[dict[str, Any]]:
    # Teams without a value for this metric are left off the board.
    valued = [(r["team"], _safe_float(r.get(key))) for r in rows]
    ranked = sorted(((team, v) for team, v in valued if v is not None), key=lambda tv: (-tv[1], tv[0]))
    return [{"team": team, **team_fields(lookup, team), "value": v} for team, v in ranked[:top_n]]


def get_stat_leaders(store: Store, season: int, top_n: int = 5, *, ctx: Optional[RequestContext] = None) -> dict[str, list[dict[str, Any]]]:
    lookup = get_team_lookup(store, ctx=ctx)
    parts = gather(
        ctx or RequestContext(),
        metrics=lambda: best_effort_rows(
            store,
            Query("team_epa_season").select("team,epa_per_play,success_rate,explosiveness").eq("season", season),
            ctx,
        ),
        havoc=lambda: best_effort_rows(
            store, Query("defensive_havoc").select("team,havoc_rate").eq("season", season), ctx
        ),
    )
    metrics = [r for r in parts["metrics"].data_or([]) if r.get("team") in lookup]
    havoc = [r for r in parts["havoc"].data_or([]) if r.get("team") in lookup]

    return {
        "epa": _leaders(metrics, "epa_per_play", lookup, top_n),
        "havoc": _leaders(havoc, "havoc_rate", lookup, top_n),
        "success_rate": _leaders(metrics, "success_rate", lookup, top_n),
        "explosiveness": _leaders(metrics, "explosiveness", lookup, top_n),
    }
