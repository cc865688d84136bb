from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from cfbstats.database.query import Query, eq
from cfbstats.database.store import Store
from cfbstats.web.context import RequestContext
from cfbstats.web.queries.shared import (
    POSTSEASON_MIN_WEEK,
    REGULAR_SEASON_MAX_WEEK,
    _safe_int,
    _uniq_sorted_int,
    get_team_lookup,
    team_fields,
)
from cfbstats.web.result import best_effort_rows, required_rows


logger = logging.getLogger(__name__)

PHASES = ("regular", "postseason", "all")

# Explicit columns, never select=*
GAME_COLUMNS = "id,season,week,start_date,home_team,away_team,home_points,away_points,conference_game,completed"


@dataclass(frozen=True)
class GamesFilter:
    season: int
    phase: str = "regular"
    week: Optional[int] = None  # None or 0 = every week in the phase
    conference: Optional[str] = None  # at least one side in this conference
    team: Optional[str] = None
    completed_only: bool = True

    def __post_init__(self) -> None:
        if self.phase not in PHASES:
            raise ValueError(f"phase must be one of {PHASES}, got {self.phase!r}")


def _winner(home_points: Optional[int], away_points: Optional[int]) -> Optional[str]:
    if home_points is None or away_points is None:
        return None
    if home_points > away_points:
        return "home"
    if away_points > home_points:
        return "away"
    return "tie"


def _shape_game(g: dict[str, Any], lookup: dict) -> dict[str, Any]:
    hp = _safe_int(g.get("home_points"))
    ap = _safe_int(g.get("away_points"))
    return {
        "id": _safe_int(g.get("id")),
        "season": _safe_int(g.get("season")),
        "week": _safe_int(g.get("week")),
        "start_date": g.get("start_date") or "",
        "home_team": g.get("home_team"),
        "away_team": g.get("away_team"),
        "home_points": hp,
        "away_points": ap,
        "conference_game": bool(g.get("conference_game")),
        "completed": bool(g.get("completed")),
        "winner": _winner(hp, ap) if g.get("completed") else None,
        "margin": abs(hp - ap) if (hp is not None and ap is not None and g.get("completed")) else None,
        **team_fields(lookup, g.get("home_team"), "home_"),
        **team_fields(lookup, g.get("away_team"), "away_"),
    }


def build_games_query(f: GamesFilter) -> Query:
    q = Query("games", tag="games").select(GAME_COLUMNS).eq("season", f.season)
    if f.completed_only:
        q = q.eq("completed", True).not_null("home_points").not_null("away_points")
    if f.phase == "regular":
        q = q.lte("week", REGULAR_SEASON_MAX_WEEK)
    elif f.phase == "postseason":
        q = q.gte("week", POSTSEASON_MIN_WEEK)
    if f.week and f.week > 0:
        q = q.eq("week", int(f.week))
    if f.team:
        q = q.any_of(eq("home_team", f.team), eq("away_team", f.team))
    return q.order("start_date").order("id")


def get_games(store: Store, f: GamesFilter, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    """
    Games for a season/phase/week, FBS vs FBS only, ordered by start date then id.
    Must-succeed: raises DataUnavailable when the store fails.
    """
    # Without the lookup every game would be filtered out, so it must succeed too.
    lookup = get_team_lookup(store, ctx=ctx, required=True)
    rows = required_rows(store, build_games_query(f), ctx)

    out = []
    for g in rows:
        home, away = g.get("home_team"), g.get("away_team")
        if home not in lookup or away not in lookup:
            continue
        if f.conference and f.conference not in (lookup[home].conference, lookup[away].conference):
            continue
        out.append(_shape_game(g, lookup))
    # Store order is already (start_date, id); re-sort so mixed stores agree.
    out.sort(key=lambda x: (x["start_date"], x["id"] if x["id"] is not None else 0))
    return out


def get_current_week(store: Store, season: int, *, ctx: Optional[RequestContext] = None) -> int:
    rows = best_effort_rows(
        store,
        Query("games").select("week").eq("season", season).eq("completed", True).order("week", ascending=False).limit(1),
        ctx,
    )
    week = _safe_int(rows[0].get("week")) if rows else None
    return week or 1


def pick_default_week(weeks: list[tuple[int, bool]]) -> int:
    """
    (week, completed) pairs -> default week for the regular-season view:
    the most recent regular-season week with a completed game; else the
    latest completed week of any phase; else the earliest scheduled week; else 1.
    """
    completed = sorted({w for w, done in weeks if done})
    regular = [w for w in completed if w <= REGULAR_SEASON_MAX_WEEK]
    if regular:
        return regular[-1]
    if completed:
        return completed[-1]
    scheduled = sorted({w for w, _ in weeks})
    return scheduled[0] if scheduled else 1


def get_default_week(store: Store, season: int, *, ctx: Optional[RequestContext] = None) -> int:
    rows = best_effort_rows(
        store,
        Query("games").select("week,completed").eq("season", season).order("week"),
        ctx,
    )
    pairs = []
    for r in rows:
        w = _safe_int(r.get("week"))
        if w is not None:
            pairs.append((w, bool(r.get("completed"))))
    return pick_default_week(pairs)


def get_available_weeks(store: Store, season: int, *, ctx: Optional[RequestContext] = None) -> list[int]:
    rows = best_effort_rows(
        store,
        Query("games").select("week").eq("season", season).eq("completed", True).order("week"),
        ctx,
    )
    return _uniq_sorted_int([r.get("week") for r in rows])


def get_available_seasons(store: Store, *, ctx: Optional[RequestContext] = None) -> list[int]:
    rows = best_effort_rows(
        store,
        Query("games").select("season").eq("completed", True).order("season", ascending=False),
        ctx,
    )
    return _uniq_sorted_int([r.get("season") for r in rows], desc=True)


def get_game_by_id(store: Store, game_id: int, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    rows = required_rows(store, Query("games", tag="game detail").select(GAME_COLUMNS).eq("id", int(game_id)).limit(1), ctx)
    if not rows:
        return None
    return _shape_game(rows[0], get_team_lookup(store, ctx=ctx, required=True))


def get_game_box_score(store: Store, game_id: int, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    """{"home": {...}, "away": {...}} team stat maps, or None unless both sides are present."""
    rows = required_rows(
        store,
        Query("game_team_stats", tag="box score").select("team,home_away,category,stat").eq("game_id", int(game_id)),
        ctx,
    )
    sides: dict[str, dict[str, Any]] = {}
    for r in rows:
        side = r.get("home_away")
        if side not in ("home", "away"):
            continue
        entry = sides.setdefault(side, {"team": r.get("team"), "home_away": side, "stats": {}})
        entry["stats"][r.get("category")] = r.get("stat")
    if "home" not in sides or "away" not in sides:
        return None
    return {"home": sides["home"], "away": sides["away"]}
