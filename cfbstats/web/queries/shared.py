from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from cfbstats.database.query import Query
from cfbstats.database.store import Store
from cfbstats.utils.text import find_slug_collisions, team_name_to_slug
from cfbstats.web.context import RequestContext
from cfbstats.web.result import best_effort_rows, fetch_rows, required_rows


logger = logging.getLogger(__name__)

FBS_CONFERENCES: tuple[str, ...] = (
    "ACC",
    "American Athletic",
    "Big 12",
    "Big Ten",
    "Conference USA",
    "FBS Independents",
    "Mid-American",
    "Mountain West",
    "Pac-12",
    "SEC",
    "Sun Belt",
)

# Fallback when the store cannot tell us the latest season.
CURRENT_SEASON = 2025

# Week boundaries for the regular/postseason split.
REGULAR_SEASON_MAX_WEEK = 14
POSTSEASON_MIN_WEEK = 15


@dataclass(frozen=True)
class TeamInfo:
    school: str
    logo: Optional[str]
    color: Optional[str]
    conference: Optional[str]


def _uniq_sorted_int(vals: list[Any], *, desc: bool = False) -> list[int]:
    out: list[int] = []
    seen = set()
    for v in vals:
        i = _safe_int(v)
        if i is None or i in seen:
            continue
        seen.add(i)
        out.append(i)
    return sorted(out, reverse=desc)


def _safe_int(x: Any) -> Optional[int]:
    try:
        if x is None or x == "":
            return None
        return int(x)
    except (TypeError, ValueError):
        return None


def _safe_float(x: Any) -> Optional[float]:
    try:
        if x is None or x == "":
            return None
        return float(x)
    except (TypeError, ValueError):
        return None


def _load_team_lookup(store: Store, ctx: Optional[RequestContext], required: bool) -> dict[str, TeamInfo]:
    read = required_rows if required else best_effort_rows
    rows = read(
        store,
        Query("teams_with_logos")
        .select("school,logo,color,conference")
        .in_("conference", FBS_CONFERENCES)
        .order("school"),
        ctx,
    )
    lookup: dict[str, TeamInfo] = {}
    for r in rows:
        school = r.get("school")
        if not school:
            continue
        lookup[school] = TeamInfo(
            school=school,
            logo=r.get("logo"),
            color=r.get("color"),
            conference=r.get("conference"),
        )
    for slug, names in find_slug_collisions(lookup).items():
        logger.warning("Team slug %r is shared by %s; slug lookups resolve to %s", slug, names, names[0])
    return lookup


def get_team_lookup(
    store: Store, *, ctx: Optional[RequestContext] = None, required: bool = False
) -> dict[str, TeamInfo]:
    """
    FBS teams keyed by school. Best-effort by default ({} when the store is
    unavailable); with required=True a store failure raises DataUnavailable.
    """
    if ctx is None:
        return _load_team_lookup(store, None, required)
    # Degraded (empty) loads are not memoised.
    return ctx.memoize(("team_lookup", id(store)), lambda: _load_team_lookup(store, ctx, required))


def get_fbs_teams(store: Store, *, ctx: Optional[RequestContext] = None) -> list[str]:
    return sorted(get_team_lookup(store, ctx=ctx))


def team_fields(lookup: dict[str, TeamInfo], school: Optional[str], prefix: str = "") -> dict[str, Any]:
    info = lookup.get(school or "")
    return {
        f"{prefix}logo": info.logo if info else None,
        f"{prefix}color": info.color if info else None,
    }


def get_team_by_slug(store: Store, slug: str, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    """
    Resolve a URL slug to a team row. Raises DataUnavailable when the store is
    down; returns None when no school maps to the slug.
    """
    wanted = (slug or "").strip().lower()
    if not wanted:
        return None
    rows = required_rows(store, Query("teams_with_logos").order("school"), ctx)
    matches = [r for r in rows if r.get("school") and team_name_to_slug(r["school"]) == wanted]
    if len(matches) > 1:
        logger.warning("Slug %r matches %d teams: %s", wanted, len(matches), [m["school"] for m in matches])
    return matches[0] if matches else None


def get_latest_season(store: Store, *, ctx: Optional[RequestContext] = None) -> int:
    """Most recent season with any game. Falls back to CURRENT_SEASON when the store can't say."""
    res = fetch_rows(store, Query("games").select("season").order("season", ascending=False).limit(1), ctx)
    if res.is_failed:
        logger.info("Latest season unavailable (%s); using fallback %d", res.reason, CURRENT_SEASON)
        return CURRENT_SEASON
    season = _safe_int((res.data or [{}])[0].get("season")) if res.data else None
    if season is None:
        logger.info("No seasons recorded; using fallback %d", CURRENT_SEASON)
        return CURRENT_SEASON
    return season
