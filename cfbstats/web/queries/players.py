from __future__ import annotations

import logging
import re
from typing import Any, Optional

from cfbstats.database.query import Query, icontains
from cfbstats.database.store import Store
from cfbstats.web.context import RequestContext
from cfbstats.web.errors import InvalidCategory
from cfbstats.web.queries.shared import (
    CURRENT_SEASON,
    _safe_float,
    _safe_int,
    _uniq_sorted_int,
    get_team_lookup,
    team_fields,
)
from cfbstats.web.result import best_effort_rows, required_rows


logger = logging.getLogger(__name__)

LEADER_CATEGORIES: tuple[str, ...] = ("passing", "rushing", "receiving", "defense")

# Column each leaderboard is ranked by.
CATEGORY_SORT_KEY = {
    "passing": "yards",
    "rushing": "yards",
    "receiving": "yards",
    "defense": "total_tackles",
}

CATEGORY_COLUMNS = {
    "passing": ("yards", "touchdowns", "interceptions", "pct", "attempts", "completions"),
    "rushing": ("yards", "touchdowns", "carries", "yards_per_carry"),
    "receiving": ("yards", "touchdowns", "receptions", "yards_per_reception"),
    "defense": ("total_tackles", "solo_tackles", "sacks", "tackles_for_loss", "interceptions", "passes_defended"),
}

PROFILE_STAT_FIELDS = (
    "stars", "recruit_rating", "national_ranking", "recruit_class",
    "pass_att", "pass_cmp", "pass_yds", "pass_td", "pass_int", "pass_pct",
    "rush_car", "rush_yds", "rush_td", "rush_ypc",
    "rec", "rec_yds", "rec_td", "rec_ypr",
    "tackles", "solo", "sacks", "tfl", "pass_def", "def_int",
    "fg_made", "fg_att", "xp_made", "xp_att", "punt_yds",
)

PERCENTILE_STATS = (
    "pass_yds", "pass_td", "pass_pct", "rush_yds", "rush_td", "rush_ypc",
    "rec_yds", "rec_td", "tackles", "sacks", "tfl", "ppa_avg",
)

_SEARCH_STRIP_RE = re.compile(r"[,()*%\"\\]+")


def validate_category(category: str) -> str:
    if category not in LEADER_CATEGORIES:
        raise InvalidCategory(category, LEADER_CATEGORIES)
    return category


# ---------------------------------------------------------------------------
# Leaderboards
# ---------------------------------------------------------------------------
def get_player_season_leaders(
    store: Store,
    season: int,
    category: str = "passing",
    conference: Optional[str] = None,
    limit: int = 50,
    *,
    ctx: Optional[RequestContext] = None,
) -> list[dict[str, Any]]:
    """
    Season leaderboard for one category. Unknown categories raise
    InvalidCategory before anything is fetched; a store failure yields [].
    """
    validate_category(category)
    sort_key = CATEGORY_SORT_KEY[category]
    cols = ("player_id", "name", "team", "conference", "position") + CATEGORY_COLUMNS[category]

    q = Query("player_season_leaders", tag=f"{category} leaders").select(",".join(cols)).eq("season", season).eq("category", category)
    if conference:
        q = q.eq("conference", conference)
    q = q.order(sort_key, ascending=False).order("name").order("player_id").limit(max(int(limit), 0))

    out = []
    for i, r in enumerate(best_effort_rows(store, q, ctx), start=1):
        row = {k: r.get(k) for k in cols}
        row["player_id"] = str(r.get("player_id"))
        row["rank"] = i
        out.append(row)
    return out


def get_leaderboard_seasons(store: Store, *, ctx: Optional[RequestContext] = None) -> list[int]:
    rows = best_effort_rows(
        store,
        Query("player_season_leaders").select("season").order("season", ascending=False),
        ctx,
    )
    seasons = _uniq_sorted_int([r.get("season") for r in rows], desc=True)
    return seasons or [CURRENT_SEASON]


# ---------------------------------------------------------------------------
# Player detail
# ---------------------------------------------------------------------------
def get_player_detail(
    store: Store,
    player_id: str,
    season: Optional[int] = None,
    *,
    ctx: Optional[RequestContext] = None,
) -> Optional[dict[str, Any]]:
    """
    Player profile for a season (latest season with data when omitted).

    Returns None when the player is unknown; raises DataUnavailable when the
    store cannot be reached.
    """
    pid = str(player_id)
    q = Query("player_detail", tag="player detail").eq("player_id", pid)
    if season is not None:
        q = q.eq("season", int(season))
    rows = required_rows(store, q.order("season", ascending=False).limit(1), ctx)

    lookup = get_team_lookup(store, ctx=ctx)
    if rows:
        r = rows[0]
        profile = {
            "player_id": str(r.get("player_id") or pid),
            "name": r.get("name") or "",
            "team": r.get("team") or "",
            "position": r.get("position"),
            "jersey": _safe_int(r.get("jersey")),
            "height": _safe_int(r.get("height")),
            "weight": _safe_int(r.get("weight")),
            "year": _safe_int(r.get("year")),
            "home_city": r.get("home_city"),
            "home_state": r.get("home_state"),
            "season": _safe_int(r.get("season")) or season or CURRENT_SEASON,
        }
        for k in PROFILE_STAT_FIELDS:
            profile[k] = r.get(k)
        profile.update(team_fields(lookup, profile["team"]))
        return profile

    # No stat line for this season: fall back to the bare roster entry.
    rq = Query("roster", tag="roster fallback").eq("id", pid)
    if season is not None:
        rq = rq.eq("year", int(season))
    roster = required_rows(store, rq.order("year", ascending=False).limit(1), ctx)
    if not roster:
        return None
    logger.debug("No stat line for player %s (season=%s); using roster row", pid, season)
    r = roster[0]
    profile = {
        "player_id": str(r.get("id") or pid),
        "name": f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip(),
        "team": r.get("team") or "",
        "position": r.get("position"),
        "jersey": _safe_int(r.get("jersey")),
        "height": _safe_int(r.get("height")),
        "weight": _safe_int(r.get("weight")),
        "year": _safe_int(r.get("year")),
        "home_city": r.get("home_city"),
        "home_state": r.get("home_state"),
        "season": _safe_int(r.get("year")) or season or CURRENT_SEASON,
    }
    for k in PROFILE_STAT_FIELDS:
        profile[k] = None
    profile.update(team_fields(lookup, profile["team"]))
    return profile


def get_player_seasons(store: Store, player_id: str, *, ctx: Optional[RequestContext] = None) -> list[int]:
    """Seasons with roster or stat data for the player, newest first."""
    pid = str(player_id)
    roster = best_effort_rows(store, Query("roster").select("year").eq("id", pid).order("year", ascending=False), ctx)
    detail = best_effort_rows(
        store, Query("player_detail").select("season").eq("player_id", pid).order("season", ascending=False), ctx
    )
    return _uniq_sorted_int([r.get("year") for r in roster] + [r.get("season") for r in detail], desc=True)


# ---------------------------------------------------------------------------
# Game log and percentiles
# ---------------------------------------------------------------------------
def _result(team_score: Optional[int], opp_score: Optional[int]) -> Optional[str]:
    if team_score is None or opp_score is None:
        return None
    if team_score > opp_score:
        return "W"
    if team_score < opp_score:
        return "L"
    return "T"


def get_player_game_log(store: Store, player_id: str, season: int, *, ctx: Optional[RequestContext] = None) -> list[dict[str, Any]]:
    roster = best_effort_rows(
        store,
        Query("roster").select("first_name,last_name,team").eq("id", str(player_id)).eq("year", season).limit(1),
        ctx,
    )
    if not roster:
        return []
    player_name = f"{roster[0].get('first_name') or ''} {roster[0].get('last_name') or ''}".strip()
    team = roster[0].get("team")

    epa_rows = best_effort_rows(
        store,
        Query("player_game_epa", tag="player game epa")
        .eq("player_name", player_name)
        .eq("team", team)
        .eq("season", season)
        .order("game_id")
        .order("play_category"),
        ctx,
    )
    game_ids = sorted({_safe_int(r.get("game_id")) for r in epa_rows} - {None})
    if not game_ids:
        return []
    games = {
        _safe_int(g.get("id")): g
        for g in best_effort_rows(
            store,
            Query("games").select("id,week,home_team,away_team,home_points,away_points").in_("id", game_ids),
            ctx,
        )
    }

    out = []
    for r in epa_rows:
        gid = _safe_int(r.get("game_id"))
        g = games.get(gid) or {}
        is_home = g.get("home_team") == team
        team_score = _safe_int(g.get("home_points" if is_home else "away_points"))
        opp_score = _safe_int(g.get("away_points" if is_home else "home_points"))
        out.append({
            "game_id": gid,
            "season": _safe_int(r.get("season")),
            "team": r.get("team"),
            "player_name": r.get("player_name"),
            "play_category": r.get("play_category"),
            "plays": _safe_int(r.get("plays")) or 0,
            "total_epa": _safe_float(r.get("total_epa")),
            "epa_per_play": _safe_float(r.get("epa_per_play")),
            "success_rate": _safe_float(r.get("success_rate")),
            "explosive_plays": _safe_int(r.get("explosive_plays")) or 0,
            "total_yards": _safe_float(r.get("total_yards")),
            "week": _safe_int(g.get("week")),
            "opponent": (g.get("away_team") if is_home else g.get("home_team")) if g else None,
            "home_away": ("home" if is_home else "away") if g else None,
            "result": _result(team_score, opp_score),
        })
    return out


def get_player_percentiles(store: Store, player_id: str, season: int, *, ctx: Optional[RequestContext] = None) -> Optional[dict[str, Any]]:
    """Standing within the player's position group for the season, or None."""
    rows = best_effort_rows(
        store,
        Query("player_comparison", tag="percentiles").eq("player_id", str(player_id)).eq("season", season).limit(1),
        ctx,
    )
    if not rows:
        return None
    r = rows[0]
    out: dict[str, Any] = {
        "player_id": str(r.get("player_id")),
        "name": r.get("name"),
        "team": r.get("team"),
        "position": r.get("position"),
        "position_group": r.get("position_group"),
        "season": _safe_int(r.get("season")),
    }
    for k in PERCENTILE_STATS:
        out[k] = _safe_float(r.get(k))
        out[f"{k}_pctl"] = _safe_float(r.get(f"{k}_pctl"))
    return out


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------
def _search_token(q: str) -> str:
    # First word, minus characters that break PostgREST filter syntax.
    cleaned = _SEARCH_STRIP_RE.sub(" ", q).split()
    return cleaned[0] if cleaned else ""


def search_players(
    store: Store,
    query: str,
    position: Optional[str] = None,
    team: Optional[str] = None,
    season: Optional[int] = None,
    limit: int = 25,
    *,
    ctx: Optional[RequestContext] = None,
) -> list[dict[str, Any]]:
    """
    Case-insensitive substring search over player name or team.
    Blank queries return [] rather than every player.
    """
    needle = " ".join((query or "").lower().split())
    if not needle:
        return []
    token = _search_token(needle)
    if not token:
        return []

    q = (
        Query("roster", tag="player search")
        .select("id,first_name,last_name,team,position,year,height,weight,jersey")
        .any_of(icontains("first_name", token), icontains("last_name", token), icontains("team", token))
    )
    if position:
        q = q.eq("position", position)
    if team:
        q = q.eq("team", team)
    if season is not None:
        q = q.eq("year", int(season))
    # No row cap: the limit applies after ranking.
    rows = best_effort_rows(store, q.order("year", ascending=False), ctx)

    # Keep each player's most recent roster row.
    latest: dict[str, dict[str, Any]] = {}
    for r in rows:
        pid = str(r.get("id"))
        if pid not in latest:
            latest[pid] = r

    matches = []
    for pid, r in latest.items():
        name = f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip()
        lname = name.lower()
        lteam = (r.get("team") or "").lower()
        if lname.startswith(needle):
            score = 0
        elif any(part.startswith(needle) for part in lname.split()):
            score = 1
        elif needle in lname:
            score = 2
        elif needle in lteam:
            score = 3
        else:
            continue
        matches.append((score, lname, pid, {
            "player_id": pid,
            "name": name,
            "team": r.get("team"),
            "position": r.get("position"),
            "season": _safe_int(r.get("year")),
            "height": _safe_int(r.get("height")),
            "weight": _safe_int(r.get("weight")),
            "jersey": _safe_int(r.get("jersey")),
            "matched_on": "team" if score == 3 else "name",
        }))

    matches.sort(key=lambda m: (m[0], m[1], m[2]))
    return [m[3] for m in matches[: max(int(limit), 0)]]
