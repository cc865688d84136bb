from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import pandas as pd

from cfbstats.database.store import Store
from cfbstats.scouting.client import ScoutingClient
from cfbstats.web.context import RequestContext, gather
from cfbstats.web.queries import analytics, dashboard, games, players, rankings, teams
from cfbstats.web.queries.shared import get_fbs_teams, get_latest_season
from cfbstats.web.result import FetchResult


logger = logging.getLogger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, pd.DataFrame):
        return value.astype(object).where(pd.notna(value), None).to_dict(orient="records")
    return value


@dataclass
class PageModel:
    """
    Everything one page needs, one FetchResult per independently rendered
    region. A failed region does not fail its neighbours.
    """

    name: str
    params: dict[str, Any] = field(default_factory=dict)
    regions: dict[str, FetchResult[Any]] = field(default_factory=dict)
    not_found: bool = False

    def region(self, name: str) -> FetchResult[Any]:
        return self.regions[name]

    @property
    def failed_regions(self) -> list[str]:
        return [k for k, r in self.regions.items() if r.is_failed]

    def to_dict(self) -> dict[str, Any]:
        return {
            "page": self.name,
            "params": self.params,
            "not_found": self.not_found,
            "regions": {
                k: {**r.to_dict(), "data": _jsonable(r.data)}
                for k, r in self.regions.items()
            },
        }


def dashboard_page(store: Store, season: Optional[int] = None, *, ctx: Optional[RequestContext] = None) -> PageModel:
    ctx = ctx or RequestContext()
    season = season or get_latest_season(store, ctx=ctx)
    regions = gather(
        ctx,
        standings=lambda: dashboard.get_standings(store, season, ctx=ctx),
        recent_games=lambda: dashboard.get_recent_games(store, season, ctx=ctx),
        stat_leaders=lambda: dashboard.get_stat_leaders(store, season, ctx=ctx),
        top_movers=lambda: dashboard.get_top_movers(store, season, ctx=ctx),
    )
    return PageModel("dashboard", {"season": season}, regions)


def games_page(
    store: Store,
    season: Optional[int] = None,
    week: Optional[int] = None,
    phase: str = "regular",
    conference: Optional[str] = None,
    team: Optional[str] = None,
    *,
    ctx: Optional[RequestContext] = None,
) -> PageModel:
    ctx = ctx or RequestContext()
    season = season or get_latest_season(store, ctx=ctx)
    if week is None and phase == "regular":
        # The games query needs the week, so resolve it first.
        week = games.get_default_week(store, season, ctx=ctx)
    f = games.GamesFilter(season=season, phase=phase, week=week, conference=conference, team=team)

    regions = gather(
        ctx,
        games=lambda: games.get_games(store, f, ctx=ctx),
        weeks=lambda: games.get_available_weeks(store, season, ctx=ctx),
        seasons=lambda: games.get_available_seasons(store, ctx=ctx),
        teams=lambda: get_fbs_teams(store, ctx=ctx),
    )
    params = {"season": season, "week": week, "phase": phase, "conference": conference, "team": team}
    return PageModel("games", params, regions)


def rankings_page(
    store: Store,
    season: Optional[int] = None,
    poll: Optional[str] = None,
    week: Optional[int] = None,
    *,
    ctx: Optional[RequestContext] = None,
) -> PageModel:
    ctx = ctx or RequestContext()
    seasons = rankings.get_available_ranking_seasons(store, ctx=ctx)
    season = season or (seasons[0] if seasons else get_latest_season(store, ctx=ctx))

    # default poll -> latest week -> rankings, strictly in that order
    polls = rankings.get_available_polls(store, season, ctx=ctx)
    poll = poll or rankings.choose_default_poll(polls)
    week = week or rankings.get_latest_ranking_week(store, season, poll, ctx=ctx)

    regions = gather(
        ctx,
        rankings=lambda: rankings.get_rankings_for_week(store, season, week, poll, ctx=ctx),
        trajectory=lambda: rankings.get_rankings_all_weeks(store, season, poll, ctx=ctx),
    )
    regions["polls"] = FetchResult.of(polls)
    regions["seasons"] = FetchResult.of(seasons)
    return PageModel("rankings", {"season": season, "poll": poll, "week": week}, regions)


def players_page(
    store: Store,
    season: Optional[int] = None,
    category: str = "passing",
    conference: Optional[str] = None,
    query: Optional[str] = None,
    limit: int = 50,
    *,
    ctx: Optional[RequestContext] = None,
) -> PageModel:
    # Bad categories are a caller error, not a degraded region.
    players.validate_category(category)
    ctx = ctx or RequestContext()
    seasons = players.get_leaderboard_seasons(store, ctx=ctx)
    season = season or seasons[0]

    tasks = {
        "leaders": lambda: players.get_player_season_leaders(
            store, season, category, conference=conference, limit=limit, ctx=ctx
        ),
    }
    if query:
        tasks["search"] = lambda: players.search_players(store, query, ctx=ctx)
    regions = gather(ctx, **tasks)
    regions["seasons"] = FetchResult.of(seasons)
    params = {"season": season, "category": category, "conference": conference, "query": query}
    return PageModel("players", params, regions)


def player_page(
    store: Store,
    player_id: str,
    season: Optional[int] = None,
    *,
    scouting: Optional[ScoutingClient] = None,
    ctx: Optional[RequestContext] = None,
) -> PageModel:
    """
    Player profile page. not_found is set when the player is unknown; a store
    outage on the profile itself leaves the "detail" region FAILED.
    """
    ctx = ctx or RequestContext()
    seasons = players.get_player_seasons(store, player_id, ctx=ctx)
    if season is None and seasons:
        season = seasons[0]

    head = gather(ctx, detail=lambda: players.get_player_detail(store, player_id, season, ctx=ctx))
    detail = head["detail"]
    params = {"player_id": str(player_id), "season": season}
    if detail.is_failed:
        return PageModel("player", params, {"detail": detail, "seasons": FetchResult.of(seasons)})
    if detail.is_empty:
        logger.info("Player %s not found (season=%s)", player_id, season)
        return PageModel("player", params, {"detail": detail}, not_found=True)

    season = detail.data["season"]
    params["season"] = season
    tasks = {
        "game_log": lambda: players.get_player_game_log(store, player_id, season, ctx=ctx),
        "percentiles": lambda: players.get_player_percentiles(store, player_id, season, ctx=ctx),
    }
    if scouting is not None:
        tasks["scouting"] = lambda: scouting.get_player_scouting_profile(player_id)
    regions = {"detail": detail, "seasons": FetchResult.of(seasons)}
    regions.update(gather(ctx, **tasks))
    return PageModel("player", params, regions)


def analytics_page(store: Store, season: Optional[int] = None, *, ctx: Optional[RequestContext] = None) -> PageModel:
    ctx = ctx or RequestContext()
    season = season or get_latest_season(store, ctx=ctx)
    regions = gather(
        ctx,
        teams=lambda: analytics.get_analytics_frame(store, season, ctx=ctx),
        seasons=lambda: games.get_available_seasons(store, ctx=ctx),
    )
    return PageModel("analytics", {"season": season}, regions)


def team_page(store: Store, slug: str, season: Optional[int] = None, *, ctx: Optional[RequestContext] = None) -> PageModel:
    ctx = ctx or RequestContext()
    season = season or get_latest_season(store, ctx=ctx)
    regions = gather(ctx, team=lambda: teams.get_team_page(store, slug, season, ctx=ctx))
    if regions["team"].is_ok:
        # Drive arcs render as their own panel.
        regions["drive_patterns"] = FetchResult.of(regions["team"].data["drive_patterns"])
    params = {"slug": slug, "season": season}
    return PageModel("team", params, regions, not_found=regions["team"].is_empty)
