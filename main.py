"""
Render a page view-model as JSON.

Usage:
  python main.py dashboard --season 2025
  python main.py games --season 2025 --week 2
  python main.py rankings --poll "AP Top 25"
  python main.py player 4426348 --scouting
  python main.py init-db            # create the local sqlite mirror tables

Environment:
  CFB_STORE=supabase|sqlite, SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, CFB_DB_PATH,
  SCOUT_API_URL, LOG_LEVEL (see .env.example).
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from cfbstats.database.connection import connect
from cfbstats.database.schema import create_tables
from cfbstats.database.store import StoreError, store_from_env
from cfbstats.scouting.client import ScoutingClient
from cfbstats.utils.env import load_env
from cfbstats.utils.logging import configure_logging
from cfbstats.web import pages
from cfbstats.web.errors import QueryError


logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="College football stats view-models")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (0 for compact)")
    sub = parser.add_subparsers(dest="page", required=True)

    p = sub.add_parser("dashboard")
    p.add_argument("--season", type=int)

    p = sub.add_parser("games")
    p.add_argument("--season", type=int)
    p.add_argument("--week", type=int)
    p.add_argument("--phase", choices=("regular", "postseason", "all"), default="regular")
    p.add_argument("--conference")
    p.add_argument("--team")

    p = sub.add_parser("rankings")
    p.add_argument("--season", type=int)
    p.add_argument("--poll")
    p.add_argument("--week", type=int)

    p = sub.add_parser("players")
    p.add_argument("--season", type=int)
    p.add_argument("--category", default="passing")
    p.add_argument("--conference")
    p.add_argument("--query", help="Search players by name or team")
    p.add_argument("--limit", type=int, default=50)

    p = sub.add_parser("player")
    p.add_argument("player_id")
    p.add_argument("--season", type=int)
    p.add_argument("--scouting", action="store_true", help="Include the scouting API profile")

    p = sub.add_parser("analytics")
    p.add_argument("--season", type=int)

    p = sub.add_parser("team")
    p.add_argument("slug")
    p.add_argument("--season", type=int)

    p = sub.add_parser("init-db", help="Create the sqlite mirror tables at CFB_DB_PATH")
    p.add_argument("--db-path")

    return parser.parse_args(argv)


def build_page(args: argparse.Namespace) -> pages.PageModel:
    store = store_from_env()
    if args.page == "dashboard":
        return pages.dashboard_page(store, args.season)
    if args.page == "games":
        return pages.games_page(store, args.season, args.week, args.phase, args.conference, args.team)
    if args.page == "rankings":
        return pages.rankings_page(store, args.season, args.poll, args.week)
    if args.page == "players":
        return pages.players_page(store, args.season, args.category, args.conference, args.query, args.limit)
    if args.page == "player":
        scouting = ScoutingClient.from_env() if args.scouting else None
        return pages.player_page(store, args.player_id, args.season, scouting=scouting)
    if args.page == "analytics":
        return pages.analytics_page(store, args.season)
    if args.page == "team":
        return pages.team_page(store, args.slug, args.season)
    raise ValueError(f"Unknown page: {args.page}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_env()
    configure_logging()
    args = parse_args(argv)

    if args.page == "init-db":
        conn = connect(args.db_path)
        create_tables(conn)
        conn.close()
        logger.info("Created mirror tables")
        return 0

    try:
        page = build_page(args)
    except (QueryError, StoreError, ValueError) as e:
        logger.error("%s", e)
        return 2

    json.dump(page.to_dict(), sys.stdout, indent=args.indent or None, default=str)
    sys.stdout.write("\n")
    if page.failed_regions:
        logger.warning("Regions failed: %s", ", ".join(page.failed_regions))
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
