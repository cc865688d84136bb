from __future__ import annotations

import logging
from typing import Any, Optional

import pandas as pd

from cfbstats.database.query import Query
from cfbstats.database.store import Store
from cfbstats.utils.text import team_name_to_slug
from cfbstats.web.context import RequestContext, gather
from cfbstats.web.queries.shared import get_team_lookup
from cfbstats.web.result import best_effort_rows


logger = logging.getLogger(__name__)

METRIC_COLUMNS = ("epa_per_play", "success_rate", "explosiveness", "off_epa_rank", "def_epa_rank", "plays")
STYLE_COLUMNS = ("run_rate", "pass_rate", "epa_rushing", "epa_passing", "offensive_identity")
HAVOC_COLUMNS = ("havoc_rate",)


def _frame(rows: list[dict[str, Any]], columns: tuple[str, ...]) -> pd.DataFrame:
    if not rows:
        return pd.DataFrame(columns=["team", *columns])
    df = pd.DataFrame.from_records(rows)
    keep = ["team"] + [c for c in columns if c in df.columns]
    # Views occasionally repeat a team; first row wins.
    return df[keep].drop_duplicates(subset=["team"], keep="first")


def get_analytics_frame(store: Store, season: int, *, ctx: Optional[RequestContext] = None) -> pd.DataFrame:
    """
    One row per FBS team with EPA, style and havoc columns for the scatter plot.

    Each source is best-effort: a source that fails (or has no rows for the
    season) contributes no columns rather than failing the frame.
    """
    lookup = get_team_lookup(store, ctx=ctx)
    if not lookup:
        return pd.DataFrame()

    sources = {
        "metrics": ("team_epa_season", METRIC_COLUMNS),
        "style": ("team_style_profile", STYLE_COLUMNS),
        "havoc": ("defensive_havoc", HAVOC_COLUMNS),
    }

    def loader(table: str, cols: tuple[str, ...]):
        q = Query(table, tag=f"analytics {table}").select("team," + ",".join(cols)).eq("season", season)
        return lambda: best_effort_rows(store, q, ctx)

    parts = gather(ctx or RequestContext(), **{name: loader(t, c) for name, (t, c) in sources.items()})

    teams = pd.DataFrame(
        [
            {"team": t.school, "conference": t.conference, "logo": t.logo, "color": t.color}
            for t in lookup.values()
        ]
    )
    teams["slug"] = teams["team"].map(team_name_to_slug)

    df = teams
    for name, (_, cols) in sources.items():
        res = parts[name]
        if not res.is_ok:
            logger.info("Analytics source %s contributed nothing (%s)", name, res.status.value)
            continue
        df = df.merge(_frame(res.data, cols), on="team", how="left")

    if "epa_per_play" in df.columns:
        df["epa_rank"] = df["epa_per_play"].rank(ascending=False, method="min")
    if "havoc_rate" in df.columns:
        df["havoc_rank"] = df["havoc_rate"].rank(ascending=False, method="min")

    return df.sort_values("team").reset_index(drop=True)
