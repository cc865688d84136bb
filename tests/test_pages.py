import json

import pytest

from cfbstats.web import pages
from cfbstats.web.errors import InvalidCategory
from cfbstats.web.queries import analytics, shared, teams


class StubScouting:
    def __init__(self, profile):
        self.profile = profile
        self.asked = []

    def get_player_scouting_profile(self, player_id):
        self.asked.append(player_id)
        return self.profile


def test_dashboard_page_regions(store):
    page = pages.dashboard_page(store)
    assert page.params == {"season": 2025}
    assert set(page.regions) == {"standings", "recent_games", "stat_leaders", "top_movers"}
    assert page.failed_regions == []
    assert page.region("standings").data[0]["team"] == "Alabama"


def test_games_page_resolves_default_week_first(store):
    page = pages.games_page(store, 2025)
    assert page.params["week"] == 2
    assert [g["id"] for g in page.region("games").data] == [201, 202, 200]
    assert page.region("weeks").data == [1, 2]


def test_games_page_store_outage_fails_region_not_page(failing_store):
    page = pages.games_page(failing_store, 2025, week=1)
    assert page.region("games").is_failed
    assert page.region("weeks").is_empty


def test_rankings_page_sequences_poll_and_week(store):
    page = pages.rankings_page(store)
    assert page.params == {"season": 2025, "poll": "AP Top 25", "week": 5}
    assert [r["school"] for r in page.region("rankings").data] == ["Alabama", "Ohio State", "Oregon"]
    assert [w["week"] for w in page.region("trajectory").data] == [3, 4, 5]


def test_players_page_invalid_category(store):
    with pytest.raises(InvalidCategory):
        pages.players_page(store, 2025, category="kicking")


def test_players_page_with_search(store):
    page = pages.players_page(store, category="passing", query="ala")
    assert page.params["season"] == 2025
    assert page.region("leaders").is_ok
    assert page.region("search").data[0]["player_id"] == "p1"


def test_player_page(store):
    scouting = StubScouting({"player": {"id": 1}, "timeline": [], "reports": [], "report_count": 0})
    page = pages.player_page(store, "p1", scouting=scouting)
    assert not page.not_found
    assert page.params["season"] == 2025
    assert page.region("detail").data["name"] == "Alan Smith"
    assert len(page.region("game_log").data) == 2
    assert page.region("scouting").is_ok
    assert scouting.asked == ["p1"]


def test_player_page_not_found(store):
    page = pages.player_page(store, "nobody")
    assert page.not_found
    assert page.region("detail").is_empty


def test_player_page_store_outage(failing_store):
    page = pages.player_page(failing_store, "p1")
    assert not page.not_found
    assert page.region("detail").is_failed


def test_team_page(store):
    page = pages.team_page(store, "texas-am", 2025)
    assert not page.not_found
    team = page.region("team").data
    assert team["team"]["school"] == "Texas A&M"
    assert team["metrics"]["off_epa_rank"] == 40
    assert team["style"] is None

    assert pages.team_page(store, "no-such-team", 2025).not_found


def test_team_page_drive_patterns(store):
    page = pages.team_page(store, "alabama", 2025)
    drives = page.region("drive_patterns").data
    assert [(d["outcome"], d["count"]) for d in drives] == [("touchdown", 9), ("field_goal", 6), ("punt", 6)]
    assert drives[0]["avg_yards"] == pytest.approx(75.0)
    assert page.region("team").data["drive_patterns"] == drives

    assert pages.team_page(store, "texas-am", 2025).region("drive_patterns").is_empty


def test_team_page_drive_patterns_degrade(failing_tables):
    page = pages.team_page(failing_tables("team_drive_patterns"), "alabama", 2025)
    assert page.region("team").is_ok
    assert page.region("team").data["metrics"]["off_epa_rank"] == 1
    assert page.region("drive_patterns").is_empty
    assert teams.get_team_drive_patterns(failing_tables("team_drive_patterns"), "Alabama", 2025) == []


def test_analytics_page_serializes_frame(store):
    page = pages.analytics_page(store, 2025)
    payload = page.to_dict()
    json.dumps(payload)
    rows = {r["team"]: r for r in payload["regions"]["teams"]["data"]}
    assert rows["Alabama"]["slug"] == "alabama"
    assert rows["Oregon"]["epa_per_play"] is None


def test_analytics_frame(store):
    df = analytics.get_analytics_frame(store, 2025)
    assert list(df["team"]) == ["Alabama", "Michigan", "Ohio State", "Oregon", "Texas A&M"]
    by_team = df.set_index("team")
    assert by_team.loc["Ohio State", "epa_rank"] == 1
    assert by_team.loc["Alabama", "offensive_identity"] == "balanced"
    assert by_team.loc["Michigan", "havoc_rate"] == pytest.approx(0.20)


def test_analytics_frame_failed_source_adds_no_columns(failing_store):
    assert analytics.get_analytics_frame(failing_store, 2025).empty


def test_team_trajectory(store):
    assert [t["season"] for t in teams.get_team_trajectory(store, "Alabama")] == [2024, 2025]


def test_team_by_slug_and_latest_season(store, failing_store):
    assert shared.get_team_by_slug(store, "Ohio-State")["school"] == "Ohio State"
    assert shared.get_team_by_slug(store, "nowhere") is None
    assert shared.get_latest_season(store) == 2025
    assert shared.get_latest_season(failing_store) == shared.CURRENT_SEASON


def test_team_lookup_excludes_fcs(store):
    lookup = shared.get_team_lookup(store)
    assert "Montana" not in lookup
    assert lookup["Alabama"].conference == "SEC"
    assert shared.get_fbs_teams(store)[0] == "Alabama"
