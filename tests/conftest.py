import sqlite3

import pytest

from cfbstats.database.connection import connect
from cfbstats.database.schema import create_tables
from cfbstats.database.sqlite_store import SqliteStore
from cfbstats.database.store import StoreError


@pytest.fixture()
def conn():
    c = connect(":memory:")
    create_tables(c)
    return c


@pytest.fixture()
def store(conn):
    seed_league(conn)
    return SqliteStore(conn)


@pytest.fixture()
def empty_store():
    # Separate connection from `store`.
    c = connect(":memory:")
    create_tables(c)
    return SqliteStore(c)


class FailingStore:
    """Every query fails the way an unreachable PostgREST endpoint does."""

    def __init__(self):
        self.calls = []

    def execute(self, query):
        self.calls.append(query)
        raise StoreError(f"connection refused ({query.table})")


class PartlyFailingStore:
    """Delegates to a real store but fails every query on the given tables."""

    def __init__(self, store, *tables):
        self._store = store
        self._tables = set(tables)

    def execute(self, query):
        if query.table in self._tables:
            raise StoreError(f"connection refused ({query.table})")
        return self._store.execute(query)


@pytest.fixture()
def failing_store():
    return FailingStore()


@pytest.fixture()
def failing_tables(store):
    """Seeded store where only the named tables are unreachable."""
    return lambda *tables: PartlyFailingStore(store, *tables)


def seed_league(conn: sqlite3.Connection):
    cur = conn.cursor()
    cur.executemany(
        "INSERT INTO teams_with_logos(school, mascot, conference, color, logo) VALUES (?, ?, ?, ?, ?)",
        [
            ("Alabama", "Crimson Tide", "SEC", "#9e1b32", "https://logos/alabama.png"),
            ("Ohio State", "Buckeyes", "Big Ten", "#bb0000", "https://logos/ohio-state.png"),
            ("Texas A&M", "Aggies", "SEC", "#500000", "https://logos/texas-am.png"),
            ("Michigan", "Wolverines", "Big Ten", "#00274c", "https://logos/michigan.png"),
            ("Oregon", "Ducks", "Big Ten", "#154733", "https://logos/oregon.png"),
            # FCS: never part of the FBS lookup
            ("Montana", "Grizzlies", "Big Sky", "#70263a", "https://logos/montana.png"),
        ],
    )

    # Week 1 and 2 completed, week 3 scheduled only.
    cur.executemany(
        """
        INSERT INTO games(id, season, week, start_date, home_team, away_team, home_points, away_points, conference_game, completed)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (101, 2025, 1, "2025-08-30T19:30:00Z", "Alabama", "Michigan", 28, 14, 0, 1),
            (102, 2025, 1, "2025-08-30T19:30:00Z", "Ohio State", "Texas A&M", 21, 24, 0, 1),
            (103, 2025, 1, "2025-08-30T22:00:00Z", "Oregon", "Montana", 48, 3, 0, 1),
            # Same kickoff for 201/202: id breaks the tie. 200 kicks off later.
            (200, 2025, 2, "2025-09-06T23:30:00Z", "Texas A&M", "Michigan", 10, 7, 0, 1),
            (202, 2025, 2, "2025-09-06T19:00:00Z", "Michigan", "Oregon", 17, 20, 1, 1),
            (201, 2025, 2, "2025-09-06T19:00:00Z", "Ohio State", "Alabama", 30, 31, 0, 1),
            (301, 2025, 3, "2025-09-13T19:00:00Z", "Ohio State", "Oregon", None, None, 1, 0),
            (901, 2024, 1, "2024-08-31T19:00:00Z", "Alabama", "Oregon", 35, 17, 0, 1),
        ],
    )

    cur.executemany(
        "INSERT INTO game_team_stats(game_id, team, home_away, category, stat) VALUES (?, ?, ?, ?, ?)",
        [
            (201, "Ohio State", "home", "totalYards", "400"),
            (201, "Ohio State", "home", "turnovers", "2"),
            (201, "Alabama", "away", "totalYards", "420"),
            (201, "Alabama", "away", "turnovers", "0"),
            (101, "Alabama", "home", "totalYards", "390"),
        ],
    )

    cur.executemany(
        """
        INSERT INTO team_epa_season(season, team, games, plays, epa_per_play, success_rate, explosiveness, off_epa_rank, def_epa_rank)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (2025, "Alabama", 2, 140, 0.25, 0.50, 1.2, 1, 5),
            (2025, "Ohio State", 2, 138, 0.30, 0.52, 1.1, 2, 1),
            (2025, "Michigan", 2, 120, 0.10, 0.45, 1.0, 30, 10),
            (2025, "Texas A&M", 2, 131, 0.05, 0.44, 0.9, 40, 20),
            (2025, "Montana", 1, 60, 0.40, 0.60, 1.5, 3, 3),
        ],
    )
    cur.executemany(
        "INSERT INTO team_special_teams_sos(season, team, sp_st_rating) VALUES (?, ?, ?)",
        [(2025, "Alabama", 1.0), (2025, "Ohio State", 0.0)],
    )
    cur.executemany(
        "INSERT INTO team_drive_patterns(season, team, outcome, start_yard, end_yard, count, avg_plays, avg_yards) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        [
            (2025, "Alabama", "punt", 25, 40, 6, 4.5, 15.0),
            (2025, "Alabama", "touchdown", 25, 100, 9, 8.2, 75.0),
            (2025, "Alabama", "field_goal", 35, 80, 6, 7.0, 45.0),
            (2024, "Alabama", "touchdown", 20, 100, 12, 9.0, 80.0),
        ],
    )
    cur.executemany(
        "INSERT INTO defensive_havoc(season, team, havoc_rate) VALUES (?, ?, ?)",
        [(2025, "Alabama", 0.20), (2025, "Michigan", 0.20), (2025, "Ohio State", 0.15)],
    )
    cur.executemany(
        """
        INSERT INTO team_style_profile(season, team, run_rate, pass_rate, epa_rushing, epa_passing, plays_per_game, offensive_identity)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (2025, "Alabama", 0.55, 0.45, 0.10, 0.35, 70.0, "balanced"),
            (2025, "Ohio State", 0.40, 0.60, 0.05, 0.45, 68.0, "pass_heavy"),
        ],
    )
    cur.executemany(
        "INSERT INTO team_season_trajectory(season, team, epa_per_play, epa_delta, win_pct, recruiting_rank) VALUES (?, ?, ?, ?, ?, ?)",
        [
            (2024, "Alabama", 0.15, None, 0.75, 2),
            (2025, "Alabama", 0.25, 0.10, 1.0, 1),
            (2025, "Ohio State", 0.30, -0.05, 0.5, 3),
            (2025, "Michigan", 0.10, 0.20, 0.0, 12),
            (2025, "Texas A&M", 0.05, -0.20, 1.0, 9),
            (2025, "Oregon", 0.12, None, 0.5, 6),
            (2025, "Montana", 0.40, 0.90, 1.0, None),
        ],
    )
    cur.executemany(
        "INSERT INTO records(year, team, classification, conference, total__wins, total__losses) VALUES (?, ?, ?, ?, ?, ?)",
        [
            (2025, "Alabama", "fbs", "SEC", 2, 0),
            (2025, "Ohio State", "fbs", "Big Ten", 0, 2),
            (2025, "Oregon", "fbs", "Big Ten", 2, 0),
        ],
    )

    cur.executemany(
        "INSERT INTO rankings(season, week, poll, school, rank, conference, first_place_votes, points) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        [
            (2025, 3, "AP Top 25", "Ohio State", 1, "Big Ten", 40, 1550),
            (2025, 3, "AP Top 25", "Alabama", 2, "SEC", 20, 1480),
            (2025, 4, "AP Top 25", "Ohio State", 1, "Big Ten", 45, 1560),
            (2025, 4, "AP Top 25", "Michigan", 2, "Big Ten", 10, 1450),
            (2025, 4, "AP Top 25", "Alabama", 3, "SEC", 5, 1400),
            # Inserted out of order on purpose; C only receives votes.
            (2025, 5, "AP Top 25", "Oregon", None, "Big Ten", 0, 300),
            (2025, 5, "AP Top 25", "Ohio State", 2, "Big Ten", 10, 1400),
            (2025, 5, "AP Top 25", "Alabama", 1, "SEC", 50, 1500),
            (2025, 5, "Coaches Poll", "Alabama", 1, "SEC", 40, 1600),
            (2025, 5, "Coaches Poll", "Ohio State", 2, "Big Ten", 20, 1550),
            (2024, 15, "AP Top 25", "Oregon", 1, "Big Ten", 60, 1550),
        ],
    )

    cur.executemany(
        """
        INSERT INTO roster(id, year, first_name, last_name, team, position, jersey, height, weight, home_city, home_state)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            ("p1", 2024, "Alan", "Smith", "Alabama", "QB", 4, 74, 215, "Mobile", "AL"),
            ("p1", 2025, "Alan", "Smith", "Alabama", "QB", 4, 74, 220, "Mobile", "AL"),
            ("p2", 2025, "Tom", "Alameda", "Ohio State", "WR", 11, 72, 190, "Columbus", "OH"),
            ("p3", 2025, "Chris", "Jones", "Alabama", "RB", 22, 70, 205, "Dothan", "AL"),
            ("p4", 2025, "Mike", "Brown", "Oregon", "LB", 44, 73, 235, "Eugene", "OR"),
            ("p5", 2025, "Ben", "Salazar", "Oregon", "K", 39, 71, 180, "Bend", "OR"),
        ],
    )
    cur.executemany(
        """
        INSERT INTO player_detail(player_id, season, name, team, position, jersey, height, weight, year, stars, pass_yds, pass_td)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            ("p1", 2024, "Alan Smith", "Alabama", "QB", 4, 74, 215, 2, 4, 2100, 15),
            ("p1", 2025, "Alan Smith", "Alabama", "QB", 4, 74, 220, 3, 4, 640, 6),
        ],
    )
    cur.executemany(
        """
        INSERT INTO player_season_leaders(season, category, player_id, name, team, conference, position, yards, touchdowns, interceptions)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (2025, "passing", "p1", "Alan Smith", "Alabama", "SEC", "QB", 3000, 25, 5),
            (2025, "passing", "p6", "Dan Quarter", "Ohio State", "Big Ten", "QB", 3200, 28, 7),
            (2025, "passing", "p7", "Eli Arm", "Oregon", "Big Ten", "QB", 3000, 22, 4),
            (2025, "rushing", "p3", "Chris Jones", "Alabama", "SEC", "RB", 900, 9, None),
            (2024, "passing", "p1", "Alan Smith", "Alabama", "SEC", "QB", 2100, 15, 8),
        ],
    )
    cur.executemany(
        """
        INSERT INTO player_game_epa(game_id, season, team, player_name, play_category, plays, total_epa, epa_per_play, success_rate, explosive_plays, total_yards)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        [
            (101, 2025, "Alabama", "Alan Smith", "pass", 30, 9.0, 0.30, 0.55, 4, 280),
            (201, 2025, "Alabama", "Alan Smith", "pass", 35, 7.0, 0.20, 0.50, 3, 360),
        ],
    )
    cur.execute(
        """
        INSERT INTO player_comparison(player_id, season, name, team, position, position_group, pass_yds, pass_yds_pctl)
        VALUES ('p1', 2025, 'Alan Smith', 'Alabama', 'QB', 'QB', 640, 0.82)
        """
    )
    conn.commit()
