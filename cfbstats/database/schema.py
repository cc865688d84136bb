from __future__ import annotations

import sqlite3

# Local mirror of the hosted tables/views. Names and columns match the
# PostgREST API so the same Query runs against either store.
DDL: list[str] = [
    """
    CREATE TABLE IF NOT EXISTS teams_with_logos (
        school TEXT PRIMARY KEY,
        mascot TEXT,
        abbreviation TEXT,
        conference TEXT,
        classification TEXT,
        color TEXT,
        alt_color TEXT,
        logo TEXT
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS games (
        id INTEGER PRIMARY KEY,
        season INTEGER NOT NULL,
        week INTEGER NOT NULL,
        season_type TEXT,
        start_date TEXT,
        home_team TEXT,
        away_team TEXT,
        home_points INTEGER,
        away_points INTEGER,
        conference_game INTEGER,
        completed INTEGER NOT NULL DEFAULT 0
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS game_team_stats (
        game_id INTEGER NOT NULL,
        team TEXT NOT NULL,
        home_away TEXT NOT NULL,
        category TEXT NOT NULL,
        stat TEXT,
        PRIMARY KEY (game_id, team, category)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS team_epa_season (
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        games INTEGER,
        plays INTEGER,
        epa_per_play REAL,
        success_rate REAL,
        explosiveness REAL,
        off_epa_rank INTEGER,
        def_epa_rank INTEGER,
        PRIMARY KEY (season, team)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS team_style_profile (
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        run_rate REAL,
        pass_rate REAL,
        epa_rushing REAL,
        epa_passing REAL,
        plays_per_game REAL,
        offensive_identity TEXT,
        PRIMARY KEY (season, team)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS team_season_trajectory (
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        epa_per_play REAL,
        epa_delta REAL,
        win_pct REAL,
        recruiting_rank INTEGER,
        PRIMARY KEY (season, team)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS team_drive_patterns (
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        outcome TEXT NOT NULL,
        start_yard INTEGER NOT NULL,
        end_yard INTEGER NOT NULL,
        count INTEGER,
        avg_plays REAL,
        avg_yards REAL,
        PRIMARY KEY (season, team, outcome, start_yard, end_yard)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS defensive_havoc (
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        havoc_rate REAL,
        PRIMARY KEY (season, team)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS team_special_teams_sos (
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        sp_st_rating REAL,
        PRIMARY KEY (season, team)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS records (
        year INTEGER NOT NULL,
        team TEXT NOT NULL,
        classification TEXT,
        conference TEXT,
        total__wins INTEGER,
        total__losses INTEGER,
        PRIMARY KEY (year, team)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS rankings (
        season INTEGER NOT NULL,
        week INTEGER NOT NULL,
        poll TEXT NOT NULL,
        school TEXT NOT NULL,
        rank INTEGER,
        conference TEXT,
        first_place_votes INTEGER,
        points INTEGER
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS player_season_leaders (
        season INTEGER NOT NULL,
        category TEXT NOT NULL,
        player_id TEXT NOT NULL,
        name TEXT,
        team TEXT,
        conference TEXT,
        position TEXT,
        yards REAL,
        touchdowns INTEGER,
        interceptions INTEGER,
        attempts INTEGER,
        completions INTEGER,
        pct REAL,
        carries INTEGER,
        yards_per_carry REAL,
        receptions INTEGER,
        yards_per_reception REAL,
        total_tackles REAL,
        solo_tackles REAL,
        sacks REAL,
        tackles_for_loss REAL,
        passes_defended INTEGER,
        PRIMARY KEY (season, category, player_id)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS roster (
        id TEXT NOT NULL,
        year INTEGER NOT NULL,
        first_name TEXT,
        last_name TEXT,
        team TEXT,
        position TEXT,
        jersey INTEGER,
        height INTEGER,
        weight INTEGER,
        home_city TEXT,
        home_state TEXT,
        PRIMARY KEY (id, year)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS player_detail (
        player_id TEXT NOT NULL,
        season INTEGER NOT NULL,
        name TEXT,
        team TEXT,
        position TEXT,
        jersey INTEGER,
        height INTEGER,
        weight INTEGER,
        year INTEGER,
        home_city TEXT,
        home_state TEXT,
        stars INTEGER,
        recruit_rating REAL,
        national_ranking INTEGER,
        recruit_class INTEGER,
        pass_att INTEGER, pass_cmp INTEGER, pass_yds INTEGER, pass_td INTEGER, pass_int INTEGER, pass_pct REAL,
        rush_car INTEGER, rush_yds INTEGER, rush_td INTEGER, rush_ypc REAL,
        rec INTEGER, rec_yds INTEGER, rec_td INTEGER, rec_ypr REAL,
        tackles REAL, solo REAL, sacks REAL, tfl REAL, pass_def INTEGER, def_int INTEGER,
        fg_made INTEGER, fg_att INTEGER, xp_made INTEGER, xp_att INTEGER, punt_yds INTEGER,
        PRIMARY KEY (player_id, season)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS player_game_epa (
        game_id INTEGER NOT NULL,
        season INTEGER NOT NULL,
        team TEXT NOT NULL,
        player_name TEXT NOT NULL,
        play_category TEXT NOT NULL,
        plays INTEGER,
        total_epa REAL,
        epa_per_play REAL,
        success_rate REAL,
        explosive_plays INTEGER,
        total_yards REAL,
        PRIMARY KEY (game_id, player_name, team, play_category)
    );
    """,
    """
    CREATE TABLE IF NOT EXISTS player_comparison (
        player_id TEXT NOT NULL,
        season INTEGER NOT NULL,
        name TEXT,
        team TEXT,
        position TEXT,
        position_group TEXT,
        pass_yds REAL, pass_td REAL, pass_pct REAL,
        rush_yds REAL, rush_td REAL, rush_ypc REAL,
        rec_yds REAL, rec_td REAL,
        tackles REAL, sacks REAL, tfl REAL, ppa_avg REAL,
        pass_yds_pctl REAL, pass_td_pctl REAL, pass_pct_pctl REAL,
        rush_yds_pctl REAL, rush_td_pctl REAL, rush_ypc_pctl REAL,
        rec_yds_pctl REAL, rec_td_pctl REAL,
        tackles_pctl REAL, sacks_pctl REAL, tfl_pctl REAL, ppa_avg_pctl REAL,
        PRIMARY KEY (player_id, season)
    );
    """,
    "CREATE INDEX IF NOT EXISTS idx_games_season_week ON games(season, week);",
    "CREATE INDEX IF NOT EXISTS idx_rankings_season_poll ON rankings(season, poll, week);",
    "CREATE INDEX IF NOT EXISTS idx_leaders_season_category ON player_season_leaders(season, category);",
]


def create_tables(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()
    for stmt in DDL:
        cur.execute(stmt)
    conn.commit()
