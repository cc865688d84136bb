from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from cfbstats.utils.env import getenv_str, project_root


def resolve_db_path(db_path: Optional[str]) -> Path:
    raw = db_path or getenv_str("CFB_DB_PATH", "data/cfb_data.db")
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = project_root() / path
    return path.resolve()


def connect(db_path: Optional[str] = None) -> sqlite3.Connection:
    if db_path == ":memory:":
        conn = sqlite3.connect(":memory:", check_same_thread=False)
    else:
        path = resolve_db_path(db_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        # Shared by the fan-out worker threads; SqliteStore serialises access.
        conn = sqlite3.connect(str(path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode = WAL;")

    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn
