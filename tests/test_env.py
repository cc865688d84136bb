import logging

import pytest

from cfbstats.database.sqlite_store import SqliteStore
from cfbstats.database.store import store_from_env
from cfbstats.database.supabase_client import SupabaseClient
from cfbstats.utils.env import getenv_choice, getenv_float, getenv_int, getenv_str, load_env
from cfbstats.utils.logging import configure_logging


def test_load_env_reads_env_file_without_overriding(tmp_path, monkeypatch):
    env_file = tmp_path / "test.env"
    env_file.write_text("SCOUT_API_URL=http://scout.test\nLOG_LEVEL=DEBUG\n")
    monkeypatch.setenv("ENV_FILE", str(env_file))
    monkeypatch.delenv("SCOUT_API_URL", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    load_env()
    assert getenv_str("SCOUT_API_URL") == "http://scout.test"
    assert getenv_str("LOG_LEVEL") == "WARNING"
    # loaded by dotenv, not by monkeypatch: remove it so it does not leak
    monkeypatch.delenv("SCOUT_API_URL")


def test_typed_getters(monkeypatch):
    monkeypatch.setenv("CFB_FANOUT_WORKERS", "4")
    monkeypatch.setenv("SUPABASE_TIMEOUT_SECONDS", "not-a-number")
    monkeypatch.setenv("SCOUT_API_URL", "   ")
    assert getenv_int("CFB_FANOUT_WORKERS", 8) == 4
    assert getenv_float("SUPABASE_TIMEOUT_SECONDS", 15.0) == 15.0
    assert getenv_str("SCOUT_API_URL", "http://localhost:8000") == "http://localhost:8000"


def test_getenv_choice(monkeypatch):
    monkeypatch.setenv("CFB_STORE", "SQLite")
    assert getenv_choice("CFB_STORE", ("supabase", "sqlite"), "supabase") == "sqlite"
    monkeypatch.setenv("CFB_STORE", "postgres")
    with pytest.raises(ValueError):
        getenv_choice("CFB_STORE", ("supabase", "sqlite"), "supabase")


def test_store_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("CFB_STORE", "sqlite")
    monkeypatch.setenv("CFB_DB_PATH", str(tmp_path / "mirror.db"))
    assert isinstance(store_from_env(), SqliteStore)

    monkeypatch.setenv("CFB_STORE", "supabase")
    monkeypatch.setenv("SUPABASE_URL", "https://proj.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "secret")
    assert isinstance(store_from_env(), SupabaseClient)


def test_configure_logging_respects_level(monkeypatch):
    root = logging.getLogger()
    old = root.level
    monkeypatch.setenv("LOG_LEVEL", "ERROR")
    try:
        configure_logging()
        assert root.level == logging.ERROR
    finally:
        root.setLevel(old)
