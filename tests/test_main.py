import json

import pytest

from main import main, parse_args


@pytest.fixture()
def sqlite_env(tmp_path, monkeypatch):
    db_path = tmp_path / "cfb.db"
    monkeypatch.setenv("CFB_STORE", "sqlite")
    monkeypatch.setenv("CFB_DB_PATH", str(db_path))
    monkeypatch.setenv("ENV_FILE", str(tmp_path / "missing.env"))
    return db_path


def test_parse_args_games():
    args = parse_args(["games", "--season", "2025", "--week", "2"])
    assert (args.page, args.season, args.week, args.phase) == ("games", 2025, 2, "regular")


def test_init_db_then_render_empty_games_page(sqlite_env, capsys):
    assert main(["init-db"]) == 0
    assert sqlite_env.exists()

    assert main(["--indent", "0", "games", "--season", "2025"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["page"] == "games"
    assert payload["params"]["week"] == 1
    assert payload["regions"]["games"]["status"] == "empty"


def test_invalid_category_exits_nonzero(sqlite_env):
    assert main(["init-db"]) == 0
    assert main(["players", "--category", "kicking"]) == 2
