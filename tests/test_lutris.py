import sqlite3
from contextlib import closing
from pathlib import Path

import pytest

from aletheia.scanners import lutris


@pytest.fixture
def lutris_env(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    games_dir = tmp_path / "data" / "lutris" / "games"
    games_dir.mkdir(parents=True)
    db = tmp_path / "data" / "lutris" / "pga.db"
    with closing(sqlite3.connect(db)) as con:
        con.execute("CREATE TABLE games (name, directory, platform, configpath)")
        con.commit()
    return games_dir, db


def _insert(db, *row):
    with closing(sqlite3.connect(db)) as con:
        con.execute("INSERT INTO games VALUES (?, ?, ?, ?)", row)
        con.commit()


def test_no_lutris(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "a"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "b"))
    assert lutris.get_games() == []


def test_games(lutris_env, tmp_path):
    games_dir, db = lutris_env
    native = tmp_path / "native"
    native.mkdir()
    pfx = tmp_path / "pfx"
    pfx.mkdir()
    _insert(db, "Native", str(native), "Linux", "native")
    _insert(db, "Gone", str(tmp_path / "missing"), "Linux", "gone")
    _insert(db, "Win", str(pfx), "Windows", "win")
    (games_dir / "win.yml").write_text("game:\n  exe: /games/win/bin/run.exe\n")

    games = lutris.get_games()
    assert [g.name for g in games] == ["Native", "Win"]
    assert games[0].installation_dir == native
    assert games[1].installation_dir == Path("/games/win/bin")
    assert games[1].prefix == pfx