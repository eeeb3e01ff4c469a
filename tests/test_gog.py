import json
import sqlite3
from contextlib import closing

from aletheia.scanners import gog


def test_missing_database(tmp_path, monkeypatch):
    monkeypatch.setattr(gog, "GOG_DB_PATH", tmp_path / "none.db")
    assert gog.get_games() == []


def test_games(tmp_path, monkeypatch):
    db = tmp_path / "galaxy.db"
    good = tmp_path / "good"
    good.mkdir()
    (good / "goggame-1.info").write_text(json.dumps({"name": "Good Game"}))
    bad = tmp_path / "bad"
    bad.mkdir()
    (bad / "goggame-2.info").write_text("{")
    with closing(sqlite3.connect(db)) as con:
        con.execute("CREATE TABLE InstalledBaseProducts (productId, installationPath)")
        con.executemany("INSERT INTO InstalledBaseProducts VALUES (?, ?)",
                        [(1, str(good)), (2, str(bad)), (3, str(tmp_path / "x"))])
        con.commit()
    monkeypatch.setattr(gog, "GOG_DB_PATH", db)

    games = gog.get_games()
    assert len(games) == 1
    assert games[0].name == "Good Game"
    assert games[0].installation_dir == good
    assert games[0].source == "GOG"