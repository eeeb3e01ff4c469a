"""Discovery of games installed through Lutris."""

from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List

import yaml

from aletheia import dirs
from aletheia.scanners.game import Game

_FLATPAK_DATA = Path(".var/app/net.lutris.Lutris/data/lutris")


def get_games() -> List[Game]:
    """Games recorded in the Lutris database."""
    flatpak = dirs.home() / _FLATPAK_DATA
    config_dir = next((d for d in (dirs.config() / "lutris" / "games",
                                   dirs.app_data() / "lutris" / "games",
                                   flatpak / "games") if d.exists()), None)
    if config_dir is None:
        return []
    db_path = next((p for p in (dirs.app_data() / "lutris" / "pga.db", flatpak / "pga.db")
                    if p.exists()), None)
    if db_path is None:
        return []

    with closing(sqlite3.connect(db_path)) as con:
        rows = con.execute("SELECT name, directory, platform, configpath FROM games").fetchall()

    games = []
    for name, directory, platform, config_path in rows:
        directory = directory or ""
        if directory and not Path(directory).exists():
            continue
        if platform == "Windows":
            with (config_dir / f"{config_path}.yml").open(encoding="utf-8") as handle:
                game_config = yaml.safe_load(handle) or {}
            section = game_config.get("game") if isinstance(game_config, dict) else None
            exe = section.get("exe") if isinstance(section, dict) else None
            install = Path(exe).parent if isinstance(exe, str) else None
            games.append(Game(name, install, Path(directory), "Lutris"))
        else:
            games.append(Game(name, Path(directory), None, "Lutris"))
    return games