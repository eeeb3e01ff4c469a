"""Discovery of games installed through GOG Galaxy."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import List

from aletheia.scanners.game import Game

log = logging.getLogger(__name__)

GOG_DB_PATH = Path("C:/ProgramData/GOG.com/Galaxy/storage/galaxy-2.0.db")


def get_games() -> List[Game]:
    """Games recorded in the GOG Galaxy database."""
    if not GOG_DB_PATH.exists():
        return []
    with closing(sqlite3.connect(GOG_DB_PATH)) as con:
        rows = con.execute(
            "SELECT productId, installationPath FROM InstalledBaseProducts").fetchall()

    games = []
    for product_id, install_path in rows:
        directory = Path(install_path)
        info_path = directory / f"goggame-{product_id}.info"
        if not info_path.exists():
            log.error("%s is missing a GOG info file.", directory)
            continue
        try:
            with info_path.open(encoding="utf-8") as handle:
                name = json.load(handle)["name"]
            if not isinstance(name, str):
                raise TypeError
        except (ValueError, KeyError, TypeError):
            log.error("Malformed GOG manifest in %s.", directory)
            continue
        games.append(Game(name=name, installation_dir=directory, source="GOG"))
    return games