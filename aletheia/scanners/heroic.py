"""Discovery of GOG games installed through Heroic."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Optional

from aletheia import dirs
from aletheia.scanners.game import Game

log = logging.getLogger(__name__)


def _heroic_dir() -> Optional[Path]:
    if dirs._is_unix():
        candidates = [dirs.config() / "heroic",
                      dirs.home() / ".var" / "app" / "com.heroicgameslauncher.hgl"]
    else:
        candidates = [dirs.config() / "heroic"]
    return next((c for c in candidates if c.exists()), None)


def _read_json(path: Path):
    try:
        with path.open(encoding="utf-8") as handle:
            return json.load(handle)
    except ValueError:
        return None


def _wine_prefix(heroic: Path, app_id: str) -> Optional[str]:
    game_config = heroic / "GamesConfig" / f"{app_id}.json"
    if not game_config.exists():
        raise LookupError
    data = _read_json(game_config)
    if data is None:
        raise LookupError
    section = data.get(app_id) if isinstance(data, dict) else None
    prefix = section.get("winePrefix") if isinstance(section, dict) else None
    return prefix if isinstance(prefix, str) else None


def get_games() -> List[Game]:
    """GOG games installed by Heroic."""
    heroic = _heroic_dir()
    if heroic is None:
        return []
    manifest_path = heroic / "gog_store" / "installed.json"
    if not manifest_path.exists():
        return []
    manifest = _read_json(manifest_path)
    try:
        installed = [(g["appName"], g["install_path"], g["platform"]) for g in manifest["installed"]]
    except (TypeError, KeyError):
        log.error("Failed to parse GOG manifest.")
        return []

    games = []
    for app_id, install_path, platform in installed:
        game_data = heroic / "gogdlConfig" / "heroic_gogdl" / "manifests" / app_id
        if not game_data.exists():
            continue
        game_manifest = _read_json(game_data)
        try:
            name = game_manifest["products"][0]["name"]
        except (TypeError, KeyError, IndexError):
            continue

        prefix = None
        if dirs._is_unix() and platform == "windows":
            try:
                prefix = _wine_prefix(heroic, app_id)
            except LookupError:
                continue

        games.append(Game(name=name, installation_dir=Path(install_path),
                          prefix=prefix, source="Heroic"))
    return games