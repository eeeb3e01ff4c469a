"""Backing up and restoring the game a launcher is currently running."""

from __future__ import annotations

import logging
import os
from typing import Optional

from aletheia import dirs, gamedb
from aletheia.gamedb import GameInfo
from aletheia.operations import MANIFEST_NAME, BackupError, RestoreError, backup_game, restore_game
from aletheia.scanners.game import Game

log = logging.getLogger(__name__)


def _find_installed(name: str, source: str) -> Optional[Game]:
    return next((g for g in gamedb.get_installed_games()
                 if g.name == name and g.source == source), None)


def heroic_game() -> Optional[Game]:
    """The GOG game Heroic is launching, taken from its environment variables."""
    name = os.environ.get("HEROIC_GAME_TITLE")
    if name is None:
        log.error("HEROIC_GAME_TITLE environment variable not found, "
                  "is the game being launched by Heroic?")
        return None
    runner = os.environ.get("HEROIC_GAME_RUNNER")
    if runner is None:
        log.error("HEROIC_GAME_RUNNER environment variable not found, "
                  "is the game being launched by Heroic?")
        return None
    if runner != "gog":
        log.warning("Heroic infer only supports GOG games.")
        return None
    return _find_installed(name, "Heroic")


def lutris_game() -> Optional[Game]:
    """The game Lutris is launching, taken from its environment variables."""
    name = os.environ.get("GAME_NAME")
    if name is None:
        log.error("GAME_NAME environment variable not found, "
                  "is the game being launched by Lutris?")
        return None
    return _find_installed(name, "Lutris")


def infer_game(launcher: str) -> Optional[Game]:
    """The game being launched by ``launcher``; raises ValueError for unsupported launchers."""
    kind = launcher.lower()
    if kind == "heroic":
        return heroic_game()
    if kind == "lutris" and dirs._is_unix():
        return lutris_game()
    raise ValueError(f"unsupported launcher: {launcher}")


def backup(launcher: str, config) -> bool:
    """Back up the launcher's current game; True if anything was saved."""
    try:
        game = infer_game(launcher)
    except ValueError:
        log.warning("Backup was ran with infer using an unsupported launcher.")
        return False

    game_db = gamedb.parse()
    if game is None:
        return False
    try:
        changed = backup_game(game, config, game_db[game.name])
    except BackupError as exc:
        log.error("Failed to backup %s: %s", game.name, exc)
        return False
    log.info("Backed up %s.", game.name)
    return changed


def restore(launcher: str, config) -> bool:
    """Restore the launcher's current game; True if it was restored."""
    try:
        game = infer_game(launcher)
    except ValueError:
        log.warning("Restore was ran with infer using an unsupported launcher.")
        return False
    if game is None:
        return False

    game_dir = config.save_dir / game.name
    if not game_dir.is_dir():
        log.warning("No backups found for %s.", game.name)
        return False

    manifest_path = game_dir / MANIFEST_NAME
    if not manifest_path.exists():
        log.error("%s is missing a manifest file.", game.name)
        return False

    try:
        manifest = GameInfo.load(manifest_path)
    except ValueError:
        log.error("Failed to parse %s's manifest.", game_dir.name)
        return False

    try:
        restored = restore_game(game_dir, manifest, gamedb.get_installed_games(), config)
    except RestoreError as exc:
        log.error("Failed to restore %s: %s", game.name, exc)
        return False
    log.info("Restored %s.", game.name)
    return restored