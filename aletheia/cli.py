"""Command-line entry point: argument parsing and the backup/restore/update commands."""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence

from aletheia import gamedb, infer, updater
from aletheia.config import Config
from aletheia.gamedb import GameDbError, GameInfo
from aletheia.operations import (
    MANIFEST_NAME,
    BackupError,
    RestoreError,
    backup_game,
    restore_game,
)
from aletheia.scanners import steam
from aletheia.scanners.game import Game

log = logging.getLogger(__name__)


@dataclass
class Flag:
    """A ``--name`` option, optionally followed by a value."""

    name: str
    value: Optional[str] = None


@dataclass
class Args:
    """Positional arguments and ``--flags`` given to a command."""

    positional: List[str] = field(default_factory=list)
    flags: List[Flag] = field(default_factory=list)

    @classmethod
    def parse(cls, args: Sequence[str]) -> "Args":
        """Split arguments; a flag takes the next argument as its value unless it starts with '-'."""
        positional: List[str] = []
        flags: List[Flag] = []
        pending: Optional[str] = None

        for arg in args:
            if pending is not None:
                if not arg.startswith("-"):
                    flags.append(Flag(pending, arg))
                    pending = None
                    continue
                flags.append(Flag(pending))
                pending = None
            if arg.startswith("--"):
                pending = arg[2:]
            else:
                positional.append(arg)

        if pending is not None:
            flags.append(Flag(pending))
        return cls(positional, flags)

    def has_flag(self, name: str) -> bool:
        return any(flag.name == name for flag in self.flags)

    def get_flag(self, name: str) -> Optional[Flag]:
        return next((flag for flag in self.flags if flag.name == name), None)

    def get_flag_value(self, name: str) -> Optional[str]:
        flag = self.get_flag(name)
        return flag.value if flag is not None else None

    def flags_map(self) -> Dict[str, Optional[str]]:
        return {flag.name: flag.value for flag in self.flags}


def ensure_steam_account_selected(config: Config) -> str:
    """Choose the Steam account to use, asking if there are several, and save it.

    Returns the chosen account ID.
    """
    users = steam.get_users()
    if users is None:
        raise RuntimeError("Steam installation not found")
    if not users:
        raise RuntimeError("No Steam accounts found")

    choices = list(users.items())
    if len(choices) == 1:
        steam_id, user = choices[0]
        print(f"Steam account ID not set, setting as {user.persona_name} ({steam_id})")
    else:
        print("Multiple Steam accounts found. Please choose one:")
        for number, (steam_id, user) in enumerate(choices, 1):
            print(f"{number}. {user.persona_name} ({steam_id})")

        while True:
            answer = input(f"Enter your choice (1-{len(choices)}): ")
            try:
                number = int(answer.strip())
            except ValueError:
                number = 0
            if 1 <= number <= len(choices):
                break
            print(f"Invalid choice. Please enter a number between 1 and {len(choices)}.",
                  file=sys.stderr)

        steam_id, user = choices[number - 1]
        print(f"Selected {user.persona_name} ({steam_id})")

    account_id = str(steam.id64_to_id3(int(steam_id)))
    replace(config, steam_account_id=account_id).save()
    return account_id


def _with_steam_account(config: Config, installed: Sequence[Game]) -> Config:
    if config.steam_account_id is None and any(g.source == "Steam" for g in installed):
        return replace(config, steam_account_id=ensure_steam_account_selected(config))
    return config


def run_backup(args: Args, config: Config) -> None:
    """Back up every installed game, or only those named on the command line."""
    game_db = gamedb.parse()
    installed = gamedb.get_installed_games()
    config = _with_steam_account(config, installed)

    launcher = args.get_flag_value("infer")
    if launcher is not None:
        infer.backup(launcher, config)
        return

    for game in installed:
        if args.positional and game.name not in args.positional:
            continue
        try:
            backup_game(game, config, game_db[game.name])
        except BackupError as exc:
            print(f"Failed to backup {game.name}: {exc}", file=sys.stderr)
        else:
            print(f"Backed up {game.name}.")


def run_restore(args: Args, config: Config) -> None:
    """Restore every backed-up game, or only those named on the command line."""
    if not config.save_dir.exists():
        print("Backup directory doesn't exist.", file=sys.stderr)
        return

    installed = gamedb.get_installed_games()
    config = _with_steam_account(config, installed)

    launcher = args.get_flag_value("infer")
    if launcher is not None:
        infer.restore(launcher, config)
        return

    for game_dir in sorted(config.save_dir.iterdir()):
        if not game_dir.is_dir() or game_dir.name.startswith("."):
            continue

        manifest_path = game_dir / MANIFEST_NAME
        if not manifest_path.exists():
            print(f"{game_dir.name} is missing a manifest file.", file=sys.stderr)
            continue

        try:
            manifest = GameInfo.load(manifest_path)
        except ValueError:
            print(f"Failed to parse {game_dir.name}'s manifest.", file=sys.stderr)
            continue

        if args.positional and manifest.name not in args.positional:
            continue

        try:
            restore_game(game_dir, manifest, installed, config)
        except RestoreError as exc:
            print(f"Failed to restore {manifest.name}: {exc}")
        else:
            print(f"Restored {manifest.name}.")


def run_update(args: Args, config: Config) -> None:
    """Report whether a newer release is available."""
    try:
        release = updater.check()
    except updater.UpdateError as exc:
        print(f"Error checking for updates: {exc}", file=sys.stderr)
        return
    if release is None:
        print("Aletheia is already up to date.")
    else:
        print("Aletheia is out of date! You can download the newest release here: "
              f"{release.url}")


def run_update_gamedb(args: Args, config: Config) -> None:
    """Download the latest game database."""
    try:
        updated = gamedb.update()
    except GameDbError as exc:
        print(f"Error updating GameDB: {exc}", file=sys.stderr)
        return
    print("Successfully updated GameDB." if updated else "GameDB is already up to date.")


def run_update_custom(args: Args, config: Config) -> None:
    """Download the configured custom game databases."""
    try:
        updated = gamedb.update_custom(config)
    except GameDbError as exc:
        print(f"Error updating custom GameDBs: {exc}", file=sys.stderr)
        return
    print("Successfully updated custom GameDBs." if updated
          else "Custom GameDBs are already up to date.")


_COMMANDS: Dict[str, Callable[[Args, Config], None]] = {
    "backup": run_backup,
    "restore": run_restore,
    "update": run_update,
    "update_gamedb": run_update_gamedb,
    "update_custom_gamedbs": run_update_custom,
}


def _in_flatpak() -> bool:
    return (sys.platform.startswith("linux")
            and "FLATPAK_ID" in os.environ
            and os.path.exists("/.flatpak-info"))


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command named by the first argument."""
    logging.basicConfig(level=os.environ.get("ALETHEIA_LOG", "WARNING").upper())
    log.info("Aletheia v%s (Flatpak: %s)", updater.CURRENT_VERSION, _in_flatpak())

    arguments = list(sys.argv[1:] if argv is None else argv)
    config = Config.load()

    if not arguments:
        print(f"Usage: aletheia <{'|'.join(_COMMANDS)}> [args]", file=sys.stderr)
        return 2

    command, rest = arguments[0], arguments[1:]
    handler = _COMMANDS.get(command)
    if handler is None:
        print("Command not found.", file=sys.stderr)
        return 1

    handler(Args.parse(rest), config)
    return 0