"""Backing up game saves and restoring them from a backup directory."""

from __future__ import annotations

import glob
import logging
import os
import shutil
from pathlib import Path, PurePath
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

from aletheia import dirs
from aletheia.dirs import expand_path, shrink_path
from aletheia.gamedb import FileMetadata, GameDbEntry, GameInfo
from aletheia.hashing import hash_file
from aletheia.scanners.game import Game

log = logging.getLogger(__name__)

MANIFEST_NAME = "aletheia_manifest.yaml"
_IGNORED_FILES = frozenset({"steam_autocloud.vdf"})


class BackupError(Exception):
    """A game's saves could not be backed up."""


class MalformedManifestError(BackupError):
    """An existing backup manifest could not be read."""

    def __init__(self, path: Optional[Path] = None) -> None:
        super().__init__("Malformed manifest file")
        self.path = path


class RestoreError(Exception):
    """A game's saves could not be restored."""


class GameNotFoundError(RestoreError):
    """The backed-up game is not installed."""

    def __init__(self, name: str = "") -> None:
        super().__init__("Game not found")
        self.name = name


class MissingOrCorruptedFilesError(RestoreError):
    """A file listed in the manifest is absent from the backup or fails its hash check."""

    def __init__(self, file_name: str) -> None:
        super().__init__(f"{file_name} is missing or corrupted")
        self.file_name = file_name


def backup_folder_for(config, game_name: str) -> Path:
    """The directory holding a game's backup; ':' is dropped for portability."""
    return Path(config.save_dir) / game_name.replace(":", "")


def _patterns(entry: GameDbEntry) -> List[str]:
    patterns = list(entry.files.windows or [])
    if dirs._is_unix():
        patterns.extend(entry.files.linux or [])
    return patterns


def _matching_files(patterns: Iterable[str], game: Game, steam_id: Optional[str]) -> Iterator[Path]:
    for pattern in patterns:
        expanded = expand_path(pattern, game.installation_dir, game.prefix, steam_id)
        for match in sorted(glob.glob(str(expanded), recursive=True)):
            path = Path(match)
            if path.is_dir():
                log.warning("Found %s while backing up %s. Glob patterns should match files only.",
                            path, game.name)
                continue
            if path.name in _IGNORED_FILES:
                continue
            yield path


def _needs_backup(file: Path, previous: Optional[FileMetadata]) -> bool:
    if previous is None:
        return True
    return hash_file(file) != previous.hash and os.stat(file).st_mtime > previous.modified


def _copy_file(source: Path, destination: Path, shrunk_path: str) -> FileMetadata:
    shutil.copy(source, destination)
    stat = os.stat(source)
    return FileMetadata(
        hash=hash_file(source),
        modified=stat.st_mtime,
        path=shrunk_path,
        size=stat.st_size,
    )


def backup_game(game: Game, config, entry: GameDbEntry) -> bool:
    """Copy a game's save files into the backup directory.

    Returns True if anything was copied and the manifest rewritten.
    """
    steam_id = config.steam_account_id
    folder = backup_folder_for(config, game.name)
    manifest_path = folder / MANIFEST_NAME

    previous_files: Dict[str, FileMetadata] = {}
    if manifest_path.exists():
        try:
            existing = GameInfo.load(manifest_path)
        except ValueError as exc:
            raise MalformedManifestError(manifest_path) from exc
        for record in existing.files:
            previous_files.setdefault(record.path, record)

    files = list(_matching_files(_patterns(entry), game, steam_id))
    if not files:
        return False

    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BackupError(f"Failed to create backup directory: {exc}") from exc

    changed = False
    records: List[FileMetadata] = []
    for file in files:
        shrunk = str(shrink_path(file, game.installation_dir, game.prefix, steam_id))
        previous = previous_files.get(shrunk)
        if _needs_backup(file, previous):
            records.append(_copy_file(file, folder / file.name, shrunk))
            changed = True
        else:
            records.append(previous)

    if not changed:
        return False

    GameInfo(name=game.name, files=records).dump(manifest_path)
    return True


def restore_game(game_dir, manifest: GameInfo, installed_games: Sequence[Game], config) -> bool:
    """Copy backed-up files back to where the game expects them."""
    steam_id = config.steam_account_id
    game_dir = Path(game_dir)

    game = next((g for g in installed_games if g.name == manifest.name), None)
    if game is None:
        raise GameNotFoundError(manifest.name)

    for record in manifest.files:
        source = game_dir / PurePath(record.path).name
        if not source.exists() or hash_file(source) != record.hash:
            raise MissingOrCorruptedFilesError(source.name)

    for record in manifest.files:
        target = expand_path(record.path, game.installation_dir, game.prefix, steam_id)
        source = game_dir / PurePath(record.path).name
        if target.exists() and hash_file(target) == record.hash:
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy(source, target)

    return True