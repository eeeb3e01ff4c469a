"""The game database: which files make up each game's saves."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests
import yaml

from aletheia import dirs
from aletheia.scanners import gog, heroic, lutris, steam
from aletheia.scanners.game import Game

log = logging.getLogger(__name__)

GAMEDB_URL = os.environ.get("ALETHEIA_GAMEDB_URL", "https://gamedb.example.com/gamedb.yaml")


class GameDbError(Exception):
    """Downloading or storing a game database failed."""


def _string_list(value: Any, name: str) -> Optional[List[str]]:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name} must be a list of strings")
    return list(value)


@dataclass
class GameFiles:
    """Save file patterns per platform."""

    windows: Optional[List[str]] = None
    linux: Optional[List[str]] = None


@dataclass
class GameDbEntry:
    """One game's entry in the database."""

    files: GameFiles

    @classmethod
    def from_dict(cls, data: Any) -> "GameDbEntry":
        if not isinstance(data, dict) or not isinstance(data.get("files"), dict):
            raise ValueError("game entry needs a 'files' mapping")
        files = data["files"]
        return cls(GameFiles(_string_list(files.get("windows"), "windows"),
                             _string_list(files.get("linux"), "linux")))

    def to_dict(self) -> dict:
        return {"files": {"windows": self.files.windows, "linux": self.files.linux}}


@dataclass
class FileMetadata:
    """A backed-up file; ``modified`` is a POSIX timestamp."""

    hash: str
    modified: float
    path: str
    size: int

    @classmethod
    def from_dict(cls, data: Any) -> "FileMetadata":
        if not isinstance(data, dict):
            raise ValueError("file entry must be a mapping")
        modified = data["modified"]
        if isinstance(modified, dict):
            modified = modified["secs_since_epoch"] + modified.get("nanos_since_epoch", 0) / 1e9
        return cls(str(data["hash"]), float(modified), str(data["path"]), int(data["size"]))

    def to_dict(self) -> dict:
        nanos = round(self.modified * 1e9)
        return {
            "hash": self.hash,
            "modified": {"secs_since_epoch": nanos // 10**9, "nanos_since_epoch": nanos % 10**9},
            "path": self.path,
            "size": self.size,
        }


@dataclass
class GameInfo:
    """The manifest stored next to a game's backup."""

    name: str
    files: List[FileMetadata] = field(default_factory=list)

    @classmethod
    def load(cls, path) -> "GameInfo":
        """Read a manifest; raises ValueError if it is malformed."""
        with open(path, encoding="utf-8") as handle:
            try:
                data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ValueError(f"malformed manifest: {exc}") from exc
        try:
            return cls(str(data["name"]), [FileMetadata.from_dict(f) for f in data["files"]])
        except (TypeError, KeyError) as exc:
            raise ValueError(f"malformed manifest: {exc}") from exc

    def dump(self, path) -> None:
        """Write the manifest as YAML."""
        document = {"name": self.name, "files": [f.to_dict() for f in self.files]}
        with open(path, "w", encoding="utf-8") as handle:
            yaml.safe_dump(document, handle, sort_keys=False)


def _parse_db(text: str) -> Dict[str, GameDbEntry]:
    data = yaml.safe_load(text)
    if not isinstance(data, dict):
        raise ValueError("game database must be a mapping")
    return {str(name): GameDbEntry.from_dict(entry) for name, entry in data.items()}


def _builtin_db() -> Dict[str, GameDbEntry]:
    try:
        text = resources.files("aletheia").joinpath("gamedb.yaml").read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        log.error("Built-in GameDB is missing.")
        return {}
    return _parse_db(text)


def _custom_cache_path() -> Path:
    return dirs.cache() / "custom_gamedb.yaml"


def _load_custom_cache() -> Dict[str, dict]:
    path = _custom_cache_path()
    if not path.exists():
        return {}
    try:
        with path.open(encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
        return {
            url: {"etag": meta.get("etag"), "data": {n: GameDbEntry.from_dict(e)
                                                     for n, e in meta["data"].items()}}
            for url, meta in data["databases"].items()
        }
    except (yaml.YAMLError, ValueError, TypeError, KeyError, AttributeError):
        log.error("Failed to parse custom GameDB cache.")
        return {}


def parse() -> Dict[str, GameDbEntry]:
    """The game database: cached or built-in, extended by custom databases."""
    cached = dirs.cache() / "aletheia" / "gamedb.yaml"
    if cached.exists():
        try:
            db = _parse_db(cached.read_text(encoding="utf-8"))
        except (yaml.YAMLError, ValueError):
            log.error("Failed to parse cached GameDB, falling back to built-in.")
            db = _builtin_db()
    else:
        db = _builtin_db()

    for meta in _load_custom_cache().values():
        db.update(meta["data"])
    return db


def get_installed_games() -> List[Game]:
    """Installed games from every launcher that appear in the database."""
    db = parse()
    games: List[Game] = []
    if dirs._is_unix():
        games.extend(lutris.get_games())
    else:
        games.extend(gog.get_games())
    games.extend(heroic.get_games())
    games.extend(steam.get_games())

    found = []
    for game in games:
        clean = game.name.replace("™", "").replace("®", "").strip()
        if clean in db:
            game.name = clean
            found.append(game)
    return found


def _fetch(url: str, etag: Optional[str]) -> requests.Response:
    headers = {"If-None-Match": etag} if etag else {}
    try:
        response = requests.get(url, headers=headers, timeout=30)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise GameDbError(f"Network error: {exc}") from exc
    return response


def update() -> bool:
    """Download the main database; False if it was already current."""
    cache_dir = dirs.cache()
    db_path = cache_dir / "gamedb.yaml"
    etag_path = cache_dir / "gamedb.etag"
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
        previous = etag_path.read_text(encoding="utf-8") if etag_path.exists() else None
    except OSError as exc:
        raise GameDbError(f"IO error: {exc}") from exc

    response = _fetch(GAMEDB_URL, previous)
    if response.status_code == 304:
        return False
    etag = response.headers.get("ETag")
    if etag is None:
        raise GameDbError("response has no ETag")
    try:
        db_path.write_bytes(response.content)
        etag_path.write_text(etag, encoding="utf-8")
    except OSError as exc:
        raise GameDbError(f"IO error: {exc}") from exc
    return True


def update_custom(config) -> bool:
    """Download the configured custom databases; False if none changed."""
    if not config.custom_databases:
        return False
    cache = _load_custom_cache()
    updated = False
    try:
        dirs.cache().mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise GameDbError(f"IO error: {exc}") from exc

    for url in config.custom_databases:
        cached = cache.get(url)
        response = _fetch(url, cached["etag"] if cached else None)
        if response.status_code == 304:
            continue
        cache[url] = {"etag": response.headers.get("ETag"), "data": _parse_db(response.text)}
        updated = True

    if updated:
        document = {"databases": {
            url: {"etag": meta["etag"],
                  "data": {n: e.to_dict() for n, e in meta["data"].items()}}
            for url, meta in cache.items() if url in config.custom_databases
        }}
        try:
            with _custom_cache_path().open("w", encoding="utf-8") as handle:
                yaml.safe_dump(document, handle)
        except OSError as exc:
            raise GameDbError(f"IO error: {exc}") from exc
    return updated