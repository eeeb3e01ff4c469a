"""Steam library, shortcut and account discovery."""

from __future__ import annotations

import logging
import re
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from aletheia import dirs
from aletheia.scanners.game import Game

log = logging.getLogger(__name__)

_ID64_BASE = 76561197960265728

_VDF_LEXEME = re.compile(
    r'\s+|//[^\n]*|(?P<brace>[{}])|"(?P<quoted>(?:\\.|[^"\\])*)"|\[[^\]]*\]|(?P<bare>[^\s{}"]+)'
)
_ESCAPES = {"n": "\n", "t": "\t", "\\": "\\", '"': '"'}


@dataclass
class LoginUser:
    """A Steam account that has logged in on this machine."""

    persona_name: str


def _unescape(text: str) -> str:
    return re.sub(r"\\(.)", lambda m: _ESCAPES.get(m.group(1), m.group(1)), text)


def _lexemes(text: str):
    pos = 0
    while pos < len(text):
        match = _VDF_LEXEME.match(text, pos)
        if match is None:
            raise ValueError(f"invalid VDF at offset {pos}")
        pos = match.end()
        if match.group("brace"):
            yield match.group("brace"), None
        elif match.group("quoted") is not None:
            yield "str", _unescape(match.group("quoted"))
        elif match.group("bare") is not None:
            yield "str", match.group("bare")


def parse_vdf(text: str) -> dict:
    """Parse text KeyValues into nested dictionaries."""
    root: dict = {}
    stack = [root]
    key: Optional[str] = None
    for kind, value in _lexemes(text):
        if kind == "{":
            if key is None:
                raise ValueError("VDF block without a key")
            child: dict = {}
            stack[-1][key] = child
            stack.append(child)
            key = None
        elif kind == "}":
            if key is not None or len(stack) == 1:
                raise ValueError("unexpected '}' in VDF")
            stack.pop()
        elif key is None:
            key = value
        else:
            stack[-1][key] = value
            key = None
    if key is not None or len(stack) != 1:
        raise ValueError("unterminated VDF")
    return root


def _parse_binary_vdf(data: bytes, pos: int = 0) -> Tuple[dict, int]:
    result: dict = {}

    def cstring(start: int) -> Tuple[str, int]:
        end = data.index(b"\x00", start)
        return data[start:end].decode("utf-8", "replace"), end + 1

    while True:
        if pos >= len(data):
            raise ValueError("truncated binary VDF")
        kind = data[pos]
        pos += 1
        if kind == 0x08:
            return result, pos
        key, pos = cstring(pos)
        if kind == 0x00:
            result[key], pos = _parse_binary_vdf(data, pos)
        elif kind == 0x01:
            result[key], pos = cstring(pos)
        elif kind == 0x02:
            (result[key],) = struct.unpack_from("<I", data, pos)
            pos += 4
        elif kind == 0x03:
            (result[key],) = struct.unpack_from("<f", data, pos)
            pos += 4
        elif kind == 0x07:
            (result[key],) = struct.unpack_from("<Q", data, pos)
            pos += 8
        else:
            raise ValueError(f"unknown binary VDF type {kind:#x}")


def id64_to_id3(id64: int) -> int:
    """Convert a 64-bit Steam ID to the account ID used in userdata paths."""
    if id64 < _ID64_BASE:
        raise ValueError(f"{id64} is not a 64-bit Steam ID")
    return id64 - _ID64_BASE


def locate_steam_dir() -> Optional[Path]:
    """Return Steam's installation directory, or None if Steam is not installed."""
    if dirs._is_unix():
        home = dirs.home()
        candidates = [
            dirs.app_data() / "Steam",
            home / ".steam" / "steam",
            home / ".var" / "app" / "com.valvesoftware.Steam" / ".local" / "share" / "Steam",
        ]
    else:
        candidates = [dirs._windows_steam_dir()]
    return next((c for c in candidates if c.is_dir()), None)


def _read_vdf(path: Path) -> dict:
    return parse_vdf(path.read_text(encoding="utf-8", errors="replace"))


def get_users() -> Optional[Dict[str, LoginUser]]:
    """Accounts listed in loginusers.vdf keyed by 64-bit ID, or None without Steam."""
    steam_dir = locate_steam_dir()
    if steam_dir is None:
        return None
    document = _read_vdf(steam_dir / "config" / "loginusers.vdf")
    users_block = next(iter(document.values()), {})
    return {
        steam_id: LoginUser(persona_name=data["PersonaName"])
        for steam_id, data in users_block.items()
    }


def _prefix_for(steam_dir: Path, app_id: int) -> Optional[Path]:
    if not dirs._is_unix():
        return None
    prefix = steam_dir / "steamapps" / "compatdata" / str(app_id) / "pfx"
    return prefix if prefix.exists() else None


def _library_paths(steam_dir: Path) -> Optional[List[Path]]:
    try:
        document = _read_vdf(steam_dir / "steamapps" / "libraryfolders.vdf")
    except (OSError, ValueError):
        return None
    folders = next(iter(document.values()), {})
    return [Path(entry["path"]) for entry in folders.values()
            if isinstance(entry, dict) and "path" in entry]


def _library_games(steam_dir: Path, library: Path) -> List[Game]:
    games = []
    for manifest in sorted((library / "steamapps").glob("appmanifest_*.acf")):
        state = next(iter(_read_vdf(manifest).values()), {})
        name = state.get("name")
        if name is None:
            log.warning("%s has no game name.", manifest)
            continue
        games.append(Game(
            name=name,
            installation_dir=library / "steamapps" / "common" / state.get("installdir", ""),
            prefix=_prefix_for(steam_dir, int(state.get("appid", 0))),
            source="Steam",
        ))
    return games


def _field(entry: dict, name: str):
    lowered = name.lower()
    return next((v for k, v in entry.items() if k.lower() == lowered), None)


def _shortcut_games(steam_dir: Path) -> List[Game]:
    games = []
    for shortcuts_file in sorted((steam_dir / "userdata").glob("*/config/shortcuts.vdf")):
        document, _ = _parse_binary_vdf(shortcuts_file.read_bytes())
        for entry in next(iter(document.values()), {}).values():
            start_dir = str(_field(entry, "StartDir") or "")
            games.append(Game(
                name=str(_field(entry, "AppName") or ""),
                installation_dir=Path(start_dir.strip('"')),
                prefix=_prefix_for(steam_dir, int(_field(entry, "appid") or 0)),
                source="Steam",
            ))
    return games


def get_games() -> List[Game]:
    """Installed Steam games followed by non-Steam shortcuts."""
    steam_dir = locate_steam_dir()
    if steam_dir is None:
        return []
    libraries = _library_paths(steam_dir)
    if libraries is None:
        return []

    games: List[Game] = []
    for library in libraries:
        if not (library / "steamapps").is_dir():
            continue
        games.extend(_library_games(steam_dir, library))
    games.extend(_shortcut_games(steam_dir))
    return games