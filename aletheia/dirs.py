"""Platform directories, placeholder path expansion and directory sizes."""

from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import List, Optional, Tuple, Union

StrPath = Union[str, "os.PathLike[str]"]
_Replacements = List[Tuple[str, Path]]

_DEFAULT_WINDOWS_STEAM = Path("C:/Program Files (x86)/Steam")
_PROTON_PREFIX_MARKER = "Steam/steamapps/compatdata"


def _is_unix() -> bool:
    return os.name != "nt"


def _env_path(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    return Path(value) if value is not None else None


def _require_env(name: str) -> Path:
    value = _env_path(name)
    if value is None:
        raise RuntimeError(f"{name} environment variable is not set")
    return value


def home() -> Path:
    """The current user's home directory."""
    return Path.home()


def config() -> Path:
    """The user's configuration directory."""
    if _is_unix():
        return _env_path("XDG_CONFIG_HOME") or home() / ".config"
    return _require_env("APPDATA")


def app_data() -> Path:
    """The user's application data directory."""
    if _is_unix():
        return _env_path("XDG_DATA_HOME") or home() / ".local" / "share"
    return _require_env("LOCALAPPDATA")


def cache() -> Path:
    """The directory where downloaded game databases are cached."""
    if _is_unix():
        return (_env_path("XDG_CACHE_HOME") or home() / ".cache") / "aletheia"
    return app_data() / "aletheia" / "cache"


def _windows_steam_dir() -> Path:
    try:
        import winreg
    except ImportError:
        return _DEFAULT_WINDOWS_STEAM

    locations = (
        (winreg.HKEY_LOCAL_MACHINE, r"SOFTWARE\Wow6432Node\Valve\Steam", "InstallPath"),
        (winreg.HKEY_CURRENT_USER, r"Software\Valve\Steam", "SteamPath"),
    )
    for hive, key, value_name in locations:
        try:
            with winreg.OpenKey(hive, key) as handle:
                value, _ = winreg.QueryValueEx(handle, value_name)
        except OSError:
            continue
        candidate = Path(value)
        if candidate.is_dir():
            return candidate
    return _DEFAULT_WINDOWS_STEAM


def _path_contains_subpath(haystack: PurePath, needle: str) -> bool:
    needle_parts = PurePath(needle).parts
    count = len(needle_parts)
    return any(
        ancestor.parts[-count:] == needle_parts
        for ancestor in (haystack, *haystack.parents)
    )


def _prefix_username(prefix: Path) -> str:
    if _path_contains_subpath(prefix, _PROTON_PREFIX_MARKER):
        return "steamuser"
    user = os.environ.get("USER")
    if user is None:
        raise RuntimeError("USER environment variable is not set")
    return user


def _steam_user_data(base: Path, steam_account_id: Optional[str]) -> Path:
    return base / steam_account_id if steam_account_id is not None else base / "[0-9]*"


def _replacements(
    installation_dir: Optional[StrPath],
    prefix: Optional[StrPath],
    steam_account_id: Optional[str],
    windows_local_app_data: Path,
) -> _Replacements:
    replacements: _Replacements = []

    if installation_dir is not None:
        replacements.append(("{GameRoot}", Path(installation_dir)))

    if _is_unix():
        linux_app_data = app_data()

        if prefix is not None:
            wine_prefix = Path(prefix)
            user = wine_prefix / "drive_c" / "users" / _prefix_username(wine_prefix)
            windows_app_data = user / "AppData"
            replacements.extend([
                ("{LocalLow}", windows_app_data / "LocalLow"),
                ("{LocalAppData}", windows_app_data / "Local"),
                ("{AppData}", windows_app_data / "Roaming"),
                ("{Documents}", user / "Documents"),
                ("{Home}", user),
                ("{GOGAppData}", windows_app_data / "Local" / "GOG.com" / "Galaxy" / "Applications"),
                ("{SteamUserData}", _steam_user_data(linux_app_data / "Steam" / "userdata", steam_account_id)),
            ])

        replacements.extend([
            ("{XDGConfig}", config()),
            ("{XDGData}", linux_app_data),
        ])
    else:
        home_dir = home()
        replacements.extend([
            ("{LocalLow}", windows_local_app_data.parent / "LocalLow"),
            ("{LocalAppData}", windows_local_app_data),
            ("{AppData}", config()),
            ("{Documents}", home_dir / "Documents"),
            ("{Home}", home_dir),
            ("{GOGAppData}", windows_local_app_data / "GOG.com" / "Galaxy" / "Applications"),
            ("{SteamUserData}", _steam_user_data(_windows_steam_dir() / "userdata", steam_account_id)),
        ])

    return replacements


def expand_path(
    path: StrPath,
    installation_dir: Optional[StrPath] = None,
    prefix: Optional[StrPath] = None,
    steam_account_id: Optional[str] = None,
) -> Path:
    """Replace placeholder components such as ``{AppData}`` with real directories."""
    local = app_data() if not _is_unix() else Path()
    mapping: dict = {}
    for pattern, replacement in _replacements(installation_dir, prefix, steam_account_id, local):
        mapping.setdefault(pattern, replacement)

    result = Path()
    for part in PurePath(path).parts:
        result = result / mapping.get(part, part)
    return result


def shrink_path(
    path: StrPath,
    installation_dir: Optional[StrPath] = None,
    prefix: Optional[StrPath] = None,
    steam_account_id: Optional[str] = None,
) -> Path:
    """Replace the first known directory that prefixes ``path`` with its placeholder."""
    local = config() if not _is_unix() else Path()
    target = PurePath(path)
    for pattern, replacement in _replacements(installation_dir, prefix, steam_account_id, local):
        try:
            stripped = target.relative_to(replacement)
        except ValueError:
            continue
        return Path(pattern) / stripped
    return Path(target)


def get_size(path: StrPath) -> int:
    """Total size in bytes of every file below ``path``."""
    total = 0
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_file():
                total += entry.stat().st_size
            elif entry.is_dir():
                total += get_size(entry.path)
    return total