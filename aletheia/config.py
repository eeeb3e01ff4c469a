"""Persistent user configuration."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional

from aletheia import dirs

log = logging.getLogger(__name__)

_CONFIG_FILE = "config.json"


def _config_dir() -> Path:
    if dirs._is_unix():
        return dirs.config() / "aletheia"
    return dirs.app_data() / "aletheia"


def _default_save_dir() -> Path:
    if dirs._is_unix():
        return dirs.app_data() / "aletheia"
    return _config_dir() / "saves"


@dataclass
class Config:
    """User settings stored as JSON in the configuration directory."""

    custom_databases: List[str] = field(default_factory=list)
    save_dir: Path = field(default_factory=_default_save_dir)
    steam_account_id: Optional[str] = None
    check_for_updates: bool = True

    def __post_init__(self) -> None:
        self.save_dir = Path(self.save_dir)

    def to_dict(self) -> dict:
        """Return the settings as JSON-compatible data."""
        return {
            "custom_databases": list(self.custom_databases),
            "save_dir": str(self.save_dir),
            "steam_account_id": self.steam_account_id,
            "check_for_updates": self.check_for_updates,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Build a configuration from stored data; missing keys take their defaults."""
        if not isinstance(data, Mapping):
            raise ValueError("configuration must be a JSON object")

        values: dict = {}
        if "custom_databases" in data:
            databases = data["custom_databases"]
            if not isinstance(databases, list) or not all(isinstance(d, str) for d in databases):
                raise ValueError("custom_databases must be a list of strings")
            values["custom_databases"] = list(databases)
        if "save_dir" in data:
            if not isinstance(data["save_dir"], str):
                raise ValueError("save_dir must be a string")
            values["save_dir"] = Path(data["save_dir"])
        if "steam_account_id" in data:
            account = data["steam_account_id"]
            if account is not None and not isinstance(account, str):
                raise ValueError("steam_account_id must be a string or null")
            values["steam_account_id"] = account
        if "check_for_updates" in data:
            if not isinstance(data["check_for_updates"], bool):
                raise ValueError("check_for_updates must be a boolean")
            values["check_for_updates"] = data["check_for_updates"]
        return cls(**values)

    @classmethod
    def load(cls) -> "Config":
        """Read the configuration, writing the defaults if none exists yet."""
        path = _config_dir() / _CONFIG_FILE

        if not path.exists():
            default = cls()
            default.save()
            return default

        with path.open(encoding="utf-8") as handle:
            cfg = cls.from_dict(json.load(handle))

        if not cfg.save_dir.exists():
            log.warning("Save directory does not exist, resetting.")
            cfg.save_dir = _default_save_dir()
            cfg.save()

        return cfg

    def save(self) -> None:
        """Write the configuration to disk."""
        directory = _config_dir()
        directory.mkdir(parents=True, exist_ok=True)
        with (directory / _CONFIG_FILE).open("w", encoding="utf-8") as handle:
            json.dump(self.to_dict(), handle, indent=2)