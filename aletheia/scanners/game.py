"""The installed game record shared by all launcher scanners."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass
class Game:
    """A game found in a launcher's library."""

    name: str
    installation_dir: Optional[Path] = None
    prefix: Optional[Path] = None
    source: str = ""

    def __post_init__(self) -> None:
        if self.installation_dir is not None:
            self.installation_dir = Path(self.installation_dir)
        if self.prefix is not None:
            self.prefix = Path(self.prefix)