"""Checking for a newer release of the application."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Optional

import requests
import semver

CURRENT_VERSION = "0.1.0"
RELEASES_URL = os.environ.get(
    "ALETHEIA_RELEASES_URL", "https://releases.example.com/aletheia/releases"
)
USER_AGENT = f"aletheia/{CURRENT_VERSION}"


class UpdateError(Exception):
    """The release list could not be fetched or read."""


@dataclass(frozen=True)
class Release:
    """A published release."""

    body: str
    tag_name: str
    url: str

    @classmethod
    def from_dict(cls, data: Any) -> "Release":
        if not isinstance(data, dict):
            raise UpdateError("Network error: release entry is not an object")
        try:
            return cls(body=str(data["body"]), tag_name=str(data["tag_name"]),
                       url=str(data["html_url"]))
        except KeyError as exc:
            raise UpdateError(f"Network error: release is missing {exc}") from exc


def check() -> Optional[Release]:
    """Return the latest release if it is newer than this version, else None."""
    try:
        response = requests.get(RELEASES_URL, headers={"User-Agent": USER_AGENT}, timeout=30)
        response.raise_for_status()
        releases = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise UpdateError(f"Network error: {exc}") from exc

    if not isinstance(releases, list):
        raise UpdateError("Network error: expected a list of releases")
    if not releases:
        return None

    latest = Release.from_dict(releases[0])
    if semver.Version.parse(CURRENT_VERSION) < semver.Version.parse(latest.tag_name):
        return latest
    return None