"""File hashing."""

from __future__ import annotations

import hashlib
import os
from typing import Union

_CHUNK_SIZE = 64 * 1024


def hash_file(file_path: Union[str, "os.PathLike[str]"]) -> str:
    """Return the lowercase hexadecimal SHA-512 digest of a file's contents."""
    digest = hashlib.sha512()
    with open(file_path, "rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()