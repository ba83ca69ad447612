"""Shared helpers used by bundle and publish tooling."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Optional

from ..schemas.artifact import Checksums, FileDetails

CHUNK_SIZE = 1024 * 1024


def compute_file_details(path: Path) -> FileDetails:
    """Return MD5, SHA-1 and SHA-256 digests and the size of ``path``.

    The file is streamed once in fixed-size chunks and fed to all three digests.
    """

    md5 = hashlib.md5()
    sha1 = hashlib.sha1()
    sha256 = hashlib.sha256()
    size = 0
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
            md5.update(chunk)
            sha1.update(chunk)
            sha256.update(chunk)
            size += len(chunk)
    return FileDetails(
        checksums=Checksums(md5=md5.hexdigest(), sha1=sha1.hexdigest(), sha256=sha256.hexdigest()),
        size=size,
    )


def write_text(path: Path, content: str, *, newline: Optional[str] = None) -> None:
    """Write text to file ensuring parent directories exist."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8", newline=newline)
