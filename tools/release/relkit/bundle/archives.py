"""Zip and gzip-tar writers for per-target release archives."""

from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path
from typing import List, Optional, Sequence, Tuple


def zip_files(
    archive_path: Path,
    files: Sequence[Path],
    *,
    preserve_dir: bool = False,
    root: Optional[Path] = None,
) -> Path:
    """Write ``files`` into a deflated zip archive at ``archive_path``."""

    entries = _archive_entries(files, preserve_dir=preserve_dir, root=root)
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for source, arcname in entries:
            archive.write(source, arcname=arcname)
    return archive_path


def tar_files(
    archive_path: Path,
    files: Sequence[Path],
    *,
    preserve_dir: bool = False,
    root: Optional[Path] = None,
) -> Path:
    """Write ``files`` into a gzip-compressed tar archive at ``archive_path``."""

    entries = _archive_entries(files, preserve_dir=preserve_dir, root=root)
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive_path, "w:gz") as bundle:
        for source, arcname in entries:
            bundle.add(source, arcname=arcname, recursive=False)
    return archive_path


def _archive_entries(
    files: Sequence[Path],
    *,
    preserve_dir: bool,
    root: Optional[Path],
) -> List[Tuple[Path, str]]:
    entries: List[Tuple[Path, str]] = []
    seen: set[str] = set()
    for file in files:
        source = Path(file)
        if not source.is_file():
            raise FileNotFoundError(f"Archive input not found: {source}")
        arcname = _arcname(source, preserve_dir=preserve_dir, root=root)
        if arcname in seen:
            raise ValueError(f"Duplicate archive entry '{arcname}'")
        seen.add(arcname)
        entries.append((source, arcname))
    return entries


def _arcname(source: Path, *, preserve_dir: bool, root: Optional[Path]) -> str:
    if not preserve_dir:
        return source.name
    if root is not None and source.is_absolute():
        try:
            return source.relative_to(root).as_posix()
        except ValueError:
            pass
    return source.as_posix().lstrip("/")
