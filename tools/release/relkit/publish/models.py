"""Data models used during artifact publishing."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

from ..schemas.artifact import FileDetails


@dataclass(slots=True)
class UploadResult:
    path: Path
    url: str
    status_code: int
    details: FileDetails

    def to_dict(self) -> Dict[str, object]:
        return {
            "path": str(self.path),
            "url": self.url,
            "status_code": self.status_code,
            "size": self.details.size,
            "checksums": self.details.checksums.model_dump(),
        }


@dataclass(slots=True)
class PublishResult:
    tag: str
    uploads: List[UploadResult] = field(default_factory=list)
    published_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, object]:
        return {
            "tag": self.tag,
            "uploads": [upload.to_dict() for upload in self.uploads],
            "published_at": self.published_at.isoformat(),
        }
