"""Artifact registry publishing."""

from .models import PublishResult, UploadResult
from .registry import ChecksumArtifactPublisher, discover_archives

__all__ = [
    "ChecksumArtifactPublisher",
    "PublishResult",
    "UploadResult",
    "discover_archives",
]
