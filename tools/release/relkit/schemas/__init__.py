"""Schema definitions for release metadata."""

from .artifact import Checksums, FileDetails
from .metadata import (
    ArtifactRegistryInfo,
    ArtifactSnapshot,
    BuildInfo,
    DockerInfo,
    DockerSnapshot,
    GitInfo,
    PackageInfo,
)

__all__ = [
    "ArtifactRegistryInfo",
    "ArtifactSnapshot",
    "BuildInfo",
    "Checksums",
    "DockerInfo",
    "DockerSnapshot",
    "FileDetails",
    "GitInfo",
    "PackageInfo",
]
