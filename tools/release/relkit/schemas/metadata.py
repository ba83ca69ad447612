"""Pydantic models describing the project metadata cached for one run."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GitInfo(BaseModel):
    rev: str = ""
    tag_at_rev: str = Field(default="", alias="tagAtRev", description="Tag pointing exactly at rev.")
    latest_tag: str = Field(default="", alias="latestTag")
    rev_at_latest_tag: str = Field(default="", alias="revAtLatestTag")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PackageInfo(BaseModel):
    names: List[str] = Field(default_factory=list, description="Packages relative to the project root.")

    model_config = ConfigDict(frozen=True)

    @field_validator("names")
    @classmethod
    def _check_relative(cls, names: List[str]) -> List[str]:
        for name in names:
            if not name.startswith("."):
                raise ValueError(f"Package name must be root-relative: {name!r}")
        return names


class ArtifactRegistryInfo(BaseModel):
    url: str = ""
    user: str = ""
    password: str = Field(default="", repr=False)

    model_config = ConfigDict(frozen=True)


class DockerInfo(BaseModel):
    registry: str = ""
    image: str = ""
    user: str = ""
    password: str = Field(default="", repr=False)

    model_config = ConfigDict(frozen=True)


class ArtifactSnapshot(BaseModel):
    url: str = ""


class DockerSnapshot(BaseModel):
    registry: str = ""
    image: str = ""


class BuildInfo(BaseModel):
    """Snapshot written to ``build-info.json``; credentials are never included."""

    workdir: str
    git: GitInfo
    artifact: ArtifactSnapshot
    docker: DockerSnapshot

    model_config = ConfigDict(extra="forbid")

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True)
