"""Project configuration and environment-derived runtime settings."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from relkit.bundle.matrix import DEFAULT_TARGETS, BuildTarget
from relkit.errors import ConfigurationError

CONFIG_FILENAME = "relkit.toml"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ProjectConfig(BaseModel):
    """Static description of the project being released."""

    project_name: str = Field(..., min_length=1, description="Binary and archive base name.")
    package_name: str = Field(default="", description="Module path; defaults to the project name.")
    workdir: Path = Field(default_factory=Path.cwd, description="Project root directory.")
    build_dir: str = Field(default="build", description="Output directory, relative to workdir.")
    ld_flags: str = Field(default="", description="Link flags; $VERSION, $PACKAGE and $BUILD_DATE are expanded.")
    test_flags: str = Field(default="", description="Value of GOFLAGS while running tests.")
    build_tags: str = Field(default="", description="Build tags passed to the test run.")
    docker_registry: str = Field(default="", description="Container registry host.")
    docker_image: str = Field(default="", description="Container image name.")
    docker_user: str = Field(default="", description="Container registry user; DOCKER_USR overrides it.")
    docker_app_path: str = Field(default="/app", description="Project path inside the build container.")
    artifact_url: str = Field(default="", description="Artifact registry base URL.")
    artifact_user: str = Field(default="", description="Artifact registry user; RELKIT_ARTIFACT_USR overrides it.")
    git_url: str = Field(default="", description="Web URL of the repository, used for commit links.")
    changelog_path: str = Field(default="ChangeLog.md", description="Changelog output, relative to workdir.")
    aux_files: List[str] = Field(default_factory=lambda: ["README.md"], description="Files bundled next to each binary.")
    targets: List[str] = Field(
        default_factory=lambda: [f"{target.os}/{target.arch}" for target in DEFAULT_TARGETS],
        description="Cross-compilation matrix as <os>/<arch> entries.",
    )
    dev_tools: List[str] = Field(
        default_factory=lambda: ["golang.org/x/lint/golint@latest", "golang.org/x/tools/cmd/goimports@latest"],
        description="Tools installed before validation.",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("targets")
    @classmethod
    def _check_targets(cls, values: List[str]) -> List[str]:
        for value in values:
            BuildTarget.parse(value)
        return values

    def model_post_init(self, __context: object) -> None:
        if not self.package_name:
            self.package_name = self.project_name

    @property
    def build_path(self) -> Path:
        return self.workdir / self.build_dir

    @property
    def build_targets(self) -> List[BuildTarget]:
        return [BuildTarget.parse(value) for value in self.targets]


def load_project_config(path: Path, *, workdir: Optional[Path] = None) -> ProjectConfig:
    """Load ``relkit.toml`` or the ``[tool.relkit]`` table of ``pyproject.toml``."""

    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid TOML in {path}: {exc}") from exc

    if path.name == "pyproject.toml":
        data = data.get("tool", {}).get("relkit", {})
    payload = dict(data)
    root = workdir or path.resolve().parent
    raw_workdir = payload.get("workdir")
    payload["workdir"] = (root / raw_workdir).resolve() if raw_workdir else root

    try:
        return ProjectConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration in {path}: {exc}") from exc


def _to_bool(value: Optional[str]) -> bool:
    return bool(value) and value.strip().lower() in _TRUE_VALUES


@dataclass(frozen=True, slots=True)
class RuntimeSettings:
    """Toggles read once from the environment and handed to the pipeline."""

    verbose: bool = False
    debug: bool = False
    go_cmd: str = "go"
    git_cmd: str = "git"
    docker_cmd: str = "docker"
    keep_merges: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RuntimeSettings":
        env = os.environ if environ is None else environ
        return cls(
            verbose=_to_bool(env.get("RELKIT_VERBOSE")),
            debug=_to_bool(env.get("RELKIT_DEBUG")),
            go_cmd=env.get("RELKIT_GOCMD") or "go",
            git_cmd=env.get("RELKIT_GITCMD") or "git",
            docker_cmd=env.get("RELKIT_DOCKERCMD") or "docker",
            keep_merges=_to_bool(env.get("RELKIT_KEEP_MERGES")),
        )
