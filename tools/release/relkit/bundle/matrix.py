"""Cross-compilation build matrix and per-target packaging."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from string import Template
from typing import Callable, Dict, List, Optional, Sequence

from ..errors import ConfigurationError
from ..metadata.cache import MetadataCache
from ..tools import GoToolchain
from .archives import tar_files, zip_files

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildTarget:
    """One (OS, architecture) pair; empty strings mean the host platform."""

    os: str = ""
    arch: str = ""

    @property
    def is_host(self) -> bool:
        return not (self.os and self.arch)

    @property
    def label(self) -> str:
        return f"{self.os}-{self.arch}"

    @property
    def archive_extension(self) -> str:
        return "zip" if self.os == "windows" else "tar.gz"

    @classmethod
    def parse(cls, value: str) -> "BuildTarget":
        os_name, sep, arch = value.partition("/")
        if not sep or not os_name or not arch:
            raise ValueError(f"Build target must be <os>/<arch> (got '{value}')")
        return cls(os=os_name, arch=arch)


DEFAULT_TARGETS = (
    BuildTarget("windows", "amd64"),
    BuildTarget("darwin", "amd64"),
    BuildTarget("linux", "amd64"),
)


@dataclass(slots=True)
class CompileSettings:
    """Inputs shared by every compiler invocation of one run."""

    project_name: str
    package_name: str
    workdir: Path
    build_dir: Path
    ld_flags: str = ""


class CrossCompiler:
    """Builds one binary per target through the external toolchain."""

    def __init__(
        self,
        settings: CompileSettings,
        *,
        toolchain: GoToolchain,
        cache: MetadataCache,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings
        self.toolchain = toolchain
        self.cache = cache
        self.clock = clock or (lambda: datetime.now().astimezone())

    def env_flags(self) -> Dict[str, str]:
        return {
            "PACKAGE": self.settings.package_name,
            "VERSION": self.cache.version(),
            "BUILD_DATE": self.clock().strftime("%Y-%m-%dT%H:%M:%S%z"),
        }

    def output_path(self, target: BuildTarget) -> Path:
        name = self.settings.project_name
        if target.os == "windows":
            name += ".exe"
        return self.settings.build_dir / name

    def build_specific(self, target: BuildTarget = BuildTarget()) -> Path:
        env = self.env_flags()
        if not target.is_host:
            env["GOOS"] = target.os
            env["GOARCH"] = target.arch

        exe = self.output_path(target)
        exe.parent.mkdir(parents=True, exist_ok=True)
        link_flags = Template(self.settings.ld_flags).safe_substitute(env) if self.settings.ld_flags else ""

        logger.debug("compiling %s (env=%s)", exe, env)
        return self.toolchain.compile(exe, env, link_flags)


class Packager:
    """Builds every matrix target and archives each binary with auxiliary files."""

    def __init__(
        self,
        compiler: CrossCompiler,
        *,
        aux_files: Sequence[str] = ("README.md",),
        targets: Sequence[BuildTarget] = DEFAULT_TARGETS,
    ) -> None:
        self.compiler = compiler
        self.aux_files = list(aux_files)
        self.targets = list(targets)

    def archive_name(self, target: BuildTarget, version: str) -> str:
        project = self.compiler.settings.project_name
        return f"{project}_{version}_{target.label}.{target.archive_extension}"

    def package(self) -> List[Path]:
        settings = self.compiler.settings
        version = self.compiler.cache.version()
        archives: List[Path] = []

        for target in self.targets:
            logger.info("Building for OS %s and architecture %s", target.os, target.arch)
            exe = self.compiler.build_specific(target)
            try:
                files = [exe, *(settings.workdir / name for name in self.aux_files)]
                archive_path = settings.build_dir / self.archive_name(target, version)
                writer = zip_files if target.archive_extension == "zip" else tar_files
                try:
                    writer(archive_path, files)
                except FileNotFoundError as exc:
                    raise ConfigurationError(f"cannot package {target.label}: {exc}") from exc
            finally:
                exe.unlink(missing_ok=True)
            archives.append(archive_path)

        return archives
