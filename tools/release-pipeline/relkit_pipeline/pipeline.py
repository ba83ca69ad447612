"""Stage orchestration: dependency resolution with at-most-once execution."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional

import requests
from requests import Session

from relkit.bundle.matrix import CompileSettings, CrossCompiler, Packager
from relkit.bundle.utils import write_text
from relkit.changelog import ChangeLogGenerator
from relkit.container import ContainerImages
from relkit.metadata import MetadataCache
from relkit.publish import ChecksumArtifactPublisher
from relkit.schemas import BuildInfo
from relkit.tools import CommandRunner, ContainerTool, GitClient, GoToolchain

from .config import ProjectConfig, RuntimeSettings
from .stages import StageResult, get_stage

logger = logging.getLogger(__name__)

BUILD_INFO_FILENAME = "build-info.json"


class Pipeline:
    """Runs named stages for one project, each at most once per instance.

    Requirements are resolved depth-first in declaration order before a stage
    runs. The first failing stage aborts the run; its exception propagates and
    no later stage is started.
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: Optional[RuntimeSettings] = None,
        *,
        runner: Optional[CommandRunner] = None,
        session_factory: Callable[[], Session] = requests.Session,
        clock: Optional[Callable[[], datetime]] = None,
        inputs: Optional[Mapping[str, object]] = None,
    ) -> None:
        self.config = config
        self.settings = settings or RuntimeSettings()
        self.inputs: Dict[str, object] = dict(inputs or {})
        self.clock = clock or (lambda: datetime.now().astimezone())

        runner = runner or CommandRunner(cwd=config.workdir)
        self.git = GitClient(runner, self.settings.git_cmd)
        self.toolchain = GoToolchain(runner, self.settings.go_cmd)
        self.docker = ContainerTool(runner, self.settings.docker_cmd)

        self.cache = MetadataCache(
            config.workdir,
            git=self.git,
            toolchain=self.toolchain,
            package_name=config.package_name,
        )
        self.compiler = CrossCompiler(
            CompileSettings(
                project_name=config.project_name,
                package_name=config.package_name,
                workdir=config.workdir,
                build_dir=config.build_path,
                ld_flags=config.ld_flags,
            ),
            toolchain=self.toolchain,
            cache=self.cache,
            clock=self.clock,
        )
        self.packager = Packager(self.compiler, aux_files=config.aux_files, targets=config.build_targets)
        self.publisher = ChecksumArtifactPublisher(
            self.cache,
            config.build_path,
            artifact_url=config.artifact_url,
            artifact_user=config.artifact_user,
            session_factory=session_factory,
            debug=self.settings.debug,
        )
        self.containers = ContainerImages(
            self.docker,
            self.cache,
            project_name=config.project_name,
            workdir=config.workdir,
            build_dir=config.build_dir,
            registry=config.docker_registry,
            image=config.docker_image,
            user=config.docker_user,
            app_path=config.docker_app_path,
        )
        self.changelog = ChangeLogGenerator(
            artifact_url=config.artifact_url,
            git_url=config.git_url,
            keep_merges=self.settings.keep_merges,
        )

        self._results: Dict[str, StageResult] = {}

    @property
    def executed(self) -> List[str]:
        """Slugs of completed stages, in completion order."""

        return list(self._results)

    def now(self) -> datetime:
        return self.clock()

    def run(self, *slugs: str) -> Dict[str, StageResult]:
        for slug in slugs:
            get_stage(slug)
        for slug in slugs:
            self.require(slug)
        return dict(self._results)

    def require(self, slug: str) -> StageResult:
        if slug in self._results:
            return self._results[slug]

        spec = get_stage(slug)
        for dependency in spec.requires:
            self.require(dependency)

        logger.info("===== %s", slug)
        result = spec.runner(self)
        self._results[slug] = result
        return result

    def build_info(self) -> BuildInfo:
        return self.cache.build_info(
            artifact_url=self.config.artifact_url,
            docker_registry=self.config.docker_registry,
            docker_image=self.config.docker_image,
        )

    def dump_info_to_disk(self) -> Path:
        """Write the build-info snapshot as JSON into the build directory."""

        path = self.config.build_path / BUILD_INFO_FILENAME
        path.parent.mkdir(parents=True, exist_ok=True)
        write_text(path, self.build_info().to_json() + "\n")
        logger.debug("build info written to %s", path)
        return path


__all__ = ["BUILD_INFO_FILENAME", "Pipeline"]
