"""Process-wide, compute-once project metadata."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable, Generic, List, Optional, TypeVar

from ..errors import ExternalToolError
from ..schemas.metadata import (
    ArtifactRegistryInfo,
    ArtifactSnapshot,
    BuildInfo,
    DockerInfo,
    DockerSnapshot,
    GitInfo,
    PackageInfo,
)
from ..secrets import (
    ARTIFACT_PASSWORD_ENV,
    ARTIFACT_USER_ENV,
    DOCKER_PASSWORD_ENV,
    DOCKER_USER_ENV,
    UNSET_PASSWORD,
    resolve_secret,
)
from ..tools import GitClient, GoToolchain, trim_output

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OnceCell(Generic[T]):
    """Holds a value computed by the first caller; later callers get the same value."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Optional[T] = None
        self._filled = False

    @property
    def filled(self) -> bool:
        return self._filled

    def get_or_init(self, factory: Callable[[], T]) -> T:
        if self._filled:
            return self._value  # type: ignore[return-value]
        with self._lock:
            if not self._filled:
                self._value = factory()
                self._filled = True
        return self._value  # type: ignore[return-value]


class MetadataCache:
    """Memoized accessors for git state, package inventory and registry settings.

    Git and package facts are queried once per process; arguments passed after the
    first call are ignored. Registry URLs and image names are fixed by the first
    call too, but user names and passwords are re-resolved from the environment on
    every call so credentials can rotate during a run.
    """

    def __init__(
        self,
        workdir: Path,
        *,
        git: GitClient,
        toolchain: Optional[GoToolchain] = None,
        package_name: str = "",
    ) -> None:
        self.workdir = Path(workdir)
        self.git = git
        self.toolchain = toolchain
        self.package_name = package_name
        self._git = OnceCell[GitInfo]()
        self._packages = OnceCell[PackageInfo]()
        self._artifact = OnceCell[ArtifactRegistryInfo]()
        self._docker = OnceCell[DockerInfo]()
        self._dev_stamp = OnceCell[str]()

    def git_info(self) -> GitInfo:
        return self._git.get_or_init(self._load_git_info)

    def package_info(self) -> PackageInfo:
        return self._packages.get_or_init(self._load_package_info)

    def artifact_info(self, url: str = "", user: str = "") -> ArtifactRegistryInfo:
        base = self._artifact.get_or_init(lambda: ArtifactRegistryInfo(url=url, user=user))
        return base.model_copy(
            update={
                "user": resolve_secret(ARTIFACT_USER_ENV, base.user) or "",
                "password": resolve_secret(ARTIFACT_PASSWORD_ENV, UNSET_PASSWORD) or "",
            }
        )

    def docker_info(self, registry: str = "", image: str = "", user: str = "") -> DockerInfo:
        base = self._docker.get_or_init(lambda: DockerInfo(registry=registry, image=image, user=user))
        return base.model_copy(
            update={
                "user": resolve_secret(DOCKER_USER_ENV, base.user) or "",
                "password": resolve_secret(DOCKER_PASSWORD_ENV, UNSET_PASSWORD) or "",
            }
        )

    def version(self) -> str:
        """Return the tag at HEAD, ``dev@<rev>`` or ``dev@<epoch millis>``."""

        git = self.git_info()
        if git.tag_at_rev:
            return git.tag_at_rev
        if git.rev:
            return f"dev@{git.rev}"
        return self._dev_stamp.get_or_init(lambda: f"dev@{int(time.time() * 1000)}")

    def build_info(self, *, artifact_url: str = "", docker_registry: str = "", docker_image: str = "") -> BuildInfo:
        artifact = self.artifact_info(artifact_url)
        docker = self.docker_info(docker_registry, docker_image)
        return BuildInfo(
            workdir=str(self.workdir),
            git=self.git_info(),
            artifact=ArtifactSnapshot(url=artifact.url),
            docker=DockerSnapshot(registry=docker.registry, image=docker.image),
        )

    def _query(self, func: Callable[..., str], *args: str) -> str:
        try:
            return func(*args)
        except ExternalToolError as exc:
            logger.debug("git query failed: %s", exc)
            return ""

    def _load_git_info(self) -> GitInfo:
        rev = trim_output(self._query(self.git.short_rev))

        tag_at_rev = ""
        if rev:
            tags = trim_output(self._query(self.git.tags_at, rev)).splitlines()
            tag_at_rev = trim_output(tags[0]) if tags else ""

        latest_tag = ""
        all_tags = [line for line in self._query(self.git.tags_by_date).splitlines() if trim_output(line)]
        if all_tags:
            latest_tag = trim_output(all_tags[0])

        rev_at_latest_tag = ""
        if latest_tag:
            rev_at_latest_tag = trim_output(self._query(self.git.rev_at, latest_tag))

        info = GitInfo(
            rev=rev,
            tag_at_rev=tag_at_rev,
            latest_tag=latest_tag,
            rev_at_latest_tag=rev_at_latest_tag,
        )
        logger.debug("git info: %s", info)
        return info

    def _load_package_info(self) -> PackageInfo:
        if self.toolchain is None:
            return PackageInfo(names=[])
        output = self.toolchain.list_packages()
        names: List[str] = []
        for line in output.splitlines():
            name = line.strip()
            if name:
                names.append(self._relative_package(name))
        return PackageInfo(names=names)

    def _relative_package(self, name: str) -> str:
        prefix = self.package_name.rstrip("/")
        if prefix and name.startswith(prefix):
            return "." + name[len(prefix):]
        return "./" + name.lstrip("./")
