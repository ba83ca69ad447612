"""Container image build, push and cleanup helpers."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import List

from .errors import ConfigurationError, ReleaseError
from .metadata.cache import MetadataCache
from .secrets import DOCKER_PASSWORD_ENV, is_configured, missing_secret_message
from .tools import ContainerTool

logger = logging.getLogger(__name__)


class ContainerImages:
    def __init__(
        self,
        tool: ContainerTool,
        cache: MetadataCache,
        *,
        project_name: str,
        workdir: Path,
        build_dir: str = "build",
        registry: str = "",
        image: str = "",
        user: str = "",
        app_path: str = "/app",
    ) -> None:
        self.tool = tool
        self.cache = cache
        self.project_name = project_name
        self.workdir = Path(workdir)
        self.build_dir = build_dir
        self.registry = registry
        self.image = image
        self.user = user
        self.app_path = app_path

    @property
    def build_image_name(self) -> str:
        return f"tmp/{self.project_name}.build"

    def build_image(self) -> str:
        docker = self.cache.docker_info(self.registry, self.image, self.user)
        if not docker.image:
            raise ConfigurationError("docker image name is not configured")
        self.tool.run("build", "-t", docker.image, ".")
        return docker.image

    def push_image(self) -> List[str]:
        git = self.cache.git_info()
        if not git.tag_at_rev:
            raise ConfigurationError("a git tag is needed to push Docker image")

        docker = self.cache.docker_info(self.registry, self.image, self.user)
        if not docker.image:
            raise ConfigurationError("docker image name is not configured")
        if not is_configured(docker.password):
            raise ConfigurationError(missing_secret_message(DOCKER_PASSWORD_ENV, "docker registry"))

        self.tool.run("login", docker.registry, "-u", docker.user, "--password-stdin", input=docker.password)

        tagged = f"{docker.image}:{git.tag_at_rev}"
        self.tool.run("tag", f"{docker.image}:latest", tagged)
        self.tool.run("push", tagged)
        pushed = [tagged]

        if git.rev == git.rev_at_latest_tag:
            self.tool.run("push", f"{docker.image}:latest")
            pushed.append(f"{docker.image}:latest")
        return pushed

    def build_in_container(self) -> Path:
        """Build with ``Dockerfile.build`` and mount the build directory into the container."""

        output = self.workdir / self.build_dir
        output.mkdir(parents=True, exist_ok=True)

        self.tool.run("build", "-t", self.build_image_name, "-f", "Dockerfile.build", ".")
        volume = f"{output}:{PurePosixPath(self.app_path) / self.build_dir}"
        self.tool.run("run", "-v", volume, self.build_image_name)
        return output

    def remove_build_image(self) -> bool:
        """Best-effort removal of the build image; failures are logged."""

        try:
            images = self.tool.images(self.build_image_name)
            if not images:
                return False
            self.tool.run("rmi", "--force", *images)
        except ReleaseError as exc:
            logger.warning("Unable to remove image %s: %s", self.build_image_name, exc)
            return False
        return True
