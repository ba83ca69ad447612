"""Checksummed uploads of release archives to an artifact registry."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List, Optional

import requests
from requests import Session
from requests.exceptions import RequestException

from ..bundle.utils import compute_file_details
from ..errors import ConfigurationError, ExternalToolError
from ..metadata.cache import MetadataCache
from ..schemas.metadata import ArtifactRegistryInfo
from ..secrets import ARTIFACT_PASSWORD_ENV, is_configured, missing_secret_message
from .models import PublishResult, UploadResult

logger = logging.getLogger(__name__)

ARCHIVE_SUFFIXES = (".zip", ".tar.gz")


def discover_archives(build_dir: Path) -> List[Path]:
    """Return every ``.zip`` and ``.tar.gz`` file under ``build_dir``, sorted."""

    if not build_dir.is_dir():
        return []
    return sorted(
        path
        for path in build_dir.rglob("*")
        if path.is_file() and path.name.endswith(ARCHIVE_SUFFIXES)
    )


class ChecksumArtifactPublisher:
    """PUTs each archive to ``<registry>/<tag>/<file>`` with checksum headers.

    Uploads run one after another and stop at the first failure. Every request
    uses a fresh session that is closed once the response has been read.
    """

    def __init__(
        self,
        cache: MetadataCache,
        build_dir: Path,
        *,
        artifact_url: str = "",
        artifact_user: str = "",
        session_factory: Callable[[], Session] = requests.Session,
        debug: bool = False,
        timeout: Optional[float] = None,
    ) -> None:
        self.cache = cache
        self.build_dir = Path(build_dir)
        self.artifact_url = artifact_url
        self.artifact_user = artifact_user
        self.session_factory = session_factory
        self.debug = debug
        self.timeout = timeout

    def deploy(self) -> PublishResult:
        git = self.cache.git_info()
        if not git.tag_at_rev:
            raise ConfigurationError("a git tag is needed to deploy the binaries to a registry")

        registry = self.cache.artifact_info(self.artifact_url, self.artifact_user)
        if not registry.url:
            raise ConfigurationError("artifact registry URL is not configured")
        if not is_configured(registry.password):
            raise ConfigurationError(missing_secret_message(ARTIFACT_PASSWORD_ENV, "artifact registry"))

        result = PublishResult(tag=git.tag_at_rev)
        archives = discover_archives(self.build_dir)
        if not archives:
            logger.warning("No archives found under %s", self.build_dir)
        for path in archives:
            result.uploads.append(self.upload(path, registry, git.tag_at_rev))
        return result

    @staticmethod
    def destination_url(registry_url: str, tag: str, path: Path) -> str:
        return f"{registry_url.rstrip('/')}/{tag}/{path.name}"

    def upload(self, path: Path, registry: ArtifactRegistryInfo, tag: str) -> UploadResult:
        url = self.destination_url(registry.url, tag, path)
        details = compute_file_details(path)
        logger.debug("Artifact url: %s", url)
        logger.debug("Sum SHA256: %s", details.checksums.sha256)
        logger.debug("Sum SHA1: %s", details.checksums.sha1)
        logger.debug("Sum MD5: %s", details.checksums.md5)

        headers = {
            "X-Checksum-SHA256": details.checksums.sha256,
            "X-Checksum-SHA1": details.checksums.sha1,
            "X-Checksum-MD5": details.checksums.md5,
            "Content-Length": str(details.size),
            "Connection": "close",
        }

        logger.info("Uploading file: %s", path)
        with self.session_factory() as session, path.open("rb") as handle:
            try:
                response = session.put(
                    url,
                    data=handle,
                    headers=headers,
                    auth=(registry.user, registry.password),
                    timeout=self.timeout,
                )
            except RequestException as exc:
                raise ExternalToolError(f"upload of {path.name} to {url} failed: {exc}") from exc
            try:
                status = response.status_code
                logger.debug("Received HTTP status code: %s", status)
                if self.debug:
                    logger.debug("Received HTTP body: %s", response.text)
            finally:
                response.close()

        if not 200 <= status <= 299:
            raise ExternalToolError(f"unsuccessful request code {status}")
        return UploadResult(path=path, url=url, status_code=status, details=details)
