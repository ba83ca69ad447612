from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

import pytest

ROOT = Path(__file__).resolve().parents[3]
for tool_dir in (
    ROOT / "tools" / "release",
    ROOT / "tools" / "release-pipeline",
    ROOT / "tools" / "release" / "tests",
):
    if str(tool_dir) not in sys.path:
        sys.path.append(str(tool_dir))

from runner_fakes import FakeRunner, Response, fake_compile  # noqa: E402

ENV_VARS = (
    "RELKIT_ARTIFACT_USR",
    "RELKIT_ARTIFACT_PWD",
    "DOCKER_USR",
    "DOCKER_PWD",
    "RELKIT_VERBOSE",
    "RELKIT_DEBUG",
    "RELKIT_GOCMD",
    "RELKIT_GITCMD",
    "RELKIT_DOCKERCMD",
    "RELKIT_KEEP_MERGES",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch):
    import relkit.secrets as secrets

    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(secrets, "_resolvers", list(secrets._resolvers))
    yield
    for name in ("relkit", "relkit_pipeline"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True


@pytest.fixture()
def fake_runner() -> Callable[..., FakeRunner]:
    def factory(
        *,
        tag: str = "v1.2.0",
        rev: str = "abc1234",
        extra: Optional[Mapping[str, Response]] = None,
    ) -> FakeRunner:
        responses: Dict[str, Response] = {
            "git rev-parse --short HEAD": f"{rev}\n",
            f"git tag --points-at={rev}": f"{tag}\n" if tag else "",
            "git for-each-ref": "v1.2.0\nv1.1.0\n",
            "git rev-list": f"{rev}\n",
            "go list ./...": "example.com/demo\n",
            "go build": fake_compile,
        }
        responses.update(extra or {})
        return FakeRunner(responses)

    return factory
