from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional

import pytest

ROOT = Path(__file__).resolve().parents[3]
for path in (ROOT / "tools" / "release", Path(__file__).resolve().parent):
    if str(path) not in sys.path:
        sys.path.append(str(path))

from runner_fakes import FakeRunner, Response, fake_compile  # noqa: E402

CREDENTIAL_VARS = ("RELKIT_ARTIFACT_USR", "RELKIT_ARTIFACT_PWD", "DOCKER_USR", "DOCKER_PWD")


def tagged_repo_responses(tag: str = "v1.2.0", rev: str = "abc1234") -> Dict[str, Response]:
    return {
        "git rev-parse --short HEAD": f"{rev}\n",
        f"git tag --points-at={rev}": f"{tag}\n" if tag else "",
        "git for-each-ref": f"{tag or 'v1.1.0'}\nv1.1.0\n",
        "git rev-list": f"{rev}\n",
        "go list ./...": "example.com/demo\nexample.com/demo/internal/util\n",
        "go build": fake_compile,
    }


@pytest.fixture(autouse=True)
def _clean_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in CREDENTIAL_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def fake_runner() -> Callable[..., FakeRunner]:
    def factory(
        *,
        tag: str = "v1.2.0",
        rev: str = "abc1234",
        responses: Optional[Mapping[str, Response]] = None,
        extra: Optional[Mapping[str, Response]] = None,
    ) -> FakeRunner:
        merged: Dict[str, Response] = dict(responses if responses is not None else tagged_repo_responses(tag, rev))
        merged.update(extra or {})
        return FakeRunner(merged)

    return factory
