from __future__ import annotations

from pathlib import Path

import pytest

import relkit.secrets as secrets


@pytest.fixture()
def isolated_secrets(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(secrets, "_secret_specs", {})
    monkeypatch.setattr(secrets, "_resolvers", [])
    secrets.register_resolver(secrets.EnvResolver(), priority=0, name="env", source="env")
    return secrets


def test_env_takes_priority_over_dotenv(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, isolated_secrets
) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("DOCKER_PWD=from-file\n", encoding="utf-8")
    isolated_secrets.use_dotenv(env_file)

    assert isolated_secrets.resolve_secret("DOCKER_PWD") == "from-file"
    info = isolated_secrets.resolve_secret_info("DOCKER_PWD")
    assert info.source == "dotenv"
    assert [attempt.success for attempt in info.attempts] == [False, True]

    monkeypatch.setenv("DOCKER_PWD", "from-env")
    info = isolated_secrets.resolve_secret_info("DOCKER_PWD")
    assert info.value == "from-env"
    assert info.source == "env"


def test_resolve_secret_default(isolated_secrets) -> None:
    assert isolated_secrets.resolve_secret("RELKIT_ARTIFACT_PWD") is None
    assert isolated_secrets.resolve_secret("RELKIT_ARTIFACT_PWD", secrets.UNSET_PASSWORD) == "to.be.set"


def test_is_configured_rejects_sentinel() -> None:
    assert not secrets.is_configured(None)
    assert not secrets.is_configured("")
    assert not secrets.is_configured(secrets.UNSET_PASSWORD)
    assert secrets.is_configured("s3cret")


def test_missing_secret_message_names_checked_resolvers(tmp_path: Path, isolated_secrets) -> None:
    env_file = tmp_path / "missing.env"
    isolated_secrets.use_dotenv(env_file)

    message = isolated_secrets.missing_secret_message("DOCKER_PWD", "docker registry")

    assert message.startswith("missing password for the docker registry (set variable DOCKER_PWD)")
    assert f"Checked resolvers: env (missing), dotenv@{env_file} (missing)." in message


def test_missing_secret_message_reports_sentinel_source(
    monkeypatch: pytest.MonkeyPatch, isolated_secrets
) -> None:
    monkeypatch.setenv("RELKIT_ARTIFACT_PWD", secrets.UNSET_PASSWORD)

    message = isolated_secrets.missing_secret_message("RELKIT_ARTIFACT_PWD", "artifact registry")

    assert "env (resolved)" in message
