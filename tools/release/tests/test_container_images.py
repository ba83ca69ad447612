from __future__ import annotations

from pathlib import Path

import pytest

from relkit.container import ContainerImages
from relkit.errors import ConfigurationError, ExternalToolError
from relkit.metadata import MetadataCache
from relkit.tools import ContainerTool, GitClient


def _images(runner, tmp_path: Path, image: str = "team/demo") -> ContainerImages:
    cache = MetadataCache(tmp_path, git=GitClient(runner))
    return ContainerImages(
        ContainerTool(runner),
        cache,
        project_name="demo",
        workdir=tmp_path,
        registry="registry.example",
        image=image,
        user="builder",
    )


def test_build_image_uses_configured_name(fake_runner, tmp_path: Path) -> None:
    runner = fake_runner()

    assert _images(runner, tmp_path).build_image() == "team/demo"
    assert runner.commands()[-1] == "docker build -t team/demo ."


def test_build_image_requires_name(fake_runner, tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        _images(fake_runner(), tmp_path, image="").build_image()


def test_push_tags_release_and_latest(fake_runner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCKER_PWD", "hunter2")
    runner = fake_runner()

    pushed = _images(runner, tmp_path).push_image()

    assert pushed == ["team/demo:v1.2.0", "team/demo:latest"]
    docker_calls = [call for call in runner.calls if call["args"][0] == "docker"]
    assert docker_calls[0]["args"] == ["docker", "login", "registry.example", "-u", "builder", "--password-stdin"]
    assert docker_calls[0]["input"] == "hunter2"
    assert [" ".join(call["args"]) for call in docker_calls[1:]] == [
        "docker tag team/demo:latest team/demo:v1.2.0",
        "docker push team/demo:v1.2.0",
        "docker push team/demo:latest",
    ]


def test_push_skips_latest_for_older_tag(fake_runner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DOCKER_PWD", "hunter2")
    runner = fake_runner(extra={"git rev-list": "0ld0ld0\n"})

    assert _images(runner, tmp_path).push_image() == ["team/demo:v1.2.0"]


def test_push_requires_tag_and_password(fake_runner, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ConfigurationError, match="git tag"):
        _images(fake_runner(tag=""), tmp_path).push_image()

    runner = fake_runner()
    with pytest.raises(ConfigurationError, match="DOCKER_PWD") as excinfo:
        _images(runner, tmp_path).push_image()
    assert "Checked resolvers: env (missing)" in str(excinfo.value)
    assert not any(call["args"][0] == "docker" for call in runner.calls)


def test_build_in_container_mounts_build_dir(fake_runner, tmp_path: Path) -> None:
    runner = fake_runner()

    output = _images(runner, tmp_path).build_in_container()

    assert output == tmp_path / "build"
    assert output.is_dir()
    assert runner.commands()[-2:] == [
        "docker build -t tmp/demo.build -f Dockerfile.build .",
        f"docker run -v {tmp_path / 'build'}:/app/build tmp/demo.build",
    ]


def test_remove_build_image_is_best_effort(fake_runner, tmp_path: Path) -> None:
    runner = fake_runner(extra={"docker images": "f00\nba4\n"})
    assert _images(runner, tmp_path).remove_build_image() is True
    assert runner.commands()[-1] == "docker rmi --force ba4 f00"

    failing = fake_runner(extra={"docker images": ExternalToolError("daemon not running")})
    assert _images(failing, tmp_path).remove_build_image() is False

    empty = fake_runner()
    assert _images(empty, tmp_path).remove_build_image() is False
