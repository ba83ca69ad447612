from __future__ import annotations

import tarfile
import zipfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from relkit.bundle import DEFAULT_TARGETS, BuildTarget, CompileSettings, CrossCompiler, Packager
from relkit.errors import ConfigurationError
from relkit.metadata import MetadataCache
from relkit.tools import GitClient, GoToolchain

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 0, tzinfo=timezone(timedelta(hours=1)))


def _compiler(runner, workdir: Path, ld_flags: str = "") -> CrossCompiler:
    cache = MetadataCache(workdir, git=GitClient(runner), toolchain=GoToolchain(runner), package_name="example.com/demo")
    settings = CompileSettings(
        project_name="demo",
        package_name="example.com/demo",
        workdir=workdir,
        build_dir=workdir / "build",
        ld_flags=ld_flags,
    )
    return CrossCompiler(settings, toolchain=GoToolchain(runner), cache=cache, clock=lambda: FIXED_NOW)


def test_build_target_parse_and_labels() -> None:
    target = BuildTarget.parse("windows/amd64")

    assert target == BuildTarget("windows", "amd64")
    assert target.label == "windows-amd64"
    assert target.archive_extension == "zip"
    assert BuildTarget("linux", "arm64").archive_extension == "tar.gz"
    assert BuildTarget().is_host
    with pytest.raises(ValueError):
        BuildTarget.parse("linux")


def test_env_flags_carry_version_and_build_date(fake_runner, tmp_path: Path) -> None:
    compiler = _compiler(fake_runner(), tmp_path)

    assert compiler.env_flags() == {
        "PACKAGE": "example.com/demo",
        "VERSION": "v1.2.0",
        "BUILD_DATE": "2024-03-01T12:30:00+0100",
    }


def test_host_build_leaves_platform_unset(fake_runner, tmp_path: Path) -> None:
    runner = fake_runner()
    compiler = _compiler(runner, tmp_path, ld_flags="-X main.version=$VERSION -X main.date=${BUILD_DATE}")

    exe = compiler.build_specific()

    assert exe == tmp_path / "build" / "demo"
    assert exe.exists()
    build_call = next(call for call in runner.calls if call["args"][:2] == ["go", "build"])
    assert "GOOS" not in build_call["env"]
    assert "GOARCH" not in build_call["env"]
    assert build_call["args"][-1] == "-ldflags=-X main.version=v1.2.0 -X main.date=2024-03-01T12:30:00+0100"


def test_cross_build_sets_platform_and_exe_suffix(fake_runner, tmp_path: Path) -> None:
    runner = fake_runner()
    compiler = _compiler(runner, tmp_path)

    exe = compiler.build_specific(BuildTarget("windows", "amd64"))

    assert exe.name == "demo.exe"
    build_call = next(call for call in runner.calls if call["args"][:2] == ["go", "build"])
    assert build_call["env"]["GOOS"] == "windows"
    assert build_call["env"]["GOARCH"] == "amd64"
    assert not any(arg.startswith("-ldflags") for arg in build_call["args"])


def test_package_default_matrix(fake_runner, tmp_path: Path) -> None:
    (tmp_path / "README.md").write_text("# demo\n", encoding="utf-8")
    packager = Packager(_compiler(fake_runner(), tmp_path), targets=DEFAULT_TARGETS)

    archives = packager.package()

    assert [path.name for path in archives] == [
        "demo_v1.2.0_windows-amd64.zip",
        "demo_v1.2.0_darwin-amd64.tar.gz",
        "demo_v1.2.0_linux-amd64.tar.gz",
    ]
    build_dir = tmp_path / "build"
    assert sorted(path.name for path in build_dir.iterdir()) == sorted(path.name for path in archives)

    with zipfile.ZipFile(archives[0]) as bundle:
        assert sorted(bundle.namelist()) == ["README.md", "demo.exe"]
        assert bundle.read("demo.exe") == b"binary for windows/amd64"
    with tarfile.open(archives[2], "r:gz") as bundle:
        assert sorted(bundle.getnames()) == ["README.md", "demo"]


def test_package_removes_binary_when_archiving_fails(fake_runner, tmp_path: Path) -> None:
    packager = Packager(_compiler(fake_runner(), tmp_path), targets=[BuildTarget("linux", "amd64")])

    with pytest.raises(ConfigurationError, match="README.md"):
        packager.package()

    assert not (tmp_path / "build" / "demo").exists()
