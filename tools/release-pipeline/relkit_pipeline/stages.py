from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Tuple

from relkit.bundle.matrix import BuildTarget
from relkit.errors import ConfigurationError, ExternalToolError, ReleaseError

from .versioning import next_release_tag

if TYPE_CHECKING:
    from .pipeline import Pipeline

logger = logging.getLogger(__name__)


class PipelineError(ReleaseError):
    """Raised for unknown stages or a misconfigured stage registry."""


@dataclass(frozen=True)
class StageSpec:
    slug: str
    description: str
    runner: Callable[["Pipeline"], "StageResult"]
    requires: Tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "slug": self.slug,
            "description": self.description,
            "requires": list(self.requires),
        }


@dataclass
class StageResult:
    status: str = "ok"
    artifacts: Dict[str, object] = field(default_factory=dict)
    logs: List[str] = field(default_factory=list)
    data: Dict[str, object] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "artifacts": self.artifacts,
            "logs": self.logs,
            "data": self.data,
        }


_STAGES: Dict[str, StageSpec] = {}


def register_stage(spec: StageSpec) -> None:
    if spec.slug in _STAGES:
        raise PipelineError(f"Stage '{spec.slug}' already registered.")
    _STAGES[spec.slug] = spec


def get_stage(slug: str) -> StageSpec:
    try:
        return _STAGES[slug]
    except KeyError as exc:
        available = ", ".join(sorted(_STAGES))
        raise PipelineError(f"Unknown stage '{slug}'. Available stages: {available}.") from exc


def list_stages() -> Iterable[StageSpec]:
    return _STAGES.values()


def _stage_install_deps(pipeline: "Pipeline") -> StageResult:
    installed: List[str] = []
    for tool in pipeline.config.dev_tools:
        pipeline.toolchain.install(tool)
        installed.append(tool)
    return StageResult(data={"installed": installed})


def _stage_format(pipeline: "Pipeline") -> StageResult:
    unformatted: List[str] = []
    for package in pipeline.cache.package_info().names:
        for source in sorted((pipeline.config.workdir / package).glob("*.go")):
            listing = pipeline.toolchain.unformatted(source)
            if listing.strip():
                unformatted.append(listing.strip())
    if unformatted:
        logger.error("The following files are not gofmt'ed:\n%s", "\n".join(unformatted))
        raise ExternalToolError("improperly formatted go files: " + ", ".join(unformatted))
    return StageResult()


def _stage_vet(pipeline: "Pipeline") -> StageResult:
    pipeline.toolchain.vet()
    return StageResult()


def _stage_lint(pipeline: "Pipeline") -> StageResult:
    failures: List[str] = []
    for package in pipeline.cache.package_info().names:
        try:
            pipeline.toolchain.lint(package)
        except ExternalToolError as exc:
            logger.error("running golint on %r: %s", package, exc)
            failures.append(package)
    if failures:
        raise ExternalToolError("errors running golint on: " + ", ".join(failures))
    return StageResult()


def _stage_validate(pipeline: "Pipeline") -> StageResult:
    return StageResult()


def _stage_test(pipeline: "Pipeline") -> StageResult:
    output = pipeline.toolchain.test({"GOFLAGS": pipeline.config.test_flags}, pipeline.config.build_tags)
    return StageResult(logs=[output] if output else [])


def _stage_build(pipeline: "Pipeline") -> StageResult:
    logger.debug("Building for current OS and architecture")
    binary = pipeline.compiler.build_specific(BuildTarget())
    info_path = pipeline.dump_info_to_disk()
    return StageResult(artifacts={"binary": str(binary), "build_info": str(info_path)})


def _stage_package(pipeline: "Pipeline") -> StageResult:
    archives = pipeline.packager.package()
    info_path = pipeline.dump_info_to_disk()
    return StageResult(artifacts={"archives": [str(path) for path in archives], "build_info": str(info_path)})


def _stage_deploy(pipeline: "Pipeline") -> StageResult:
    result = pipeline.publisher.deploy()
    return StageResult(
        artifacts={"urls": [upload.url for upload in result.uploads]},
        data={"publish": result.to_dict()},
    )


def _stage_changelog(pipeline: "Pipeline") -> StageResult:
    history = pipeline.git.log()
    path = pipeline.config.workdir / pipeline.config.changelog_path
    pipeline.changelog.write(path, history, version=pipeline.cache.version(), timestamp=pipeline.now())
    return StageResult(artifacts={"changelog": str(path)})


def _remove_build_dir(pipeline: "Pipeline") -> bool:
    path = pipeline.config.build_path
    if not path.exists():
        logger.debug("Nothing to clean at %s", path)
        return False
    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Unable to remove %s: %s", path, exc)
        return False
    return True


def _stage_clean(pipeline: "Pipeline") -> StageResult:
    return StageResult(data={"removed": _remove_build_dir(pipeline)})


def _stage_clean_all(pipeline: "Pipeline") -> StageResult:
    removed = _remove_build_dir(pipeline)
    image_removed = pipeline.containers.remove_build_image()
    return StageResult(data={"removed": removed, "image_removed": image_removed})


def _stage_info(pipeline: "Pipeline") -> StageResult:
    return StageResult(data={"info": pipeline.build_info().model_dump(mode="json", by_alias=True)})


def _stage_release(pipeline: "Pipeline") -> StageResult:
    git = pipeline.cache.git_info()
    if git.tag_at_rev:
        raise ConfigurationError(f"revision {git.rev} is already tagged {git.tag_at_rev}")
    bump = str(pipeline.inputs.get("bump") or "patch")
    try:
        tag = next_release_tag(git.latest_tag, bump)
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    pipeline.git.create_tag(tag, f"Release {tag}")
    pipeline.git.push_tag(tag, str(pipeline.inputs.get("remote") or "origin"))
    return StageResult(artifacts={"tag": tag}, data={"previous": git.latest_tag, "bump": bump})


def _stage_docker_image(pipeline: "Pipeline") -> StageResult:
    return StageResult(artifacts={"image": pipeline.containers.build_image()})


def _stage_docker_push(pipeline: "Pipeline") -> StageResult:
    return StageResult(artifacts={"pushed": pipeline.containers.push_image()})


def _stage_build_with_docker(pipeline: "Pipeline") -> StageResult:
    return StageResult(artifacts={"build_dir": str(pipeline.containers.build_in_container())})


def _register_builtin_stages() -> None:
    register_stage(StageSpec("install-deps", "Install linters used by validation.", _stage_install_deps))
    register_stage(StageSpec("format", "Fail when source files are not gofmt'ed.", _stage_format))
    register_stage(StageSpec("vet", "Run go vet on every package.", _stage_vet))
    register_stage(StageSpec("lint", "Run golint on every package.", _stage_lint))
    register_stage(
        StageSpec(
            "validate",
            "Install tools, check formatting and vet the code.",
            _stage_validate,
            requires=("install-deps", "format", "vet"),
        )
    )
    register_stage(StageSpec("test", "Run the test suite.", _stage_test))
    register_stage(
        StageSpec(
            "build",
            "Build a host binary in the build directory.",
            _stage_build,
            requires=("validate", "test"),
        )
    )
    register_stage(
        StageSpec(
            "package",
            "Cross-compile the build matrix and archive each binary.",
            _stage_package,
            requires=("validate", "test"),
        )
    )
    register_stage(StageSpec("deploy", "Upload archives to the artifact registry.", _stage_deploy))
    register_stage(StageSpec("changelog", "Write the changelog from git history.", _stage_changelog))
    register_stage(StageSpec("clean", "Remove the build directory.", _stage_clean))
    register_stage(StageSpec("clean-all", "Remove the build directory and the build image.", _stage_clean_all))
    register_stage(StageSpec("info", "Show the build-info snapshot.", _stage_info))
    register_stage(
        StageSpec(
            "release",
            "Tag the next vX.Y.Z release and push the tag.",
            _stage_release,
            requires=("validate", "test"),
        )
    )
    register_stage(StageSpec("docker-image", "Build the container image.", _stage_docker_image))
    register_stage(StageSpec("docker-push", "Tag and push the container image.", _stage_docker_push))
    register_stage(
        StageSpec("build-with-docker", "Build inside a container using Dockerfile.build.", _stage_build_with_docker)
    )


_register_builtin_stages()


__all__ = [
    "PipelineError",
    "StageResult",
    "StageSpec",
    "get_stage",
    "list_stages",
    "register_stage",
]
