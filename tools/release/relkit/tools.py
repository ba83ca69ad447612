"""Thin wrappers around the external commands relkit drives (git, go, docker)."""

from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from .errors import ExternalToolError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Run blocking subprocesses and return their standard output.

    No timeout is enforced here; a hung command blocks the caller.
    """

    def __init__(self, cwd: Optional[Path] = None, env: Optional[Mapping[str, str]] = None) -> None:
        self.cwd = cwd
        self.env = dict(env or {})

    def run(
        self,
        args: Sequence[str],
        *,
        env: Optional[Mapping[str, str]] = None,
        input: Optional[str] = None,
    ) -> str:
        command = [str(arg) for arg in args if arg != ""]
        merged_env = os.environ.copy()
        merged_env.update(self.env)
        if env:
            merged_env.update(env)

        logger.debug("exec: %s", " ".join(command))
        try:
            proc = subprocess.run(
                command,
                cwd=str(self.cwd) if self.cwd else None,
                capture_output=True,
                text=True,
                env=merged_env,
                input=input,
                check=False,
            )
        except OSError as exc:
            raise ExternalToolError(f"{command[0]}: {exc}", command=command) from exc

        if proc.returncode != 0:
            output = proc.stderr.strip() or proc.stdout.strip()
            raise ExternalToolError(
                f"{' '.join(command)} failed ({proc.returncode}): {output}",
                command=command,
                returncode=proc.returncode,
                stderr=proc.stderr,
            )
        return proc.stdout


class GitClient:
    """Version-control queries issued by the metadata cache and the changelog."""

    LOG_FORMAT = "%d|%ci|%h|%cn|%s"

    def __init__(self, runner: CommandRunner, command: str = "git") -> None:
        self.runner = runner
        self.command = command

    def run(self, *args: str) -> str:
        return self.runner.run([self.command, *args])

    def short_rev(self) -> str:
        return self.run("rev-parse", "--short", "HEAD")

    def tags_at(self, rev: str) -> str:
        return self.run("tag", f"--points-at={rev}")

    def tags_by_date(self) -> str:
        return self.run("for-each-ref", "--format=%(tag)", "--sort=-taggerdate", "refs/tags")

    def rev_at(self, ref: str) -> str:
        return self.run("rev-list", "--abbrev-commit", "-n", "1", ref)

    def log(self) -> str:
        return self.run("log", f"--pretty=tformat:{self.LOG_FORMAT}")

    def create_tag(self, tag: str, message: str) -> str:
        return self.run("tag", "-a", tag, "-m", message)

    def push_tag(self, tag: str, remote: str = "origin") -> str:
        return self.run("push", remote, tag)


class GoToolchain:
    """Compiler, test runner and code checkers for the project being released."""

    def __init__(self, runner: CommandRunner, command: str = "go") -> None:
        self.runner = runner
        self.command = command

    def list_packages(self) -> str:
        return self.runner.run([self.command, "list", "./..."])

    def compile(self, output_path: Path, env: Mapping[str, str], link_flags: str = "") -> Path:
        args: List[str] = [self.command, "build", "-o", str(output_path)]
        if link_flags:
            args.append(f"-ldflags={link_flags}")
        self.runner.run(args, env=env)
        return output_path

    def test(self, env: Mapping[str, str], tags: str = "") -> str:
        args = [self.command, "test", "./..."]
        if tags:
            args.append(f"-tags={tags}")
        return self.runner.run(args, env=env)

    def vet(self) -> str:
        return self.runner.run([self.command, "vet", "./..."])

    def install(self, tool: str) -> str:
        return self.runner.run([self.command, "install", tool])

    def unformatted(self, path: Path) -> str:
        """Return gofmt's listing for ``path``; empty when the file is formatted."""

        return self.runner.run(["gofmt", "-l", str(path)])

    def lint(self, package: str) -> str:
        return self.runner.run(["golint", "-set_exit_status", package])


class ContainerTool:
    """Docker CLI wrapper: ``run(subcommand, *args)`` raises on failure."""

    def __init__(self, runner: CommandRunner, command: str = "docker") -> None:
        self.runner = runner
        self.command = command

    def run(self, subcommand: str, *args: str, input: Optional[str] = None) -> str:
        return self.runner.run([self.command, subcommand, *args], input=input)

    def images(self, reference: str) -> List[str]:
        output = self.run("images", "-q", reference)
        return sorted({line.strip() for line in output.splitlines() if line.strip()})


def trim_output(value: str) -> str:
    """Strip whitespace, one layer of double quotes and a trailing newline."""

    value = value.strip()
    value = value.removeprefix('"')
    value = value.removesuffix("\n")
    value = value.removesuffix('"')
    return value


__all__ = ["CommandRunner", "ContainerTool", "GitClient", "GoToolchain", "trim_output"]
