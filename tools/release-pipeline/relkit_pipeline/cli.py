from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

from relkit.errors import ConfigurationError, ReleaseError
from relkit.secrets import use_dotenv

from .config import CONFIG_FILENAME, ProjectConfig, RuntimeSettings, load_project_config
from .logging import configure_logging
from .pipeline import Pipeline
from .stages import list_stages


def _load_local_env(workspace: Path) -> None:
    """Load ``<workspace>/.env`` into the process and the secret resolvers."""

    env_file = workspace / ".env"
    use_dotenv(env_file)
    if env_file.exists():
        load_dotenv(env_file)


def _find_config(workspace: Path, explicit: Optional[str]) -> Path:
    if explicit:
        candidate = Path(explicit)
        return candidate if candidate.is_absolute() else workspace / candidate
    for name in (CONFIG_FILENAME, "pyproject.toml"):
        candidate = workspace / name
        if candidate.exists():
            return candidate
    raise ConfigurationError(f"No {CONFIG_FILENAME} or pyproject.toml found in {workspace}")


def _load_config(args: argparse.Namespace) -> ProjectConfig:
    workspace = Path(args.workspace_root).resolve()
    return load_project_config(_find_config(workspace, args.config))


def _add_project_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--workspace-root", default=".")
    parser.add_argument("--config", help=f"Path to {CONFIG_FILENAME} or pyproject.toml")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="relkit", description="Build, package and release a Go project")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run one or more stages with their requirements")
    run_parser.add_argument("stages", nargs="+", metavar="STAGE")
    run_parser.add_argument("--input", action="append", default=[], help="Stage input as key=value")
    _add_project_arguments(run_parser)

    subparsers.add_parser("list", help="List registered stages")

    info_parser = subparsers.add_parser("info", help="Print the build-info snapshot")
    _add_project_arguments(info_parser)

    args = parser.parse_args(argv)

    if args.command == "list":
        specs = [spec.to_dict() for spec in sorted(list_stages(), key=lambda spec: spec.slug)]
        print(json.dumps(specs, indent=2))
        return 0

    _load_local_env(Path(args.workspace_root).resolve())
    settings = RuntimeSettings.from_env()
    configure_logging(settings)

    if args.command == "info":
        try:
            pipeline = Pipeline(_load_config(args), settings)
            payload = pipeline.build_info().model_dump(mode="json", by_alias=True)
        except ReleaseError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        print(json.dumps(payload, indent=2))
        return 0

    if args.command == "run":
        try:
            inputs = _parse_key_value_args(args.input)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        try:
            pipeline = Pipeline(_load_config(args), settings, inputs=inputs)
            results = pipeline.run(*args.stages)
        except ReleaseError as exc:
            print(str(exc), file=sys.stderr)
            return 2
        payload = {slug: result.to_dict() for slug, result in results.items()}
        print(json.dumps(payload, indent=2))
        return 0

    parser.error("Unknown command")
    return 1


def _parse_key_value_args(values: list[str]) -> Dict[str, object]:
    options: Dict[str, object] = {}
    for entry in values:
        if "=" not in entry:
            raise ValueError(f"Argument must be key=value (got '{entry}')")
        key, raw_value = entry.split("=", 1)
        options[key.strip()] = raw_value.strip()
    return options


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
