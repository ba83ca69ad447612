"""Credential resolution for the artifact registry and the container registry."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Protocol

from dotenv import dotenv_values

UNSET_PASSWORD = "to.be.set"

ARTIFACT_USER_ENV = "RELKIT_ARTIFACT_USR"
ARTIFACT_PASSWORD_ENV = "RELKIT_ARTIFACT_PWD"
DOCKER_USER_ENV = "DOCKER_USR"
DOCKER_PASSWORD_ENV = "DOCKER_PWD"


@dataclass(frozen=True)
class SecretSpec:
    name: str
    description: str = ""


class SecretResolver(Protocol):
    def resolve(self, spec: SecretSpec) -> Optional[str]:  # pragma: no cover - interface
        ...

    def describe(self) -> dict[str, object]:  # pragma: no cover - optional hook
        return {}


@dataclass(frozen=True)
class SecretAttempt:
    resolver: str
    source: str
    success: bool
    details: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class SecretResolutionInfo:
    name: str
    value: Optional[str]
    resolver: Optional[str]
    source: Optional[str]
    attempts: List[SecretAttempt]


@dataclass
class _RegisteredResolver:
    priority: int
    resolver: SecretResolver
    name: str
    source: str


_secret_specs: dict[str, SecretSpec] = {}
_resolvers: List[_RegisteredResolver] = []


def register_secret(spec: SecretSpec) -> None:
    _secret_specs.setdefault(spec.name, spec)


def register_resolver(
    resolver: SecretResolver,
    priority: int = 0,
    *,
    name: Optional[str] = None,
    source: Optional[str] = None,
) -> None:
    entry = _RegisteredResolver(
        priority=priority,
        resolver=resolver,
        name=name or resolver.__class__.__name__,
        source=source or (name or resolver.__class__.__name__),
    )
    _resolvers.append(entry)
    _resolvers.sort(key=lambda item: item.priority, reverse=True)


class EnvResolver:
    """Resolve secrets from process environment variables."""

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        value = os.getenv(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {"type": "env"}


class DotEnvResolver:
    """Resolve secrets from a ``.env`` file, read lazily on first lookup."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._values: Optional[Dict[str, Optional[str]]] = None

    def resolve(self, spec: SecretSpec) -> Optional[str]:
        if self._values is None:
            self._values = dict(dotenv_values(self.path)) if self.path.exists() else {}
        value = self._values.get(spec.name)
        return value if value else None

    def describe(self) -> dict[str, object]:
        return {"type": "dotenv", "path": str(self.path), "exists": self.path.exists()}


register_resolver(EnvResolver(), priority=0, name="env", source="env")

register_secret(SecretSpec(ARTIFACT_USER_ENV, "Artifact registry user"))
register_secret(SecretSpec(ARTIFACT_PASSWORD_ENV, "Artifact registry password"))
register_secret(SecretSpec(DOCKER_USER_ENV, "Container registry user"))
register_secret(SecretSpec(DOCKER_PASSWORD_ENV, "Container registry password"))


def use_dotenv(path: str | Path, *, priority: int = -10) -> None:
    resolver = DotEnvResolver(Path(path))
    register_resolver(resolver, priority=priority, name=f"dotenv:{resolver.path}", source="dotenv")


def resolve_secret_info(name: str) -> SecretResolutionInfo:
    spec = _secret_specs.get(name, SecretSpec(name=name))
    attempts: List[SecretAttempt] = []

    for entry in _resolvers:
        value = entry.resolver.resolve(spec)
        describe = getattr(entry.resolver, "describe", None)
        details = describe() if callable(describe) else {}
        attempts.append(
            SecretAttempt(resolver=entry.name, source=entry.source, success=bool(value), details=details)
        )
        if value:
            return SecretResolutionInfo(
                name=spec.name,
                value=value,
                resolver=entry.name,
                source=entry.source,
                attempts=attempts,
            )

    return SecretResolutionInfo(name=spec.name, value=None, resolver=None, source=None, attempts=attempts)


def resolve_secret(name: str, default: Optional[str] = None) -> Optional[str]:
    value = resolve_secret_info(name).value
    return value if value is not None else default


def is_configured(value: Optional[str]) -> bool:
    """Return False for empty values and for the unset-password sentinel."""

    return bool(value) and value != UNSET_PASSWORD


def missing_secret_message(name: str, purpose: str) -> str:
    """Explain an unresolved credential, listing every resolver that was tried."""

    info = resolve_secret_info(name)
    attempted: List[str] = []
    for attempt in info.attempts:
        label = attempt.source or attempt.resolver
        path = attempt.details.get("path") if attempt.details else None
        if path:
            label = f"{label}@{path}"
        status = "resolved" if attempt.success else "missing"
        attempted.append(f"{label} ({status})")
    summary = ", ".join(attempted) if attempted else "none"
    return f"missing password for the {purpose} (set variable {name}). Checked resolvers: {summary}."
