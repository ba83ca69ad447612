"""Pydantic models describing a published artifact file."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Checksums(BaseModel):
    md5: str = Field(..., description="MD5 hex digest of the file content.")
    sha1: str = Field(..., description="SHA-1 hex digest of the file content.")
    sha256: str = Field(..., description="SHA-256 hex digest of the file content.")

    model_config = ConfigDict(frozen=True, extra="forbid")


class FileDetails(BaseModel):
    checksums: Checksums
    size: int = Field(..., ge=0, description="File size in bytes.")

    model_config = ConfigDict(frozen=True, extra="forbid")
