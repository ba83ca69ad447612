"""Compute-once project metadata."""

from .cache import MetadataCache, OnceCell

__all__ = ["MetadataCache", "OnceCell"]
