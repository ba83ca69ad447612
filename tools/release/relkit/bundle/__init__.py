"""Build matrix, archive and checksum utilities."""

from .archives import tar_files, zip_files
from .matrix import DEFAULT_TARGETS, BuildTarget, CompileSettings, CrossCompiler, Packager
from .utils import compute_file_details

__all__ = [
    "BuildTarget",
    "CompileSettings",
    "CrossCompiler",
    "DEFAULT_TARGETS",
    "Packager",
    "compute_file_details",
    "tar_files",
    "zip_files",
]
