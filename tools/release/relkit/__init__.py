"""Release engineering helpers: metadata, build matrix, publishing and changelogs."""

__version__ = "0.1.0"
from .bundle import BuildTarget, CompileSettings, CrossCompiler, Packager, compute_file_details
from .changelog import ChangeLogGenerator
from .container import ContainerImages
from .errors import ConfigurationError, ExternalToolError, ReleaseError
from .metadata import MetadataCache
from .publish import ChecksumArtifactPublisher, PublishResult, UploadResult
from .schemas import BuildInfo, DockerInfo, FileDetails, GitInfo, PackageInfo, ArtifactRegistryInfo
from .secrets import is_configured, missing_secret_message, resolve_secret, use_dotenv
from .tools import CommandRunner, ContainerTool, GitClient, GoToolchain

__all__ = [
    "__version__",
    "ArtifactRegistryInfo",
    "BuildInfo",
    "BuildTarget",
    "ChangeLogGenerator",
    "ChecksumArtifactPublisher",
    "CommandRunner",
    "CompileSettings",
    "ConfigurationError",
    "ContainerImages",
    "ContainerTool",
    "CrossCompiler",
    "DockerInfo",
    "ExternalToolError",
    "FileDetails",
    "GitClient",
    "GitInfo",
    "GoToolchain",
    "MetadataCache",
    "PackageInfo",
    "Packager",
    "PublishResult",
    "ReleaseError",
    "UploadResult",
    "compute_file_details",
    "is_configured",
    "missing_secret_message",
    "resolve_secret",
    "use_dotenv",
]
