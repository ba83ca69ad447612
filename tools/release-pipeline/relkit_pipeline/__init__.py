"""Stage orchestration for relkit release runs."""

from .config import ProjectConfig, RuntimeSettings, load_project_config
from .pipeline import Pipeline
from .stages import (
    PipelineError,
    StageResult,
    StageSpec,
    get_stage,
    list_stages,
    register_stage,
)
from .versioning import next_release_tag

__all__ = [
    "Pipeline",
    "PipelineError",
    "ProjectConfig",
    "RuntimeSettings",
    "StageResult",
    "StageSpec",
    "get_stage",
    "list_stages",
    "load_project_config",
    "next_release_tag",
    "register_stage",
]
