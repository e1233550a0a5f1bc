"""Configuration and paths for wsclean."""

from wsclean.core.config import (
    BuildPhase,
    BuildResult,
    CleanupConfig,
    PatternConfig,
    load_config,
    save_config,
)
from wsclean.core.paths import get_config_dir, get_config_path

__all__ = [
    "BuildPhase",
    "BuildResult",
    "CleanupConfig",
    "PatternConfig",
    "get_config_dir",
    "get_config_path",
    "load_config",
    "save_config",
]
