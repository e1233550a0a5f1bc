"""Cleanup configuration and settings.

This module provides the configuration model and I/O functions for
workspace cleanup. Configuration is stored in TOML, by default in
~/.config/wsclean/config.toml, for example::

    wipeout = false
    delete_dirs = true
    fail_on_residue = true

    [[patterns]]
    pattern = "**/target/"
    type = "include"

    [[patterns]]
    pattern = "**/*.keep"
    type = "exclude"
"""

import logging
import os
import tomllib
from collections.abc import Callable, Mapping
from enum import Enum
from pathlib import Path
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from wsclean.core.paths import get_config_path
from wsclean.engine.command import ExternalCommandSpec
from wsclean.engine.coordinator import CleanupCoordinator
from wsclean.engine.errors import ConfigurationError
from wsclean.engine.strategies import DeletionStrategy, ExternalCommandDelete, NativeDelete
from wsclean.models.rule import Rule, RuleSet, RuleType

logger = logging.getLogger(__name__)

_TRUTHY = frozenset({"1", "true", "yes", "on"})


class BuildPhase(str, Enum):
    """When the cleanup runs relative to the build."""

    PRE = "pre"
    POST = "post"


class BuildResult(str, Enum):
    """Result of the build a post-build cleanup follows."""

    SUCCESS = "success"
    UNSTABLE = "unstable"
    FAILURE = "failure"
    NOT_BUILT = "not_built"
    ABORTED = "aborted"


class PatternConfig(BaseModel):
    """A single include/exclude pattern entry.

    Attributes:
        pattern: Glob pattern relative to the workspace root.
        type: Whether matches are deleted (include) or kept (exclude).
        case_sensitive: Whether matching respects case.
    """

    model_config = ConfigDict(extra="forbid")

    pattern: Annotated[str, Field(min_length=1, description="Glob pattern")]
    type: Annotated[RuleType, Field(description="include or exclude")] = RuleType.INCLUDE
    case_sensitive: Annotated[bool, Field(description="Case-sensitive match")] = True

    def to_rule(self) -> Rule:
        """Convert to an engine Rule."""
        return Rule(self.pattern, self.type, self.case_sensitive)


class CleanupConfig(BaseModel):
    """Configuration for workspace cleanup.

    Attributes:
        patterns: Ordered include/exclude patterns (last match wins).
        wipeout: Remove whole workspaces, ignoring patterns.
        delete_dirs: Apply patterns to directories as well as files.
        external_command: Command template with one ``%s`` placeholder that
            replaces native deletion.
        fail_on_residue: Fail the build when entries cannot be removed.
        deferred_wipeout: Rename workspaces aside before deleting them.
        retries: Extra attempts for an entry that fails to delete.
        retry_delay: Seconds between attempts.
        command_timeout: Seconds allowed for one external command.
        clean_when: Build results after which a post-build cleanup runs.
        skip_variable: Environment variable that disables cleanup when set
            to a truthy value.
    """

    model_config = ConfigDict(extra="forbid")

    patterns: Annotated[
        list[PatternConfig],
        Field(default_factory=list, description="Include/exclude patterns"),
    ]
    wipeout: Annotated[bool, Field(description="Wipe out whole workspace")] = False
    delete_dirs: Annotated[bool, Field(description="Apply patterns to directories")] = False
    external_command: Annotated[
        str | None,
        Field(description="External delete command template"),
    ] = None
    fail_on_residue: Annotated[bool, Field(description="Fail build on leftovers")] = False
    deferred_wipeout: Annotated[bool, Field(description="Rename before wipeout")] = True
    retries: Annotated[int, Field(ge=0, le=20, description="Retries per entry (0-20)")] = 3
    retry_delay: Annotated[
        float,
        Field(ge=0.0, le=10.0, description="Seconds between retries (0-10)"),
    ] = 0.1
    command_timeout: Annotated[
        float,
        Field(gt=0.0, description="Seconds allowed per external command"),
    ] = 300.0
    clean_when: Annotated[
        list[BuildResult],
        Field(
            default_factory=lambda: list(BuildResult),
            description="Build results that trigger post-build cleanup",
        ),
    ]
    skip_variable: Annotated[
        str | None,
        Field(description="Environment variable disabling cleanup"),
    ] = None

    @field_validator("external_command")
    @classmethod
    def validate_external_command(cls, v: str | None) -> str | None:
        """Validate that the command template is usable."""
        if v is None:
            return None
        try:
            ExternalCommandSpec(v)
        except ConfigurationError as e:
            raise ValueError(str(e)) from None
        return v

    def rule_set(self) -> RuleSet:
        """Build the ordered rule set."""
        return RuleSet.of(p.to_rule() for p in self.patterns)

    def command_spec(self) -> ExternalCommandSpec | None:
        """Return the parsed external command, if configured."""
        if self.external_command is None:
            return None
        return ExternalCommandSpec(self.external_command)

    def build_strategy(self, *, sleep: Callable[[float], None] | None = None) -> DeletionStrategy:
        """Create the deletion strategy for this configuration.

        Args:
            sleep: Optional sleep function for native retries.

        Returns:
            ExternalCommandDelete if a command is configured, else NativeDelete.
        """
        spec = self.command_spec()
        if spec is not None:
            return ExternalCommandDelete(spec, timeout=self.command_timeout)
        if sleep is None:
            return NativeDelete(retries=self.retries, delay=self.retry_delay)
        return NativeDelete(retries=self.retries, delay=self.retry_delay, sleep=sleep)

    def build_coordinator(self, *, background: bool = True) -> CleanupCoordinator:
        """Create a coordinator configured from these settings.

        Raises:
            ConfigurationError: If a pattern does not compile.
        """
        return CleanupCoordinator(
            self.rule_set(),
            wipeout=self.wipeout,
            strategy=self.build_strategy(),
            delete_dirs=self.delete_dirs,
            fail_on_residue=self.fail_on_residue,
            deferred_wipeout=self.deferred_wipeout,
            background=background,
        )

    def should_run(self, phase: BuildPhase, result: BuildResult | None = None) -> bool:
        """Check if cleanup applies to this phase and build result.

        Pre-build cleanup always runs. Post-build cleanup runs when the
        build result is listed in ``clean_when`` (or is unknown).
        """
        if phase == BuildPhase.PRE or result is None:
            return True
        return result in self.clean_when

    def is_skipped(self, environ: Mapping[str, str] | None = None) -> bool:
        """Check if the skip variable disables this cleanup.

        Args:
            environ: Environment to inspect. Defaults to os.environ.
        """
        if not self.skip_variable:
            return False
        env = os.environ if environ is None else environ
        return env.get(self.skip_variable, "").strip().lower() in _TRUTHY


def load_config(path: Path | None = None, *, required: bool = False) -> CleanupConfig:
    """Load cleanup configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default path.
        required: Raise if the file does not exist instead of returning
            the defaults.

    Returns:
        Validated CleanupConfig object.

    Raises:
        ConfigurationError: If the file is missing (when required), has
            invalid TOML syntax, or does not match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        if required:
            raise ConfigurationError(f"Config file not found: {config_path}")
        logger.debug("No config at %s, using defaults", config_path)
        return CleanupConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to read config {config_path}: {e}") from e

    try:
        return CleanupConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config content in {config_path}: {e}") from e


def save_config(config: CleanupConfig, path: Path | None = None) -> Path:
    """Save cleanup configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The CleanupConfig object to save.
        path: Path to save the config. If None, uses the default path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigurationError: If the file cannot be written.
    """
    from tempfile import NamedTemporaryFile

    config_path = path or get_config_path()
    data = config.model_dump(mode="json", exclude_none=True)

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(tmp_path, config_path)
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigurationError(f"Failed to write config {config_path}: {e}") from e

    return config_path
