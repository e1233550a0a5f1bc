"""Unit tests for cleanup configuration.

Tests loading, validating and saving the TOML configuration, and the
factory methods that turn it into engine objects.
"""

import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError
from wsclean.core.config import (
    BuildPhase,
    BuildResult,
    CleanupConfig,
    PatternConfig,
    load_config,
    save_config,
)
from wsclean.engine.coordinator import CleanupCoordinator
from wsclean.engine.errors import ConfigurationError
from wsclean.engine.strategies import ExternalCommandDelete, NativeDelete
from wsclean.models.rule import Rule, RuleType


class TestCleanupConfig:
    """Tests for the CleanupConfig model."""

    def test_defaults(self) -> None:
        """An empty config cleans nothing and never fails the build."""
        config = CleanupConfig()

        assert config.patterns == []
        assert config.wipeout is False
        assert config.fail_on_residue is False
        assert config.retries == 3
        assert config.clean_when == list(BuildResult)
        assert config.rule_set().is_empty

    def test_rule_set_keeps_order(self) -> None:
        """Patterns become rules in declaration order."""
        config = CleanupConfig(
            patterns=[
                PatternConfig(pattern="**/*"),
                PatternConfig(pattern="**/*.keep", type=RuleType.EXCLUDE),
                PatternConfig(pattern="*.TXT", case_sensitive=False),
            ]
        )

        assert config.rule_set().rules == (
            Rule.include("**/*"),
            Rule.exclude("**/*.keep"),
            Rule.include("*.TXT", case_sensitive=False),
        )

    @pytest.mark.parametrize("command", ["rm", "rm %s %s", "", "rm 'x %s"])
    def test_invalid_external_command(self, command: str) -> None:
        """Malformed command templates fail validation."""
        with pytest.raises(ValidationError):
            CleanupConfig(external_command=command)

    @pytest.mark.parametrize("retries", [-1, 21])
    def test_retries_bounds(self, retries: int) -> None:
        """Retries are limited to 0-20."""
        with pytest.raises(ValidationError):
            CleanupConfig(retries=retries)

    def test_unknown_key_rejected(self) -> None:
        """Unknown settings are an error, not silently ignored."""
        with pytest.raises(ValidationError):
            CleanupConfig.model_validate({"wipe_out": True})

    def test_empty_pattern_rejected(self) -> None:
        """Patterns cannot be empty."""
        with pytest.raises(ValidationError):
            PatternConfig(pattern="")

    def test_build_strategy_native(self) -> None:
        """Without a command the native strategy is used."""
        strategy = CleanupConfig(retries=5, retry_delay=0.5).build_strategy()

        assert isinstance(strategy, NativeDelete)
        assert "retries=5" in strategy.describe()

    def test_build_strategy_external(self) -> None:
        """A configured command selects the external strategy."""
        strategy = CleanupConfig(external_command="rm -rf %s").build_strategy()

        assert isinstance(strategy, ExternalCommandDelete)
        assert strategy.spec.template == "rm -rf %s"

    def test_build_coordinator(self) -> None:
        """build_coordinator wires the configured strategy."""
        coordinator = CleanupConfig(wipeout=True).build_coordinator(background=False)

        assert isinstance(coordinator, CleanupCoordinator)
        assert isinstance(coordinator.strategy, NativeDelete)

    def test_build_coordinator_invalid_pattern(self) -> None:
        """A pattern that does not compile is a configuration error."""
        config = CleanupConfig(patterns=[PatternConfig(pattern="[z-a]")])

        with pytest.raises(ConfigurationError):
            config.build_coordinator()


class TestShouldRun:
    """Tests for CleanupConfig.should_run."""

    def test_pre_build_always_runs(self) -> None:
        """Pre-build cleanup ignores clean_when."""
        config = CleanupConfig(clean_when=[])

        assert config.should_run(BuildPhase.PRE, BuildResult.FAILURE) is True

    def test_post_build_filters_results(self) -> None:
        """Post-build cleanup only runs for listed results."""
        config = CleanupConfig(clean_when=[BuildResult.SUCCESS])

        assert config.should_run(BuildPhase.POST, BuildResult.SUCCESS) is True
        assert config.should_run(BuildPhase.POST, BuildResult.FAILURE) is False

    def test_unknown_result_runs(self) -> None:
        """Without a known build result the cleanup runs."""
        config = CleanupConfig(clean_when=[BuildResult.SUCCESS])

        assert config.should_run(BuildPhase.POST, None) is True


class TestIsSkipped:
    """Tests for CleanupConfig.is_skipped."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [("1", True), ("true", True), ("YES", True), (" on ", True), ("0", False), ("", False)],
    )
    def test_truthy_values(self, value: str, expected: bool) -> None:
        """Only truthy values of the skip variable disable cleanup."""
        config = CleanupConfig(skip_variable="SKIP_CLEANUP")

        assert config.is_skipped({"SKIP_CLEANUP": value}) is expected

    def test_unset_variable(self) -> None:
        """A missing variable does not skip."""
        assert CleanupConfig(skip_variable="SKIP_CLEANUP").is_skipped({}) is False

    def test_no_skip_variable(self) -> None:
        """Without a configured variable nothing is skipped."""
        assert CleanupConfig().is_skipped({"SKIP_CLEANUP": "1"}) is False


class TestLoadConfig:
    """Tests for load_config function."""

    def test_missing_file_returns_defaults(self, tmp_path: Path) -> None:
        """A missing optional file yields the defaults."""
        assert load_config(tmp_path / "missing.toml") == CleanupConfig()

    def test_missing_required_file(self, tmp_path: Path) -> None:
        """A missing required file is an error."""
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "missing.toml", required=True)

    def test_loads_valid_file(self, tmp_path: Path) -> None:
        """Patterns and flags are read from TOML."""
        path = tmp_path / "config.toml"
        path.write_text(
            "delete_dirs = true\n"
            'external_command = "rm -rf %s"\n'
            'clean_when = ["success", "unstable"]\n'
            "\n"
            "[[patterns]]\n"
            'pattern = "**/target/"\n'
            "\n"
            "[[patterns]]\n"
            'pattern = "**/*.keep"\n'
            'type = "exclude"\n'
        )

        config = load_config(path)

        assert config.delete_dirs is True
        assert config.external_command == "rm -rf %s"
        assert config.clean_when == [BuildResult.SUCCESS, BuildResult.UNSTABLE]
        assert [p.type for p in config.patterns] == [RuleType.INCLUDE, RuleType.EXCLUDE]

    def test_invalid_toml(self, tmp_path: Path) -> None:
        """Broken TOML is a configuration error."""
        path = tmp_path / "config.toml"
        path.write_text("wipeout = [unclosed")

        with pytest.raises(ConfigurationError, match="Invalid TOML"):
            load_config(path)

    def test_invalid_content(self, tmp_path: Path) -> None:
        """Schema violations are configuration errors."""
        path = tmp_path / "config.toml"
        path.write_text("retries = 100\n")

        with pytest.raises(ConfigurationError, match="Invalid config"):
            load_config(path)


class TestSaveConfig:
    """Tests for save_config function."""

    def test_save_and_load(self, tmp_path: Path) -> None:
        """A saved config loads back unchanged."""
        config = CleanupConfig(
            patterns=[PatternConfig(pattern="**/*.o")],
            fail_on_residue=True,
            skip_variable="SKIP_CLEANUP",
        )
        path = tmp_path / "nested" / "config.toml"

        saved = save_config(config, path)

        assert saved == path
        assert load_config(path) == config

    def test_omits_unset_values(self, tmp_path: Path) -> None:
        """Unset optional settings are not written."""
        path = save_config(CleanupConfig(), tmp_path / "config.toml")

        with open(path, "rb") as f:
            data = tomllib.load(f)

        assert "external_command" not in data
        assert "skip_variable" not in data

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        """The atomic write leaves only the target file."""
        save_config(CleanupConfig(), tmp_path / "config.toml")

        assert [p.name for p in tmp_path.iterdir()] == ["config.toml"]

    def test_unwritable_location(self, tmp_path: Path) -> None:
        """Write errors become configuration errors."""
        blocker = tmp_path / "file"
        blocker.write_text("x")

        with pytest.raises(ConfigurationError, match="Failed to write"):
            save_config(CleanupConfig(), blocker / "config.toml")
