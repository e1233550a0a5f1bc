"""Unit tests for ExternalCommandSpec."""

import pytest
from wsclean.engine.command import ExternalCommandSpec
from wsclean.engine.errors import ConfigurationError


class TestExternalCommandSpec:
    """Tests for command template parsing and substitution."""

    def test_simple_substitution(self) -> None:
        """The placeholder is replaced by the path."""
        spec = ExternalCommandSpec("rm %s")

        assert spec.program == "rm"
        assert spec.argv_for("/ws/file.txt") == ["rm", "/ws/file.txt"]

    def test_filename_with_regex_metacharacters_is_literal(self) -> None:
        """'$', backslashes and '!' in filenames are never interpreted."""
        filename = "/ws/\\s! Dozen for 5$ only!"
        spec = ExternalCommandSpec("rm %s")

        assert spec.argv_for(filename) == ["rm", filename]
        assert spec.render(filename) == f"rm {filename}"

    def test_backreference_like_sequences_are_literal(self) -> None:
        """Sequences such as '$1' and '\\g<0>' survive substitution unchanged."""
        path = "/ws/$1 \\g<0> \\1"
        spec = ExternalCommandSpec("rm -f %s")

        assert spec.argv_for(path) == ["rm", "-f", path]

    def test_spaces_stay_in_one_argument(self) -> None:
        """A path with spaces is passed as a single argument."""
        spec = ExternalCommandSpec("rm -rf %s")

        assert spec.argv_for("/ws/my dir") == ["rm", "-rf", "/ws/my dir"]

    def test_quoted_placeholder(self) -> None:
        """Quotes around the placeholder are removed by tokenization."""
        spec = ExternalCommandSpec("rm -rf '%s'")

        assert spec.argv_for("/ws/a b") == ["rm", "-rf", "/ws/a b"]

    def test_placeholder_inside_token(self) -> None:
        """The placeholder may be part of a larger argument."""
        spec = ExternalCommandSpec("tool --target=%s")

        assert spec.argv_for("/ws/x") == ["tool", "--target=/ws/x"]

    def test_non_ascii_path(self) -> None:
        """Multi-byte filenames pass through unchanged."""
        spec = ExternalCommandSpec("rm %s")

        assert spec.argv_for("/ws/a¶‱ﻷ.txt") == ["rm", "/ws/a¶‱ﻷ.txt"]

    @pytest.mark.parametrize(
        "template",
        ["", "   ", "rm", "rm %s %s", "%s", "rm 'unterminated %s"],
    )
    def test_invalid_templates(self, template: str) -> None:
        """Malformed templates raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            ExternalCommandSpec(template)
