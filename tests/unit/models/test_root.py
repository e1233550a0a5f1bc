"""Unit tests for the Root model."""

from pathlib import Path

import pytest
from wsclean.models.root import LOCAL_NODE, Root


class TestRoot:
    """Tests for Root dataclass."""

    def test_defaults(self, tmp_path: Path) -> None:
        """Roots live on the local node by default."""
        root = Root(tmp_path)

        assert root.node == LOCAL_NODE
        assert root.label is None
        assert root.is_available is True

    def test_missing_path_unavailable(self, tmp_path: Path) -> None:
        """A path that does not exist is unavailable."""
        assert Root(tmp_path / "missing").is_available is False

    def test_no_workspace(self) -> None:
        """A root without a path is unavailable and says so."""
        root = Root(None, node="agent-1")

        assert root.is_available is False
        assert root.display_name == "<no workspace> on agent-1"
        assert root.key() == ("agent-1", None)

    def test_dead_symlink_is_available(self, tmp_path: Path) -> None:
        """A dangling symlink still needs cleaning."""
        link = tmp_path / "ws"
        link.symlink_to(tmp_path / "gone")

        assert Root(link).is_available is True

    def test_key_resolves_symlinks(self, tmp_path: Path) -> None:
        """Roots reached through a symlink share the target's key."""
        real = tmp_path / "real"
        real.mkdir()
        link = tmp_path / "link"
        link.symlink_to(real, target_is_directory=True)

        assert Root(link).key() == Root(real).key()
        assert Root(real, node="other").key() != Root(real).key()

    def test_relative_path_made_absolute(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Relative paths are anchored at the current directory."""
        monkeypatch.chdir(tmp_path)

        assert Root(Path("ws")).path == tmp_path / "ws"
        assert Root(Path(".")).path == tmp_path
