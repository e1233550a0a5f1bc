"""Unit tests for WorkspaceScanner."""

from pathlib import Path

from wsclean.engine.matcher import PatternMatcher
from wsclean.engine.scanner import WorkspaceScanner
from wsclean.models.rule import Rule, RuleSet


def _scanner(*rules: Rule, delete_dirs: bool = False) -> WorkspaceScanner:
    return WorkspaceScanner(PatternMatcher(RuleSet(rules)), delete_dirs=delete_dirs)


def _relative(root: Path, paths: list[Path]) -> list[str]:
    return [p.relative_to(root).as_posix() for p in paths]


class TestWorkspaceScanner:
    """Tests for WorkspaceScanner."""

    def test_selects_matching_files(self, workspace: Path) -> None:
        """Only files matching an include are selected."""
        targets = _scanner(Rule.include("**/*.o")).select(workspace)

        assert _relative(workspace, targets) == ["build/out.o"]

    def test_exclusions_keep_files(self, workspace: Path) -> None:
        """Excluded files are never selected."""
        scanner = _scanner(Rule.include("**/*"), Rule.exclude("**/*.log"))

        selected = sorted(_relative(workspace, scanner.select(workspace)))

        assert selected == ["build/nested/deep/lib.a", "build/out.o", "marker", "src/main.c"]

    def test_directories_ignored_without_delete_dirs(self, workspace: Path) -> None:
        """Without delete_dirs a directory pattern selects the files below it."""
        selected = sorted(_relative(workspace, _scanner(Rule.include("build/")).select(workspace)))

        assert selected == ["build/nested/deep/lib.a", "build/out.o"]

    def test_delete_dirs_selects_whole_directory(self, workspace: Path) -> None:
        """With delete_dirs a matching directory is selected and not descended into."""
        scanner = _scanner(Rule.include("build/"), delete_dirs=True)

        found = list(scanner.scan(workspace))

        assert found == [(workspace / "build", True)]

    def test_nested_directory_match(self, workspace: Path) -> None:
        """Directory patterns match at any depth with '**/'."""
        scanner = _scanner(Rule.include("**/nested"), delete_dirs=True)

        assert scanner.select(workspace) == [workspace / "build" / "nested"]

    def test_select_orders_files_before_deepest_directories(self, workspace: Path) -> None:
        """Files come first, then directories with the deepest first."""
        scanner = _scanner(
            Rule.include("src/main.c"),
            Rule.include("build/nested/deep"),
            Rule.include("logs"),
            delete_dirs=True,
        )

        assert _relative(workspace, scanner.select(workspace)) == [
            "src/main.c",
            "build/nested/deep",
            "logs",
        ]

    def test_symlinked_directory_is_not_followed(self, tmp_path: Path, make_tree) -> None:
        """A symlink to a directory is a single entry; its target is never scanned."""
        outside = make_tree(tmp_path / "outside", "precious.txt")
        ws = make_tree(tmp_path / "ws", "a.txt")
        (ws / "link").symlink_to(outside, target_is_directory=True)

        selected = _relative(ws, _scanner(Rule.include("**/*")).select(ws))

        assert sorted(selected) == ["a.txt", "link"]

    def test_empty_rule_set_selects_nothing(self, workspace: Path) -> None:
        """No rules means nothing is selected."""
        assert _scanner().select(workspace) == []

    def test_missing_root_selects_nothing(self, tmp_path: Path) -> None:
        """Scanning a missing directory yields nothing."""
        assert _scanner(Rule.include("**/*")).select(tmp_path / "missing") == []

    def test_non_ascii_names(self, tmp_path: Path, make_tree) -> None:
        """Multi-byte names are matched."""
        ws = make_tree(tmp_path / "ws", "a¶‱ﻷ.txt", "日本語/b.txt", "keep.c")

        selected = sorted(_relative(ws, _scanner(Rule.include("**/*.txt")).select(ws)))

        assert selected == ["a¶‱ﻷ.txt", "日本語/b.txt"]
