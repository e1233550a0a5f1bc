"""Workspace scanner for rule-based cleanup.

Walks a workspace root and selects the entries a PatternMatcher marks
for deletion. Files (and symlinks) are always candidates; directories
are candidates only when patterns apply to directories, in which case
a selected directory is removed as a whole and not descended into.
"""

import logging
import os
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

from wsclean.engine.matcher import PatternMatcher

logger = logging.getLogger(__name__)


class WorkspaceScanner:
    """Selects deletion targets below a workspace root.

    Args:
        matcher: Compiled include/exclude rules.
        delete_dirs: If True, patterns also select directories.
    """

    def __init__(self, matcher: PatternMatcher, *, delete_dirs: bool = False) -> None:
        self._matcher = matcher
        self._delete_dirs = delete_dirs

    def scan(self, root: Path) -> Iterator[tuple[Path, bool]]:
        """Walk ``root`` and yield selected entries.

        Args:
            root: Workspace directory to scan.

        Yields:
            Tuples of (absolute path, is_directory) for selected entries.
        """
        if self._matcher.selects_nothing:
            return

        def on_walk_error(error: OSError) -> None:
            logger.warning("Cannot scan %s: %s", error.filename, error)

        for dirpath, dirnames, filenames in os.walk(root, onerror=on_walk_error):
            base = Path(dirpath)
            rel_base = PurePosixPath(base.relative_to(root).as_posix())

            descend: list[str] = []
            for name in sorted(dirnames):
                path = base / name
                if path.is_symlink():
                    filenames.append(name)
                elif self._delete_dirs and self._matcher.matches(rel_base / name):
                    yield path, True
                else:
                    descend.append(name)
            # Prune in place so os.walk skips selected directories
            dirnames[:] = descend

            for name in sorted(filenames):
                if self._matcher.matches(rel_base / name):
                    yield base / name, False

    def select(self, root: Path) -> list[Path]:
        """Return deletion targets in a safe removal order.

        Files come first, then directories deepest-first, so a directory
        is only removed after everything selected inside it.

        Args:
            root: Workspace directory to scan.

        Returns:
            Ordered list of absolute paths to delete.
        """
        files: list[Path] = []
        dirs: list[Path] = []
        for path, is_dir in self.scan(root):
            (dirs if is_dir else files).append(path)
        dirs.sort(key=lambda p: len(p.parts), reverse=True)
        return files + dirs
