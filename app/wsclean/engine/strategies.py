"""Deletion strategies.

Two interchangeable ways of removing a workspace entry:

- NativeDelete: recursive bottom-up removal in-process, retrying
  entries that are transiently locked.
- ExternalCommandDelete: runs a user-supplied command per entry.

Neither raises on a per-entry failure; failures are returned as
EntryFailure records in the DeletionReport.
"""

import logging
import os
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from wsclean.engine.command import ExternalCommandSpec
from wsclean.models.outcome import DeletionReport, EntryFailure
from wsclean.utils.shell import command_exists, run_command

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 0.1


class DeletionStrategy(ABC):
    """Abstract base class for deletion strategies.

    Example:
        >>> strategy = NativeDelete(retries=2)
        >>> report = strategy.delete(Path("/builds/ws/target"))
        >>> report.success
        True
    """

    @property
    def supports_rename_away(self) -> bool:
        """Check if a wipeout may rename the workspace aside first.

        Only strategies that can remove an arbitrary renamed tree in the
        background support this.
        """
        return False

    @abstractmethod
    def delete(self, path: Path) -> DeletionReport:
        """Remove a file, symlink or directory tree.

        Args:
            path: Absolute path of the entry to remove.

        Returns:
            DeletionReport describing what was removed and what failed.
        """

    def delete_contents(self, directory: Path) -> DeletionReport:
        """Remove every entry inside ``directory`` but keep the directory.

        Args:
            directory: Directory to empty.

        Returns:
            Combined report for all top-level entries.
        """
        try:
            entries = sorted(directory.iterdir())
        except FileNotFoundError:
            return DeletionReport()
        except OSError as e:
            return DeletionReport(
                attempted=1,
                failures=(EntryFailure(path=str(directory), reason=e.strerror or str(e)),),
            )
        return DeletionReport.combine(self.delete(entry) for entry in entries)

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the strategy can run on this system."""

    @abstractmethod
    def describe(self) -> str:
        """Return a short human-readable description."""


class NativeDelete(DeletionStrategy):
    """Recursive in-process deletion with bounded retries.

    Each entry is retried ``retries`` times with a fixed ``delay``
    between attempts, which covers the common case of a child process
    releasing a file handle shortly after the build step exits. An
    entry still failing after that is recorded and its siblings are
    processed anyway.

    Args:
        retries: Extra attempts per entry after the first failure.
        delay: Seconds to wait between attempts.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        *,
        retries: int = DEFAULT_RETRIES,
        delay: float = DEFAULT_RETRY_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if retries < 0:
            msg = f"Retries cannot be negative, got {retries}"
            raise ValueError(msg)
        self._retries = retries
        self._delay = delay
        self._sleep = sleep

    @property
    def supports_rename_away(self) -> bool:
        return True

    def is_available(self) -> bool:
        """Native deletion is always available."""
        return True

    def describe(self) -> str:
        return f"native (retries={self._retries}, delay={self._delay}s)"

    def delete(self, path: Path) -> DeletionReport:
        """Remove ``path`` and, for directories, everything below it."""
        if path.is_dir() and not path.is_symlink():
            return self._delete_tree(path, include_top=True)
        return self._attempt(path, os.unlink)

    def delete_contents(self, directory: Path) -> DeletionReport:
        if not directory.is_dir():
            return DeletionReport()
        return self._delete_tree(directory, include_top=False)

    def _delete_tree(self, top: Path, *, include_top: bool) -> DeletionReport:
        """Walk ``top`` bottom-up and remove every entry.

        Directories holding an entry that could not be removed are not
        attempted themselves; the blocking entry is what gets reported.
        """
        reports: list[DeletionReport] = []
        blocked: set[str] = set()

        def on_walk_error(error: OSError) -> None:
            logger.debug("Cannot list %s: %s", error.filename, error)

        for dirpath, dirnames, filenames in os.walk(top, topdown=False, onerror=on_walk_error):
            for name in filenames:
                reports.append(self._remove_child(dirpath, name, os.unlink, blocked))
            for name in dirnames:
                child = os.path.join(dirpath, name)
                if os.path.islink(child):
                    reports.append(self._remove_child(dirpath, name, os.unlink, blocked))
                elif child in blocked:
                    blocked.add(dirpath)
                else:
                    reports.append(self._remove_child(dirpath, name, os.rmdir, blocked))

        if include_top and str(top) not in blocked:
            reports.append(self._attempt(top, os.rmdir))
        return DeletionReport.combine(reports)

    def _remove_child(
        self,
        dirpath: str,
        name: str,
        remove: Callable[[str], None],
        blocked: set[str],
    ) -> DeletionReport:
        report = self._attempt(Path(dirpath, name), remove)
        if not report.success:
            blocked.add(dirpath)
        return report

    def _attempt(self, path: Path, remove: Callable[[str], None]) -> DeletionReport:
        """Remove a single entry, retrying on OSError.

        Args:
            path: Entry to remove.
            remove: Removal primitive (os.unlink or os.rmdir).

        Returns:
            Report for exactly one attempted entry.
        """
        last_error: OSError | None = None
        for attempt in range(self._retries + 1):
            if attempt:
                self._sleep(self._delay)
            try:
                remove(str(path))
            except FileNotFoundError:
                # Removed concurrently; the goal is reached either way
                return DeletionReport(attempted=1, removed=1)
            except OSError as e:
                last_error = e
                logger.debug(
                    "Attempt %d/%d to delete %s failed: %s",
                    attempt + 1,
                    self._retries + 1,
                    path,
                    e,
                )
                continue
            return DeletionReport(attempted=1, removed=1)

        reason = (last_error.strerror or str(last_error)) if last_error else "unknown error"
        logger.warning("Giving up on %s after %d attempts: %s", path, self._retries + 1, reason)
        return DeletionReport(
            attempted=1,
            failures=(EntryFailure(path=str(path), reason=reason),),
        )


class ExternalCommandDelete(DeletionStrategy):
    """Deletes entries by running a user-supplied command.

    The command runs once per entry with the entry's absolute path
    substituted literally into the template.

    Args:
        spec: Parsed command template.
        timeout: Maximum seconds to wait for one command.
    """

    def __init__(self, spec: ExternalCommandSpec, *, timeout: float | None = 300.0) -> None:
        self._spec = spec
        self._timeout = timeout

    @property
    def spec(self) -> ExternalCommandSpec:
        """Return the command template."""
        return self._spec

    def is_available(self) -> bool:
        """Check if the template's program can be found."""
        return command_exists(self._spec.program)

    def describe(self) -> str:
        return f"external command '{self._spec.template}'"

    def delete(self, path: Path) -> DeletionReport:
        """Run the command for ``path``."""
        argv = self._spec.argv_for(str(path.absolute()))
        message = f"Using command: {' '.join(argv)}"
        logger.debug("Running external delete: %s", argv)

        try:
            result = run_command(argv, timeout=self._timeout)
        except subprocess.TimeoutExpired:
            reason = f"command timed out after {self._timeout}s"
        except OSError as e:
            reason = f"command could not be started: {e}"
        else:
            if result.success:
                return DeletionReport(attempted=1, removed=1, messages=(message,))
            reason = result.stderr.strip() or f"command exited with code {result.returncode}"

        return DeletionReport(
            attempted=1,
            failures=(EntryFailure(path=str(path), reason=reason),),
            messages=(message,),
        )
