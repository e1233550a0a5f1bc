"""Whole-workspace wipeout.

Wiping a workspace is a small state machine::

    START -> RENAME_AWAY -> BACKGROUND_DELETE -> DONE
                  |
                  +-> IN_PLACE_DELETE -> DONE | FAILED

Renaming the workspace aside frees its path for the next build
immediately; the renamed tree is reclaimed afterwards, by default on
a daemon thread. When the rename fails (read-only parent, another
device, locked handle) the contents are deleted in place instead.
"""

import logging
import os
import threading
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from wsclean.engine.strategies import DeletionStrategy
from wsclean.models.outcome import CleanupMode, DeletionOutcome, DeletionReport, WipeoutState
from wsclean.models.root import Root

logger = logging.getLogger(__name__)

RENAME_MARKER = "_ws-cleanup_"


def renamed_path(path: Path) -> Path:
    """Return a unique sibling path marking ``path`` for deletion."""
    millis = int(time.time() * 1000)
    return path.with_name(f"{path.name}{RENAME_MARKER}{millis}_{uuid.uuid4().hex[:8]}")


@dataclass(slots=True)
class _WipeoutRun:
    """Mutable context of a single wipe() call."""

    path: Path
    renamed_to: Path | None = None
    reports: list[DeletionReport] = field(default_factory=list)
    residue: tuple[str, ...] = ()


class WipeoutEngine:
    """Removes a whole workspace, falling back to in-place deletion.

    Args:
        strategy: Strategy used to remove entries.
        deferred: Try to rename the workspace aside before deleting.
            Only used when the strategy supports it.
        background: Reclaim renamed workspaces on a daemon thread. When
            False the renamed tree is deleted before wipe() returns.
    """

    def __init__(
        self,
        strategy: DeletionStrategy,
        *,
        deferred: bool = True,
        background: bool = True,
    ) -> None:
        self._strategy = strategy
        self._deferred = deferred
        self._background = background
        self._pending: list[threading.Thread] = []
        self._pending_lock = threading.Lock()
        self._handlers: dict[WipeoutState, Callable[[_WipeoutRun], WipeoutState]] = {
            WipeoutState.START: self._start,
            WipeoutState.RENAME_AWAY: self._rename_away,
            WipeoutState.BACKGROUND_DELETE: self._background_delete,
            WipeoutState.IN_PLACE_DELETE: self._in_place_delete,
        }

    def wipe(self, root: Root) -> DeletionOutcome:
        """Wipe the workspace at ``root``.

        Never raises for filesystem problems: entries that survive the
        in-place attempt are returned as residue with state FAILED.

        Args:
            root: Workspace to wipe.

        Returns:
            DeletionOutcome with the visited state trail.
        """
        if root.path is None:
            return DeletionOutcome(
                root=root,
                mode=CleanupMode.SKIPPED,
                trail=(WipeoutState.START, WipeoutState.DONE),
            )

        run = _WipeoutRun(path=root.path)
        state = WipeoutState.START
        trail = [state]
        while not state.is_terminal:
            state = self._handlers[state](run)
            trail.append(state)

        logger.debug("Wipeout of %s: %s", root.display_name, " -> ".join(s.value for s in trail))
        return DeletionOutcome(
            root=root,
            mode=CleanupMode.WIPEOUT,
            report=DeletionReport.combine(run.reports),
            residue=run.residue,
            trail=tuple(trail),
            renamed_to=str(run.renamed_to) if run.renamed_to is not None else None,
        )

    def wait(self, timeout: float | None = None) -> None:
        """Wait for background reclamation started by this engine.

        Args:
            timeout: Maximum seconds to wait per pending thread.
        """
        with self._pending_lock:
            pending = list(self._pending)
        for thread in pending:
            thread.join(timeout)
        with self._pending_lock:
            self._pending = [t for t in self._pending if t.is_alive()]

    @property
    def pending(self) -> int:
        """Return the number of background deletions still running."""
        with self._pending_lock:
            return sum(1 for t in self._pending if t.is_alive())

    # === State handlers ===

    def _start(self, run: _WipeoutRun) -> WipeoutState:
        if not (run.path.exists() or run.path.is_symlink()):
            logger.debug("Workspace %s does not exist, nothing to wipe", run.path)
            return WipeoutState.DONE
        if self._deferred and self._strategy.supports_rename_away and run.path.is_dir():
            return WipeoutState.RENAME_AWAY
        return WipeoutState.IN_PLACE_DELETE

    def _rename_away(self, run: _WipeoutRun) -> WipeoutState:
        try:
            target = renamed_path(run.path)
            os.rename(run.path, target)
        except (OSError, ValueError) as e:
            logger.debug("Cannot rename %s aside, deleting in place: %s", run.path, e)
            return WipeoutState.IN_PLACE_DELETE
        run.renamed_to = target
        return WipeoutState.BACKGROUND_DELETE

    def _background_delete(self, run: _WipeoutRun) -> WipeoutState:
        target = run.renamed_to
        if target is None:
            return WipeoutState.IN_PLACE_DELETE

        if not self._background:
            self._reclaim(target)
            return WipeoutState.DONE

        thread = threading.Thread(
            target=self._reclaim,
            args=(target,),
            name=f"wsclean-reclaim-{target.name}",
            daemon=True,
        )
        with self._pending_lock:
            self._pending = [t for t in self._pending if t.is_alive()]
            self._pending.append(thread)
        thread.start()
        return WipeoutState.DONE

    def _in_place_delete(self, run: _WipeoutRun) -> WipeoutState:
        if run.path.is_dir() and not run.path.is_symlink():
            run.reports.append(self._strategy.delete_contents(run.path))
        else:
            run.reports.append(self._strategy.delete(run.path))

        run.residue = _list_residue(run.path)
        if run.residue:
            logger.warning("Workspace %s still has %d entries", run.path, len(run.residue))
            return WipeoutState.FAILED
        return WipeoutState.DONE

    def _reclaim(self, target: Path) -> None:
        """Delete a renamed-away workspace, logging anything left behind."""
        report = self._strategy.delete(target)
        if report.success:
            logger.debug("Reclaimed %s (%d entries)", target, report.removed)
            return
        logger.warning(
            "Background deletion of %s left %d entries behind, first: %s",
            target,
            len(report.failures),
            report.failures[0].log_line(),
        )


def _list_residue(path: Path) -> tuple[str, ...]:
    """List what remains at ``path`` after an in-place deletion."""
    if path.is_dir() and not path.is_symlink():
        try:
            return tuple(sorted(str(entry) for entry in path.iterdir()))
        except OSError as e:
            logger.warning("Cannot list %s after deletion: %s", path, e)
            return (str(path),)
    if path.exists() or path.is_symlink():
        return (str(path),)
    return ()
