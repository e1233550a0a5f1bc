"""Cleanup coordinator.

Entry point used before and after a build. Resolves the workspace
roots of the build, cleans each one by whole wipeout or by rules, and
aggregates the outcomes into a single CleanupResult.
"""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from wsclean.engine.errors import ConfigurationError
from wsclean.engine.matcher import PatternMatcher
from wsclean.engine.scanner import WorkspaceScanner
from wsclean.engine.strategies import DeletionStrategy, NativeDelete
from wsclean.engine.wipeout import WipeoutEngine
from wsclean.models.outcome import CleanupMode, CleanupResult, DeletionOutcome, DeletionReport
from wsclean.models.root import Root
from wsclean.models.rule import RuleSet

logger = logging.getLogger(__name__)

RootResolver = Callable[[], Iterable[Root]]


def resolve_roots(
    primary: Root | None,
    *,
    alternate: Root | None = None,
    children: Iterable[Root] = (),
    parent: Root | None = None,
) -> list[Root]:
    """Flatten the workspaces of a build into a worklist.

    For fan-out builds both the child workspaces and the parent's own
    workspace are included. Roots pointing at the same path on the same
    node are listed once.

    Args:
        primary: The build's own workspace.
        alternate: Externally configured workspace, if any.
        children: Workspaces of child builds.
        parent: Workspace of the parent/aggregate build.

    Returns:
        Roots in the order primary, alternate, children, parent.
    """
    seen: set[tuple[str, str | None]] = set()
    roots: list[Root] = []
    for root in (primary, alternate, *children, parent):
        if root is None:
            continue
        key = root.key()
        if key in seen:
            continue
        seen.add(key)
        roots.append(root)
    return roots


class CleanupCoordinator:
    """Cleans every workspace root of a build.

    Args:
        rule_set: Include/exclude rules for rule-based cleanup.
        wipeout: Remove whole workspaces, ignoring ``rule_set``.
        strategy: How entries are removed. Defaults to NativeDelete.
        delete_dirs: Apply patterns to directories as well as files.
        fail_on_residue: Report leftovers as a build failure.
        deferred_wipeout: Let wipeouts rename the workspace aside first.
        background: Reclaim renamed workspaces on a daemon thread.

    Raises:
        ConfigurationError: If a pattern does not compile.
    """

    def __init__(
        self,
        rule_set: RuleSet | None = None,
        *,
        wipeout: bool = False,
        strategy: DeletionStrategy | None = None,
        delete_dirs: bool = False,
        fail_on_residue: bool = False,
        deferred_wipeout: bool = True,
        background: bool = True,
    ) -> None:
        self._rule_set = rule_set if rule_set is not None else RuleSet()
        self._wipeout = wipeout
        self._strategy = strategy if strategy is not None else NativeDelete()
        self._fail_on_residue = fail_on_residue
        self._matcher = PatternMatcher(self._rule_set, wipeout=wipeout)
        self._scanner = WorkspaceScanner(self._matcher, delete_dirs=delete_dirs)
        self._engine = WipeoutEngine(
            self._strategy,
            deferred=deferred_wipeout,
            background=background,
        )

    @property
    def strategy(self) -> DeletionStrategy:
        """Return the deletion strategy in use."""
        return self._strategy

    def run(self, roots: Iterable[Root] | RootResolver) -> CleanupResult:
        """Clean all roots and aggregate the outcomes.

        Every root is attempted even if an earlier one leaves residue.

        Args:
            roots: Roots to clean, or a resolver called once per run.

        Returns:
            CleanupResult with one outcome per root.

        Raises:
            ConfigurationError: If the deletion strategy cannot run here.
        """
        if not self._strategy.is_available():
            msg = f"Deletion strategy is not available: {self._strategy.describe()}"
            raise ConfigurationError(msg)

        worklist = list(roots() if callable(roots) else roots)
        logger.debug(
            "Cleaning %d root(s) using %s",
            len(worklist),
            self._strategy.describe(),
        )

        outcomes = tuple(self.clean_root(root) for root in worklist)
        result = CleanupResult(outcomes=outcomes, fail_on_residue=self._fail_on_residue)
        for outcome in outcomes:
            if not outcome.success:
                logger.debug("%s", outcome.summary())
        return result

    def clean_root(self, root: Root) -> DeletionOutcome:
        """Clean a single root.

        A root without a workspace is a successful no-op.
        """
        if root.path is None or not root.is_available:
            logger.debug("No workspace for %s, skipping", root.display_name)
            return DeletionOutcome(root=root, mode=CleanupMode.SKIPPED)

        if self._wipeout:
            return self._engine.wipe(root)
        return self._clean_by_rules(root, root.path)

    def wait(self, timeout: float | None = None) -> None:
        """Wait for background reclamation of renamed workspaces."""
        self._engine.wait(timeout)

    def _clean_by_rules(self, root: Root, path: Path) -> DeletionOutcome:
        targets = self._scanner.select(path)
        logger.debug("%d entries selected in %s", len(targets), root.display_name)

        report = DeletionReport.combine(self._strategy.delete(target) for target in targets)
        return DeletionOutcome(root=root, mode=CleanupMode.RULES, report=report)
