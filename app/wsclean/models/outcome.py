"""Deletion result models.

Reports produced by deletion strategies are folded into a per-root
DeletionOutcome, and outcomes for all roots are aggregated into a
single CleanupResult for the host.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from wsclean.models.root import Root


class CleanupMode(str, Enum):
    """How a root was processed.

    Attributes:
        WIPEOUT: Whole workspace removal, rules ignored.
        RULES: Pattern-based selective deletion.
        SKIPPED: Root had no workspace; nothing to do.
    """

    WIPEOUT = "wipeout"
    RULES = "rules"
    SKIPPED = "skipped"


class WipeoutState(str, Enum):
    """States of the whole-workspace wipeout state machine."""

    START = "start"
    RENAME_AWAY = "rename_away"
    BACKGROUND_DELETE = "background_delete"
    IN_PLACE_DELETE = "in_place_delete"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if the state machine stops in this state."""
        return self in (WipeoutState.DONE, WipeoutState.FAILED)


@dataclass(frozen=True, slots=True, order=True)
class EntryFailure:
    """A filesystem entry that could not be removed.

    Attributes:
        path: Absolute path of the entry.
        reason: Error message from the last attempt.
    """

    path: str
    reason: str

    def log_line(self) -> str:
        """Format the failure as a single build-log line."""
        return f"Cannot delete {self.path}: {self.reason}"


@dataclass(frozen=True, slots=True)
class DeletionReport:
    """What a deletion strategy did for one or more targets.

    Merging is commutative for counts and failures (failures are kept
    sorted by path), so reports from entries processed in any order
    aggregate to the same totals. Messages are a build-log transcript
    and keep the order in which reports were merged.

    Attributes:
        attempted: Number of entries the strategy tried to remove.
        removed: Number of entries actually removed.
        failures: Entries that could not be removed.
        messages: Informational build-log lines (e.g. commands run).
    """

    attempted: int = 0
    removed: int = 0
    failures: tuple[EntryFailure, ...] = ()
    messages: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """Check if every attempted entry was removed."""
        return not self.failures

    def merge(self, other: DeletionReport) -> DeletionReport:
        """Combine two reports into one; ``other``'s messages follow ours."""
        return DeletionReport(
            attempted=self.attempted + other.attempted,
            removed=self.removed + other.removed,
            failures=tuple(sorted(self.failures + other.failures)),
            messages=self.messages + other.messages,
        )

    @classmethod
    def combine(cls, reports: Iterable[DeletionReport]) -> DeletionReport:
        """Merge any number of reports."""
        total = cls()
        for report in reports:
            total = total.merge(report)
        return total


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    """Result of cleaning a single root.

    Attributes:
        root: The root that was processed.
        mode: How the root was processed.
        report: Aggregated strategy report.
        residue: Entries still present where the root should be empty.
        trail: Wipeout states visited, in order (empty for rule mode).
        renamed_to: Path the workspace was moved to before deletion, if any.
    """

    root: Root
    mode: CleanupMode
    report: DeletionReport = field(default_factory=DeletionReport)
    residue: tuple[str, ...] = ()
    trail: tuple[WipeoutState, ...] = ()
    renamed_to: str | None = None

    @property
    def success(self) -> bool:
        """Check if the root was fully cleaned."""
        return self.report.success and not self.residue

    @property
    def leftovers(self) -> tuple[str, ...]:
        """Return everything left behind: residue plus failed entries."""
        failed = tuple(f.path for f in self.report.failures)
        return tuple(dict.fromkeys(self.residue + failed))

    @property
    def log_lines(self) -> list[str]:
        """Build-log lines: messages, one per failure, one summary."""
        lines = list(self.report.messages)
        lines.extend(f.log_line() for f in self.report.failures)
        lines.append(self.summary())
        return lines

    def summary(self) -> str:
        """Return the one-line summary for this root."""
        name = self.root.display_name
        if self.mode == CleanupMode.SKIPPED:
            return f"Workspace {name}: nothing to clean"
        if self.leftovers:
            return f"Workspace {name} contains: [{', '.join(self.leftovers)}]"
        if self.renamed_to is not None:
            return f"Workspace {name}: moved to {self.renamed_to} for deletion"
        return (
            f"Workspace {name}: removed {self.report.removed} of "
            f"{self.report.attempted} entries"
        )


@dataclass(frozen=True, slots=True)
class CleanupResult:
    """Aggregate of per-root outcomes for one cleanup invocation.

    Attributes:
        outcomes: Per-root outcomes in resolution order.
        fail_on_residue: Whether leftover entries should fail the build.
    """

    outcomes: tuple[DeletionOutcome, ...] = ()
    fail_on_residue: bool = False

    @property
    def success(self) -> bool:
        """Check if every root was fully cleaned."""
        return all(o.success for o in self.outcomes)

    @property
    def should_fail_build(self) -> bool:
        """Check if the host should mark the build as failed."""
        return self.fail_on_residue and not self.success

    @property
    def report(self) -> DeletionReport:
        """Return the combined report across all roots."""
        return DeletionReport.combine(o.report for o in self.outcomes)

    @property
    def log_lines(self) -> list[str]:
        """Return the build-log lines of all roots, in order."""
        lines: list[str] = []
        for outcome in self.outcomes:
            lines.extend(outcome.log_lines)
        return lines
