"""Rich display functions for cleanup results."""

from rich.markup import escape
from rich.table import Table

from wsclean.models.outcome import CleanupResult, DeletionOutcome


def _status_text(outcome: DeletionOutcome) -> str:
    if outcome.success:
        return "[success]OK[/success]"
    return "[error]RESIDUE[/error]"


def create_outcomes_table(result: CleanupResult) -> Table:
    """Create a Rich table with one row per cleaned root.

    Args:
        result: Aggregated cleanup result.

    Returns:
        Rich Table configured for outcome display.
    """
    table = Table(
        title="Workspace Cleanup",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Workspace", no_wrap=True)
    table.add_column("Node", style="muted")
    table.add_column("Mode", style="muted")
    table.add_column("Removed", justify="right")
    table.add_column("Left", justify="right")

    for outcome in result.outcomes:
        root = outcome.root
        location = escape(str(root.path)) if root.path is not None else "-"
        if root.label:
            location = f"{location} [muted]({escape(root.label)})[/muted]"
        left = len(outcome.leftovers)
        table.add_row(
            _status_text(outcome),
            location,
            root.node,
            outcome.mode.value,
            f"{outcome.report.removed}/{outcome.report.attempted}",
            f"[removed]{left}[/removed]" if left else "0",
        )

    return table
