"""Data models for wsclean.

This module exports rule, root and outcome models shared by the
engine and the CLI.
"""

from wsclean.models.outcome import (
    CleanupMode,
    CleanupResult,
    DeletionOutcome,
    DeletionReport,
    EntryFailure,
    WipeoutState,
)
from wsclean.models.root import LOCAL_NODE, Root
from wsclean.models.rule import Rule, RuleSet, RuleType

__all__ = [
    "LOCAL_NODE",
    "CleanupMode",
    "CleanupResult",
    "DeletionOutcome",
    "DeletionReport",
    "EntryFailure",
    "Root",
    "Rule",
    "RuleSet",
    "RuleType",
    "WipeoutState",
]
