"""Workspace deletion engine.

This module provides pattern matching, deletion strategies, the
whole-workspace wipeout state machine and the coordinator that ties
them together for one build.
"""

from wsclean.engine.command import PLACEHOLDER, ExternalCommandSpec
from wsclean.engine.coordinator import CleanupCoordinator, RootResolver, resolve_roots
from wsclean.engine.errors import ConfigurationError, WsCleanError
from wsclean.engine.matcher import PatternMatcher, glob_to_regex, matches
from wsclean.engine.scanner import WorkspaceScanner
from wsclean.engine.strategies import DeletionStrategy, ExternalCommandDelete, NativeDelete
from wsclean.engine.wipeout import RENAME_MARKER, WipeoutEngine

__all__ = [
    "PLACEHOLDER",
    "RENAME_MARKER",
    "CleanupCoordinator",
    "ConfigurationError",
    "DeletionStrategy",
    "ExternalCommandDelete",
    "ExternalCommandSpec",
    "NativeDelete",
    "PatternMatcher",
    "RootResolver",
    "WipeoutEngine",
    "WorkspaceScanner",
    "WsCleanError",
    "glob_to_regex",
    "matches",
    "resolve_roots",
]
