"""Exceptions raised by the cleanup engine.

Only configuration problems are raised. Filesystem failures during
deletion are reported as data in DeletionReport.
"""


class WsCleanError(Exception):
    """Base exception for wsclean errors."""


class ConfigurationError(WsCleanError):
    """Raised when patterns, command templates or settings are invalid.

    A configuration error aborts the whole invocation before anything
    is deleted.
    """
