"""wsclean - Workspace cleanup for build automation.

Deletes build workspace contents before or after a build, either by
wiping the whole workspace or by applying include/exclude patterns.
"""

__version__ = "0.3.0"
