"""Workspace root model."""

import os
from dataclasses import dataclass
from pathlib import Path

LOCAL_NODE = "local"


@dataclass(frozen=True, slots=True)
class Root:
    """A workspace location targeted by one cleanup invocation.

    Matrix builds place workspaces on different executors, so a root
    carries the identity of the node it lives on alongside its path.

    Attributes:
        path: Workspace path, or None when no workspace was allocated
            for the build. Relative paths are made absolute against the
            current directory without following symlinks.
        node: Identity of the node/agent holding the workspace.
        label: Optional human-readable name (e.g. "parent", "name=a").
    """

    path: Path | None
    node: str = LOCAL_NODE
    label: str | None = None

    def __post_init__(self) -> None:
        if self.path is not None:
            object.__setattr__(self, "path", Path(os.path.abspath(self.path)))

    @property
    def is_available(self) -> bool:
        """Check if the workspace currently exists on disk."""
        return self.path is not None and (self.path.exists() or self.path.is_symlink())

    @property
    def display_name(self) -> str:
        """Return a short description used in log lines."""
        location = str(self.path) if self.path is not None else "<no workspace>"
        return f"{location} on {self.node}"

    def key(self) -> tuple[str, str | None]:
        """Return the identity used to de-duplicate resolved roots."""
        if self.path is None:
            return (self.node, None)
        return (self.node, str(self.path.resolve()))
