"""External delete command templates.

A template such as ``rm -rf %s`` is split into an argument vector once.
The ``%s`` placeholder is then replaced by plain string substitution
inside the token that holds it, so a filename is never interpreted as
a regex replacement or re-parsed by a shell.
"""

import shlex
from dataclasses import dataclass, field

from wsclean.engine.errors import ConfigurationError

PLACEHOLDER = "%s"


@dataclass(frozen=True, slots=True)
class ExternalCommandSpec:
    """User-supplied command template for deleting a path.

    Attributes:
        template: Command line containing exactly one ``%s`` placeholder
            for the absolute path of the entry to delete.

    Raises:
        ConfigurationError: If the template is blank, cannot be tokenized,
            or does not contain exactly one placeholder.
    """

    template: str
    _tokens: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate and tokenize the template."""
        if not self.template.strip():
            msg = "External delete command cannot be empty"
            raise ConfigurationError(msg)

        count = self.template.count(PLACEHOLDER)
        if count != 1:
            msg = (
                f"External delete command must contain exactly one '{PLACEHOLDER}' "
                f"placeholder, found {count}: {self.template}"
            )
            raise ConfigurationError(msg)

        try:
            tokens = tuple(shlex.split(self.template))
        except ValueError as e:
            msg = f"Cannot parse external delete command '{self.template}': {e}"
            raise ConfigurationError(msg) from e

        if not tokens or tokens[0] == PLACEHOLDER:
            msg = f"External delete command must start with a program: {self.template}"
            raise ConfigurationError(msg)
        if sum(token.count(PLACEHOLDER) for token in tokens) != 1:
            msg = f"Placeholder '{PLACEHOLDER}' must not be split by quoting: {self.template}"
            raise ConfigurationError(msg)

        object.__setattr__(self, "_tokens", tokens)

    @property
    def program(self) -> str:
        """Return the program the command runs."""
        return self._tokens[0]

    def argv_for(self, path: str) -> list[str]:
        """Build the argument vector for deleting ``path``.

        Args:
            path: Absolute path, inserted literally.

        Returns:
            Argument vector with the placeholder substituted.
        """
        return [token.replace(PLACEHOLDER, path) for token in self._tokens]

    def render(self, path: str) -> str:
        """Render the command line for the build log.

        The path appears exactly as given, without shell quoting.
        """
        return " ".join(self.argv_for(path))
