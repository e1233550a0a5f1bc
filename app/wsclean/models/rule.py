"""Cleanup rule models.

A rule set is an ordered sequence of include/exclude glob patterns.
Later rules take precedence over earlier ones for overlapping paths.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum


class RuleType(str, Enum):
    """Whether a rule selects or protects matching paths.

    Attributes:
        INCLUDE: Matching paths are selected for deletion.
        EXCLUDE: Matching paths are kept.
    """

    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True, slots=True)
class Rule:
    """A single glob-style cleanup pattern.

    Attributes:
        pattern: Glob pattern relative to the workspace root. Supports
            ``**`` (any number of directories), ``*``, ``?`` and ``[...]``.
        rule_type: Include or exclude.
        case_sensitive: Whether matching respects case.
    """

    pattern: str
    rule_type: RuleType = RuleType.INCLUDE
    case_sensitive: bool = True

    def __post_init__(self) -> None:
        """Validate rule data after initialization."""
        if not self.pattern:
            msg = "Pattern cannot be empty"
            raise ValueError(msg)

    @property
    def is_include(self) -> bool:
        """Check if this is an inclusion rule."""
        return self.rule_type == RuleType.INCLUDE

    @classmethod
    def include(cls, pattern: str, *, case_sensitive: bool = True) -> Rule:
        """Create an inclusion rule."""
        return cls(pattern, RuleType.INCLUDE, case_sensitive)

    @classmethod
    def exclude(cls, pattern: str, *, case_sensitive: bool = True) -> Rule:
        """Create an exclusion rule."""
        return cls(pattern, RuleType.EXCLUDE, case_sensitive)


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Ordered, immutable sequence of cleanup rules.

    An empty rule set selects nothing unless the cleanup runs in
    whole-wipeout mode, in which case everything is removed.

    Attributes:
        rules: Rules in precedence order (last match wins).
    """

    rules: tuple[Rule, ...] = ()

    @classmethod
    def of(cls, rules: Iterable[Rule]) -> RuleSet:
        """Build a rule set from any iterable of rules."""
        return cls(tuple(rules))

    @property
    def is_empty(self) -> bool:
        """Check if the rule set contains no rules."""
        return not self.rules

    @property
    def includes(self) -> tuple[Rule, ...]:
        """Return the inclusion rules in order."""
        return tuple(r for r in self.rules if r.is_include)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules)

    def __len__(self) -> int:
        return len(self.rules)
