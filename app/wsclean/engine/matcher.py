"""Include/exclude pattern matching for workspace cleanup.

Patterns are glob-style and always matched against the path relative
to the workspace root, so results do not depend on where the
workspace lives. ``**`` crosses directory separators, ``*`` and ``?``
do not.
"""

import logging
import re
from pathlib import PurePath

from wsclean.engine.errors import ConfigurationError
from wsclean.models.rule import Rule, RuleSet

logger = logging.getLogger(__name__)


def _normalize(path: str) -> str:
    """Normalize a pattern or subject path to forward-slash relative form."""
    normalized = path.replace("\\", "/")
    while normalized.startswith("./"):
        normalized = normalized[2:]
    return normalized.lstrip("/")


def _translate_class(pattern: str, start: int) -> tuple[str, int] | None:
    """Translate a ``[...]`` character class starting at ``start``.

    Returns:
        Tuple of (regex fragment, index after the class), or None if the
        bracket is not closed and should be taken literally.
    """
    i = start + 1
    if i < len(pattern) and pattern[i] == "!":
        i += 1
    if i < len(pattern) and pattern[i] == "]":
        i += 1
    end = pattern.find("]", i)
    if end == -1:
        return None

    body = pattern[start + 1 : end].replace("\\", "\\\\")
    if body.startswith("!"):
        body = "^" + body[1:]
    elif body.startswith("^"):
        body = "\\" + body
    return f"[{body}]", end + 1


def glob_to_regex(pattern: str) -> str:
    """Translate a glob pattern into an anchored-at-use regex string.

    A trailing ``/`` is shorthand for ``/**``, and a trailing ``/**``
    also matches the directory itself.

    Args:
        pattern: Glob pattern using ``**``, ``*``, ``?`` and ``[...]``.

    Returns:
        Regular expression source suitable for ``re.fullmatch``.
    """
    p = _normalize(pattern)
    if p.endswith("/"):
        p += "**"
    if p.endswith("/**"):
        return glob_to_regex(p[:-3]) + "(?:/.*)?"

    out: list[str] = []
    i, n = 0, len(p)
    while i < n:
        c = p[i]
        if c == "*":
            j = i
            while j < n and p[j] == "*":
                j += 1
            if j - i == 1:
                out.append("[^/]*")
                i = j
            elif j < n and p[j] == "/":
                # "**/" matches zero or more leading directories
                out.append("(?:.*/)?")
                i = j + 1
            else:
                out.append(".*")
                i = j
        elif c == "?":
            out.append("[^/]")
            i += 1
        elif c == "[":
            translated = _translate_class(p, i)
            if translated is None:
                out.append(re.escape(c))
                i += 1
            else:
                fragment, i = translated
                out.append(fragment)
        else:
            out.append(re.escape(c))
            i += 1
    return "".join(out)


def compile_rule(rule: Rule) -> re.Pattern[str]:
    """Compile a rule's pattern.

    Raises:
        ConfigurationError: If the pattern does not compile.
    """
    flags = 0 if rule.case_sensitive else re.IGNORECASE
    try:
        return re.compile(glob_to_regex(rule.pattern), flags)
    except re.error as e:
        msg = f"Invalid {rule.rule_type.value} pattern '{rule.pattern}': {e}"
        raise ConfigurationError(msg) from e


class PatternMatcher:
    """Decides which workspace entries a rule set selects for deletion.

    Rules are evaluated in order and the last matching rule wins: a
    path is selected iff that rule is an inclusion. Unmatched paths are
    kept, except that an empty rule set in wipeout mode selects all.

    Args:
        rule_set: Ordered include/exclude rules.
        wipeout: Whole-wipeout mode flag.

    Raises:
        ConfigurationError: If any pattern does not compile.
    """

    def __init__(self, rule_set: RuleSet, *, wipeout: bool = False) -> None:
        self._rule_set = rule_set
        self._wipeout = wipeout
        self._compiled = [(rule, compile_rule(rule)) for rule in rule_set]
        logger.debug("Compiled %d cleanup rules", len(self._compiled))

    @property
    def selects_nothing(self) -> bool:
        """Check if no path can ever be selected."""
        if self._rule_set.is_empty:
            return not self._wipeout
        return not self._rule_set.includes

    def matches(self, relative_path: str | PurePath) -> bool:
        """Check if a root-relative path is selected for deletion.

        Args:
            relative_path: Path relative to the workspace root.

        Returns:
            True if the path should be deleted.
        """
        if self._rule_set.is_empty:
            return self._wipeout

        subject = _normalize(str(relative_path))
        selected = False
        for rule, regex in self._compiled:
            if regex.fullmatch(subject):
                selected = rule.is_include
        return selected


def matches(relative_path: str | PurePath, rule_set: RuleSet, *, wipeout: bool = False) -> bool:
    """Check a single path against a rule set.

    Convenience wrapper that compiles the rule set on every call; use
    PatternMatcher directly when matching many paths.
    """
    return PatternMatcher(rule_set, wipeout=wipeout).matches(relative_path)
