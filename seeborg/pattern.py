# SeeBorg - pattern.py
# Copyright (C) 2026 The SeeBorg Contributors

"""Regular-expression patterns used by the behavior rules.

Patterns come from configuration text and are compiled once, either eagerly
while the configuration is loaded or lazily on first use. Compilation errors
are raised as `CompilationError` so callers can decide how to treat a bad
pattern instead of silently skipping it.
"""

import re
from dataclasses import dataclass, field


class PatternError(Exception):
    """Base class for pattern failures."""


class CompilationError(PatternError):
    """The pattern text is not a valid regular expression."""

    def __init__(self, original: str, description: str):
        self.original = original
        self.description = description
        super().__init__(f"Regex {original!r} failed to compile: {description}")


@dataclass
class Pattern:
    """A configured regex, compiled on demand and memoized."""

    original: str
    compiled: re.Pattern | None = field(default=None, repr=False, compare=False)

    def compile(self) -> re.Pattern:
        if self.compiled is None:
            try:
                self.compiled = re.compile(self.original)
            except re.error as e:
                raise CompilationError(self.original, str(e)) from e
        return self.compiled

    def matches(self, text: str) -> bool:
        """True when the whole of `text` matches; use `.*` to match a substring."""
        return self.compile().fullmatch(text) is not None


def compile_all(patterns: list[Pattern]) -> None:
    """Compile every pattern in-place, raising on the first bad one."""
    for p in patterns:
        p.compile()


def matches_any(text: str, patterns: list[Pattern]) -> Pattern | None:
    """Return the first pattern (in list order) that matches all of `text`.

    Evaluation stops at the first match. A pattern that cannot be compiled
    raises CompilationError.
    """
    for p in patterns:
        if p.matches(text):
            return p
    return None
