"""Exception protocol for golisttests extraction."""

from __future__ import annotations

from pathlib import Path


class NeverRaise(RuntimeError):
    """Sentinel exception that should be statically unreachable.

    Raising this exception signals that pattern definitions, grammar and
    interpreter disagree with each other. It is a programming-contract
    violation and is never absorbed as a per-file failure.
    """

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.reason = message
        self.env = dict(env or {})


class NeverThrown(NeverRaise):
    """Alias for NeverRaise used by the explicit never() marker."""


class MalformedPredicateProgram(NeverThrown):
    """A predicate step sequence the interpreter does not recognize."""


class ParseFailure(Exception):
    """A source file could not be read or parsed into a clean tree."""

    def __init__(self, path: Path | str | None, reason: str):
        location = str(path) if path is not None else "<memory>"
        super().__init__(f"{location}: {reason}")
        self.path = path
        self.reason = reason


class BudgetExceeded(RuntimeError):
    """Raised when a walk runs out of file quota or wall-clock time."""


class FileQuotaExhausted(BudgetExceeded):
    pass


class DeadlineExpired(BudgetExceeded):
    pass
