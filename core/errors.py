"""Errors raised while interpreting a target file.

Every error a statement handler can report derives from ``TargetfileError``;
the interpreter latches the first one and ignores everything after it.
"""

from __future__ import annotations


class TargetfileError(Exception):
    """Base exception for target-file interpretation errors."""


class OptionDecodeError(TargetfileError):
    """An unknown option, or an option with a malformed value."""


class ArityError(TargetfileError):
    """Wrong number or shape of positional arguments."""


class ReferenceConflictError(TargetfileError):
    """Artifact and plain sources mixed, or a disallowed option combination."""


class StateInvariantError(TargetfileError):
    """A cross-statement rule was broken (blocks, push-only mode, target names)."""


class UnsupportedCommandError(TargetfileError):
    """A recognised command or form that is intentionally not implemented."""


class ObsoleteCommandError(TargetfileError):
    def __init__(self, command: str, replacement: str) -> None:
        super().__init__(f"{command} is obsolete. Please use {replacement}")
        self.command = command
        self.replacement = replacement


class TargetNotFoundError(TargetfileError):
    def __init__(self, target: str) -> None:
        super().__init__(f"target {target} not defined")
        self.target = target


class StatementSyntaxError(TargetfileError):
    """Malformed target-file text or an invalid variable name."""


class BuilderError(TargetfileError):
    """The graph builder rejected a statement; the cause is chained."""
