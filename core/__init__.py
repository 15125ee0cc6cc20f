from .errors import (
    ArityError,
    BuilderError,
    ObsoleteCommandError,
    OptionDecodeError,
    ReferenceConflictError,
    StatementSyntaxError,
    StateInvariantError,
    TargetfileError,
    TargetNotFoundError,
    UnsupportedCommandError,
)
from .interpreter import HandlerContext, TargetInterpreter, interpret
from .runtime import InterpreterState

__all__ = [
    "ArityError",
    "BuilderError",
    "HandlerContext",
    "InterpreterState",
    "ObsoleteCommandError",
    "OptionDecodeError",
    "ReferenceConflictError",
    "StatementSyntaxError",
    "StateInvariantError",
    "TargetInterpreter",
    "TargetNotFoundError",
    "TargetfileError",
    "UnsupportedCommandError",
    "interpret",
]
