from __future__ import annotations

from dataclasses import dataclass, field

from lang.statements import Statement, StatementKind

from .blocks import BlockTracker
from .errors import TargetfileError

BASE_TARGET = "base"
RESERVED_TARGETS = frozenset({BASE_TARGET, "secrets"})


@dataclass(slots=True)
class StatementScratch:
    words: list[str] = field(default_factory=list)
    exec_mode: bool = False
    env_arg_key: str = ""
    env_arg_value: str = ""
    label_keys: list[str] = field(default_factory=list)
    label_values: list[str] = field(default_factory=list)

    def freeze(self, kind: StatementKind, text: str) -> Statement:
        return Statement(
            kind=kind,
            text=text,
            words=tuple(self.words),
            exec_mode=self.exec_mode,
            env_key=self.env_arg_key,
            env_value=self.env_arg_value,
            label_keys=tuple(self.label_keys),
            label_values=tuple(self.label_values),
        )


@dataclass(slots=True)
class InterpreterState:
    """Everything one walk of one target file tracks between statements."""

    execute_target: str
    current_target: str = BASE_TARGET
    target_found: bool = field(init=False, default=False)
    error: TargetfileError | None = None
    push_only: bool = False
    block: BlockTracker = field(default_factory=BlockTracker)
    statement: StatementScratch | None = None

    def __post_init__(self) -> None:
        self.target_found = self.execute_target == BASE_TARGET

    @property
    def skipping(self) -> bool:
        return self.error is not None or self.current_target != self.execute_target

    def latch(self, error: TargetfileError) -> None:
        if self.error is None:
            self.error = error

    def begin_statement(self) -> StatementScratch:
        self.statement = StatementScratch()
        return self.statement

    def scratch(self) -> StatementScratch:
        if self.statement is None:
            return self.begin_statement()
        return self.statement

    def take_statement(self, kind: StatementKind, text: str) -> Statement:
        scratch = self.statement or StatementScratch()
        self.statement = None
        return scratch.freeze(kind, text)
