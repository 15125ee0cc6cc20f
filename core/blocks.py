from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from builder.directives import WithDockerOptions

from .errors import StateInvariantError


class BlockPhase(Enum):
    IDLE = "idle"
    AWAITING_ACTION = "awaiting-action"
    ACTION_DONE = "action-done"


@dataclass(slots=True)
class BlockTracker:
    """Pairs WITH DOCKER with its END and its single inner RUN."""

    options: WithDockerOptions | None = None
    action_ran: bool = False

    @property
    def phase(self) -> BlockPhase:
        if self.options is None:
            return BlockPhase.IDLE
        if self.action_ran:
            return BlockPhase.ACTION_DONE
        return BlockPhase.AWAITING_ACTION

    @property
    def is_open(self) -> bool:
        return self.options is not None

    def check_can_open(self) -> None:
        if self.is_open:
            raise StateInvariantError("cannot use WITH DOCKER within WITH DOCKER")

    def open(self, options: WithDockerOptions) -> None:
        self.check_can_open()
        self.options = options
        self.action_ran = False

    def begin_action(self) -> WithDockerOptions:
        if self.options is None:
            raise StateInvariantError("no WITH DOCKER clause is open")
        if self.action_ran:
            raise StateInvariantError("only one RUN command allowed in WITH DOCKER")
        self.action_ran = True
        return self.options

    def close(self) -> None:
        match self.phase:
            case BlockPhase.IDLE:
                raise StateInvariantError("END can only be used to end a WITH DOCKER clause")
            case BlockPhase.AWAITING_ACTION:
                raise StateInvariantError("no RUN command found in WITH DOCKER")
        self.options = None
        self.action_ran = False

    def ensure_closed(self) -> None:
        if self.is_open:
            raise StateInvariantError("no matching END found for WITH DOCKER")
