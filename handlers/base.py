from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, Sequence

from lang.platforms import PlatformSpec
from lang.statements import Statement

if TYPE_CHECKING:
    from builder.base import GraphBuilder
    from core.runtime import InterpreterState


class HandlerContextProtocol(Protocol):
    statement: Statement

    @property
    def state(self) -> InterpreterState: ...

    @property
    def builder(self) -> GraphBuilder: ...

    @property
    def in_base_target(self) -> bool: ...

    def expand(self, word: str, *, keep_reference_escape: bool = False) -> str: ...

    def expand_all(self, words: Sequence[str], *, keep_reference_escape: bool = False) -> list[str]: ...

    def parse_platform(self, value: str) -> PlatformSpec | None: ...

    def apply(self, description: str, operation: Callable[..., Any], *args: Any) -> None: ...

    def reject_after_push(self) -> None: ...

    def enable_push_only(self) -> None: ...


class StatementHandler(Protocol):
    def __call__(self, ctx: HandlerContextProtocol, statement: Statement) -> None: ...
