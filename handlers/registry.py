from __future__ import annotations

from dataclasses import dataclass

from lang.statements import Statement, StatementKind

from .base import HandlerContextProtocol, StatementHandler


@dataclass(frozen=True, slots=True)
class HandlerEntry:
    kind: StatementKind
    handler: StatementHandler
    # Reject the statement up front while push-only mode is active.
    push_guard: bool = True


class HandlerRegistry:
    def __init__(self) -> None:
        self._handlers: dict[StatementKind, HandlerEntry] = {}

    def register(self, kind: StatementKind, handler: StatementHandler, *, push_guard: bool = True) -> None:
        if kind in self._handlers:
            raise ValueError(f"Handler already registered for {kind.keyword}")
        self._handlers[kind] = HandlerEntry(kind=kind, handler=handler, push_guard=push_guard)

    def get(self, kind: StatementKind) -> HandlerEntry:
        if kind not in self._handlers:
            raise KeyError(f"No handler for statement: {kind.keyword}")
        return self._handlers[kind]

    def kinds(self) -> list[StatementKind]:
        return sorted(self._handlers, key=lambda kind: kind.keyword)

    def missing(self) -> list[StatementKind]:
        return [kind for kind in StatementKind if kind not in self._handlers]


registry = HandlerRegistry()


def register_handler(*kinds: StatementKind, push_guard: bool = True):
    def wrapper(func: StatementHandler) -> StatementHandler:
        for kind in kinds:
            registry.register(kind, func, push_guard=push_guard)
        return func

    return wrapper


def run_handler(ctx: HandlerContextProtocol, statement: Statement) -> None:
    entry = registry.get(statement.kind)
    if entry.push_guard:
        ctx.reject_after_push()
    entry.handler(ctx, statement)
