"""Statements that are recognized but always fail."""

from __future__ import annotations

from core.errors import ObsoleteCommandError, UnsupportedCommandError
from lang.statements import Statement, StatementKind

from .registry import register_handler


@register_handler(StatementKind.ADD, StatementKind.STOPSIGNAL, StatementKind.SHELL, push_guard=False)
def handle_not_yet_supported(ctx, statement: Statement) -> None:
    raise UnsupportedCommandError(f"command {statement.kind.keyword} not yet supported")


@register_handler(StatementKind.ONBUILD, push_guard=False)
def handle_onbuild(ctx, statement: Statement) -> None:
    raise UnsupportedCommandError("command ONBUILD not supported")


@register_handler(StatementKind.DOCKER_LOAD, push_guard=False)
def handle_docker_load(ctx, statement: Statement) -> None:
    raise ObsoleteCommandError("DOCKER LOAD", "WITH DOCKER --load")


@register_handler(StatementKind.DOCKER_PULL, push_guard=False)
def handle_docker_pull(ctx, statement: Statement) -> None:
    raise ObsoleteCommandError("DOCKER PULL", "WITH DOCKER --pull")


@register_handler(StatementKind.GENERIC, push_guard=False)
def handle_generic(ctx, statement: Statement) -> None:
    raise UnsupportedCommandError(f"invalid command {statement.text}")
