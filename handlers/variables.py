from __future__ import annotations

from core.errors import ArityError
from lang.statements import Statement, StatementKind

from .registry import register_handler


# Keys are never expanded: only values go through substitution.


@register_handler(StatementKind.ENV)
def handle_env(ctx, statement: Statement) -> None:
    value = ctx.expand(statement.env_value)
    ctx.apply("env", ctx.builder.env, statement.env_key, value)


@register_handler(StatementKind.ARG)
def handle_arg(ctx, statement: Statement) -> None:
    value = ctx.expand(statement.env_value, keep_reference_escape=True)
    ctx.apply("arg", ctx.builder.arg, statement.env_key, value, ctx.in_base_target)


@register_handler(StatementKind.LABEL)
def handle_label(ctx, statement: Statement) -> None:
    keys, values = statement.label_keys, statement.label_values
    if not keys:
        raise ArityError(f"no labels provided in LABEL command: {statement.text}")
    if len(keys) != len(values):
        raise ArityError(f"label keys and values do not match: {statement.text}")

    labels = {ctx.expand(key): ctx.expand(value) for key, value in zip(keys, values)}
    ctx.apply("label", ctx.builder.label, labels)
