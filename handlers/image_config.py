from __future__ import annotations

from datetime import timedelta

from core.errors import ArityError, UnsupportedCommandError
from core.options import OptionSet, duration, integer
from lang.statements import Statement, StatementKind

from .registry import register_handler

_HEALTHCHECK_OPTIONS = OptionSet(
    "HEALTHCHECK",
    (
        duration("--interval", default=timedelta(seconds=30), help="The interval between healthchecks"),
        duration(
            "--timeout",
            default=timedelta(seconds=30),
            help="The timeout before the command is considered failed",
        ),
        duration(
            "--start-period",
            default=timedelta(0),
            help="An initialization time period in which failures are not counted towards the maximum number of retries",
        ),
        integer("--retries", default=3, help="The number of retries before a container is considered unhealthy"),
    ),
)


def _single_word(statement: Statement) -> str:
    if len(statement.words) != 1:
        raise ArityError(f"invalid number of arguments for {statement.kind.keyword}: {list(statement.words)}")
    return statement.words[0]


def _command_words(ctx, statement: Statement) -> tuple[list[str], bool]:
    with_shell = not statement.exec_mode
    if with_shell:
        return list(statement.words), True
    return ctx.expand_all(statement.words), False


@register_handler(StatementKind.WORKDIR)
def handle_workdir(ctx, statement: Statement) -> None:
    path = ctx.expand(_single_word(statement))
    ctx.apply("workdir", ctx.builder.workdir, path)


@register_handler(StatementKind.USER)
def handle_user(ctx, statement: Statement) -> None:
    user = ctx.expand(_single_word(statement))
    ctx.apply("user", ctx.builder.user, user)


@register_handler(StatementKind.CMD)
def handle_cmd(ctx, statement: Statement) -> None:
    args, with_shell = _command_words(ctx, statement)
    ctx.apply("cmd", ctx.builder.cmd, args, with_shell)


@register_handler(StatementKind.ENTRYPOINT)
def handle_entrypoint(ctx, statement: Statement) -> None:
    args, with_shell = _command_words(ctx, statement)
    ctx.apply("entrypoint", ctx.builder.entrypoint, args, with_shell)


@register_handler(StatementKind.EXPOSE)
def handle_expose(ctx, statement: Statement) -> None:
    if not statement.words:
        raise ArityError("no arguments provided to the EXPOSE command")
    ctx.apply("expose", ctx.builder.expose, ctx.expand_all(statement.words))


@register_handler(StatementKind.VOLUME)
def handle_volume(ctx, statement: Statement) -> None:
    if not statement.words:
        raise ArityError("no arguments provided to the VOLUME command")
    ctx.apply("volume", ctx.builder.volume, ctx.expand_all(statement.words))


@register_handler(StatementKind.HEALTHCHECK)
def handle_healthcheck(ctx, statement: Statement) -> None:
    decoded = _HEALTHCHECK_OPTIONS.decode(statement.words)
    words = list(statement.words)
    if not decoded.args:
        raise ArityError(f"invalid number of arguments for HEALTHCHECK: {words}")

    mode, *rest = decoded.args
    is_none = False
    cmd_args: list[str] = []
    if mode == "NONE":
        if rest:
            raise ArityError(f"invalid arguments for HEALTHCHECK: {words}")
        is_none = True
    elif mode == "CMD":
        if not rest:
            raise ArityError(f"invalid number of arguments for HEALTHCHECK CMD: {words}")
        cmd_args = ctx.expand_all(rest)
    elif mode.startswith("["):
        raise UnsupportedCommandError(f"exec form not yet supported for HEALTHCHECK CMD: {words}")
    else:
        raise ArityError(f"invalid arguments for HEALTHCHECK: {words}")

    ctx.apply(
        "healthcheck",
        ctx.builder.healthcheck,
        is_none,
        cmd_args,
        decoded["interval"],
        decoded["timeout"],
        decoded["start_period"],
        decoded["retries"],
    )
