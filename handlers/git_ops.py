from __future__ import annotations

from core.errors import ArityError
from core.options import OptionSet, flag, string
from lang.statements import Statement, StatementKind

from .registry import register_handler

_GIT_CLONE_OPTIONS = OptionSet(
    "GIT CLONE",
    (
        string("--branch", help="The git ref to use when cloning"),
        flag("--keep-ts", help="Keep created time file timestamps"),
    ),
)


@register_handler(StatementKind.GIT_CLONE)
def handle_git_clone(ctx, statement: Statement) -> None:
    decoded = _GIT_CLONE_OPTIONS.decode(statement.words)
    if len(decoded.args) != 2:
        raise ArityError(f"invalid number of arguments for GIT CLONE: {list(statement.words)}")

    url = ctx.expand(decoded.args[0])
    dest = ctx.expand(decoded.args[1])
    branch = ctx.expand(decoded["branch"])
    ctx.apply("git clone", ctx.builder.git_clone, url, branch, dest, decoded["keep_ts"])
