from __future__ import annotations

from core.errors import ArityError
from core.options import OptionSet, strings
from lang.statements import Statement, StatementKind

from .registry import register_handler

_BUILD_OPTIONS = OptionSet(
    "BUILD",
    (
        strings("--platform", help="The platform to build"),
        strings("--build-arg", help="A build arg override passed on to a referenced target"),
    ),
)


@register_handler(StatementKind.BUILD)
def handle_build(ctx, statement: Statement) -> None:
    decoded = _BUILD_OPTIONS.decode(statement.words)
    if len(decoded.args) != 1:
        raise ArityError(f"invalid number of arguments for BUILD: {list(statement.words)}")

    target_ref = ctx.expand(decoded.args[0], keep_reference_escape=True)
    platforms = [ctx.parse_platform(value) for value in decoded.strings("platform")]
    build_args = ctx.expand_all(decoded.strings("build_arg"), keep_reference_escape=True)

    # No --platform still builds once, for the default platform.
    for platform in platforms or [None]:
        ctx.apply(f"apply BUILD {target_ref}", ctx.builder.build, target_ref, platform, build_args)
