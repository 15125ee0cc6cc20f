from __future__ import annotations

from core.errors import ArityError, UnsupportedCommandError
from core.options import OptionSet, string, strings
from lang.references import InvalidReferenceError, parse_artifact
from lang.statements import Statement, StatementKind

from .registry import register_handler

_FROM_OPTIONS = OptionSet(
    "FROM",
    (
        strings("--build-arg", help="A build arg override passed on to a referenced target"),
        string("--platform", help="The platform to use"),
    ),
)

_FROM_DOCKERFILE_OPTIONS = OptionSet(
    "FROM DOCKERFILE",
    (
        strings("--build-arg", help="A build arg override passed on to a referenced target and to the Dockerfile build"),
        string("--platform", help="The platform to use"),
        string("--target", help="The Dockerfile target to inherit from"),
        string("-f", help="Not supported"),
    ),
)


@register_handler(StatementKind.FROM)
def handle_from(ctx, statement: Statement) -> None:
    decoded = _FROM_OPTIONS.decode(statement.words)
    if len(decoded.args) != 1:
        if len(decoded.args) == 3 and decoded.args[1] == "AS":
            raise UnsupportedCommandError("AS not supported, use targets instead")
        raise ArityError(f"invalid number of arguments for FROM: {list(statement.words)}")

    image_name = ctx.expand(decoded.args[0], keep_reference_escape=True)
    platform = ctx.parse_platform(decoded["platform"])
    build_args = ctx.expand_all(decoded.strings("build_arg"), keep_reference_escape=True)
    ctx.apply(f"apply FROM {image_name}", ctx.builder.from_image, image_name, platform, build_args)


@register_handler(StatementKind.FROM_DOCKERFILE)
def handle_from_dockerfile(ctx, statement: Statement) -> None:
    decoded = _FROM_DOCKERFILE_OPTIONS.decode(statement.words)
    if len(decoded.args) != 1:
        raise ArityError(f"invalid number of arguments for FROM DOCKERFILE: {list(statement.words)}")
    if decoded["f"]:
        raise UnsupportedCommandError("FROM DOCKERFILE -f not supported, keep the Dockerfile in the build context")

    raw = decoded.args[0]
    try:
        path = str(parse_artifact(ctx.expand(raw, keep_reference_escape=True)))
    except InvalidReferenceError:
        # Not an artifact: a build context path.
        path = ctx.expand(raw)

    build_args = ctx.expand_all(decoded.strings("build_arg"), keep_reference_escape=True)
    platform = ctx.parse_platform(decoded["platform"])
    df_target = ctx.expand(decoded["target"])
    ctx.apply("from dockerfile", ctx.builder.from_dockerfile, path, "", df_target, platform, build_args)
