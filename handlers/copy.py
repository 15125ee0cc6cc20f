from __future__ import annotations

from core.errors import ArityError, ReferenceConflictError, UnsupportedCommandError
from core.options import OptionSet, flag, string, strings
from lang.references import InvalidReferenceError, parse_artifact
from lang.statements import Statement, StatementKind

from .registry import register_handler

_COPY_OPTIONS = OptionSet(
    "COPY",
    (
        string("--from", help="Not supported"),
        flag("--dir", help="Copy entire directories, not just the contents"),
        string("--chown", help="Apply a specific group and/or owner to the copied files and directories"),
        flag("--keep-ts", help="Keep created time file timestamps"),
        flag("--keep-own", help="Keep owner info"),
        flag("--if-exists", help="Do not fail if the artifact does not exist"),
        string("--platform", help="The platform to use"),
        strings("--build-arg", help="A build arg override passed on to a referenced target"),
    ),
)


@register_handler(StatementKind.COPY)
def handle_copy(ctx, statement: Statement) -> None:
    decoded = _COPY_OPTIONS.decode(statement.words)
    if len(decoded.args) < 2:
        raise ArityError(f"not enough COPY arguments {list(statement.words)}")
    if decoded["from"]:
        raise UnsupportedCommandError("COPY --from not implemented. Use COPY artifacts form instead")

    dest = ctx.expand(decoded.args[-1])
    build_args = ctx.expand_all(decoded.strings("build_arg"), keep_reference_escape=True)
    chown = ctx.expand(decoded["chown"])
    platform = ctx.parse_platform(decoded["platform"])

    artifacts: list[str] = []
    classical: list[str] = []
    for src in decoded.args[:-1]:
        try:
            artifacts.append(str(parse_artifact(ctx.expand(src, keep_reference_escape=True))))
        except InvalidReferenceError:
            classical.append(ctx.expand(src))
    if artifacts and classical:
        raise ReferenceConflictError(
            "combining artifacts and build context arguments in a single COPY command "
            f"is not allowed: {artifacts + classical}"
        )

    if artifacts:
        for src in artifacts:
            ctx.apply(
                f"copy artifact {src}",
                ctx.builder.copy_artifact,
                src,
                dest,
                platform,
                build_args,
                decoded["dir"],
                decoded["keep_ts"],
                decoded["keep_own"],
                chown,
                decoded["if_exists"],
            )
        return

    if build_args:
        raise ReferenceConflictError(f"build args not supported for non +artifact arguments case {list(statement.words)}")
    ctx.apply(
        "copy classical",
        ctx.builder.copy_classical,
        classical,
        dest,
        decoded["dir"],
        decoded["keep_ts"],
        decoded["keep_own"],
        chown,
    )
