from __future__ import annotations

import dataclasses

from core.errors import ArityError, ReferenceConflictError
from core.options import OptionSet, flag, strings
from lang.statements import Statement, StatementKind

from .registry import register_handler

_RUN_OPTIONS = OptionSet(
    "RUN",
    (
        flag("--push", help="Execute this command only if the build succeeds and the build runs in push mode"),
        flag("--privileged", help="Enable privileged mode"),
        flag("--entrypoint", help="Include the entrypoint of the image when running the command"),
        flag("--with-docker", help="Deprecated"),
        flag("--ssh", help="Make available the SSH agent of the host"),
        strings("--secret", help="Make available a secret"),
        strings("--mount", help="Mount a file or directory"),
    ),
)


@register_handler(StatementKind.RUN, push_guard=False)
def handle_run(ctx, statement: Statement) -> None:
    if not statement.words:
        raise ArityError("not enough arguments for RUN")

    decoded = _RUN_OPTIONS.decode(statement.words)
    push = decoded["push"]
    with_docker = decoded["with_docker"]
    privileged = decoded["privileged"] or with_docker
    with_shell = not statement.exec_mode
    if not push:
        ctx.reject_after_push()

    secrets = ctx.expand_all(decoded.strings("secret"), keep_reference_escape=True)
    mounts = ctx.expand_all(decoded.strings("mount"))
    # In shell form the shell expands the command itself.
    args = list(decoded.args) if with_shell else ctx.expand_all(decoded.args)

    block = ctx.state.block
    if not block.is_open:
        ctx.apply(
            "run",
            ctx.builder.run,
            args,
            mounts,
            secrets,
            privileged,
            decoded["entrypoint"],
            with_docker,
            with_shell,
            push,
            decoded["ssh"],
        )
        if push:
            ctx.enable_push_only()
        return

    if push:
        raise ReferenceConflictError("RUN --push not allowed in WITH DOCKER")
    options = dataclasses.replace(
        block.begin_action(),
        mounts=tuple(mounts),
        secrets=tuple(secrets),
        with_shell=with_shell,
        with_entrypoint=decoded["entrypoint"],
    )
    ctx.apply("with docker run", ctx.builder.with_docker_run, args, options)
