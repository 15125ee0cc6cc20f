from __future__ import annotations

import logging

from core.errors import ArityError
from core.options import OptionSet, flag, strings
from lang.statements import Statement, StatementKind

from .registry import register_handler

logger = logging.getLogger("targetfile")

_SAVE_ARTIFACT_OPTIONS = OptionSet(
    "SAVE ARTIFACT",
    (
        flag("--keep-ts", help="Keep created time file timestamps"),
        flag("--keep-own", help="Keep owner info"),
        flag("--if-exists", help="Do not fail if the artifact does not exist"),
    ),
)

_SAVE_IMAGE_OPTIONS = OptionSet(
    "SAVE IMAGE",
    (
        flag("--push", help="Push the image to the remote registry if the build succeeds in push mode"),
        flag("--cache-hint", help="Save the current target entirely as part of the remote cache"),
        flag("--insecure", help="Use unencrypted connection for the push"),
        strings("--cache-from", help="Declare additional cache import as a Docker tag"),
    ),
)

_DEFAULT_SAVE_TO = "./"


def _artifact_destinations(args: tuple[str, ...], words: list[str]) -> tuple[str, str]:
    """Return (save_to, save_as_local_to) for the accepted argument shapes.

    SRC | SRC DEST | SRC AS LOCAL LOCAL_DEST | SRC DEST AS LOCAL LOCAL_DEST
    """
    count = len(args)
    if count == 0:
        raise ArityError("no arguments provided to the SAVE ARTIFACT command")
    if count > 5:
        raise ArityError(f"too many arguments provided to the SAVE ARTIFACT command: {words}")
    if count >= 4:
        if " ".join(args[count - 3 : count - 1]) != "AS LOCAL":
            raise ArityError(f"invalid arguments for SAVE ARTIFACT command: {words}")
        save_to = args[1] if count == 5 else _DEFAULT_SAVE_TO
        return save_to, args[-1]
    if count == 3:
        raise ArityError(f"invalid arguments for SAVE ARTIFACT command: {words}")
    if count == 2:
        return args[1], ""
    return _DEFAULT_SAVE_TO, ""


@register_handler(StatementKind.SAVE_ARTIFACT)
def handle_save_artifact(ctx, statement: Statement) -> None:
    decoded = _SAVE_ARTIFACT_OPTIONS.decode(statement.words)
    save_to, save_as_local_to = _artifact_destinations(decoded.args, list(statement.words))

    save_from = ctx.expand(decoded.args[0])
    save_to = ctx.expand(save_to)
    save_as_local_to = ctx.expand(save_as_local_to)
    ctx.apply(
        "apply SAVE ARTIFACT",
        ctx.builder.save_artifact,
        save_from,
        save_to,
        save_as_local_to,
        decoded["keep_ts"],
        decoded["keep_own"],
        decoded["if_exists"],
    )


@register_handler(StatementKind.SAVE_IMAGE, push_guard=False)
def handle_save_image(ctx, statement: Statement) -> None:
    decoded = _SAVE_IMAGE_OPTIONS.decode(statement.words)
    cache_from = ctx.expand_all(decoded.strings("cache_from"))
    push = decoded["push"]
    if not push:
        ctx.reject_after_push()
    if push and not decoded.args:
        raise ArityError(f"invalid number of arguments for SAVE IMAGE --push: {list(statement.words)}")

    image_names = ctx.expand_all(decoded.args)
    if not image_names and not decoded["cache_hint"] and not cache_from:
        logger.warning(
            "Deprecation: using SAVE IMAGE with no arguments is no longer necessary and can be safely removed"
        )
        return

    ctx.apply(
        "save image",
        ctx.builder.save_image,
        image_names,
        push,
        decoded["insecure"],
        decoded["cache_hint"],
        cache_from,
    )
    if push:
        ctx.enable_push_only()
