from __future__ import annotations

from builder.directives import ImageLoadDirective, ImagePullDirective, WithDockerOptions, parse_load
from core.errors import ArityError
from core.options import OptionSet, string, strings
from lang.statements import Statement, StatementKind

from .registry import register_handler

_WITH_DOCKER_OPTIONS = OptionSet(
    "WITH DOCKER",
    (
        strings("--compose", help="A compose file used to bring up services from"),
        strings("--service", help="A compose service to bring up"),
        strings("--load", help="An image produced by a target which is loaded as a Docker image"),
        string("--platform", help="The platform to use"),
        strings("--build-arg", help="A build arg override passed on to a referenced target"),
        strings("--pull", help="An image which is pulled and made available in the docker cache"),
    ),
)


@register_handler(StatementKind.WITH_DOCKER)
def handle_with_docker(ctx, statement: Statement) -> None:
    block = ctx.state.block
    block.check_can_open()

    decoded = _WITH_DOCKER_OPTIONS.decode(statement.words)
    if decoded.args:
        raise ArityError(f"invalid WITH DOCKER arguments {list(decoded.args)}")

    platform = ctx.parse_platform(decoded["platform"])
    compose_files = ctx.expand_all(decoded.strings("compose"))
    compose_services = ctx.expand_all(decoded.strings("service"))
    loads = ctx.expand_all(decoded.strings("load"), keep_reference_escape=True)
    build_args = tuple(ctx.expand_all(decoded.strings("build_arg"), keep_reference_escape=True))
    pulls = ctx.expand_all(decoded.strings("pull"))

    load_directives = []
    for value in loads:
        image_name, target = parse_load(value)
        load_directives.append(
            ImageLoadDirective(target=target, image_name=image_name, platform=platform, build_args=build_args)
        )

    block.open(
        WithDockerOptions(
            compose_files=tuple(compose_files),
            compose_services=tuple(compose_services),
            loads=tuple(load_directives),
            pulls=tuple(ImagePullDirective(image_name=name, platform=platform) for name in pulls),
        )
    )


@register_handler(StatementKind.END, push_guard=False)
def handle_end(ctx, statement: Statement) -> None:
    if statement.words:
        raise ArityError(f"END does not take any arguments: {statement.text}")
    ctx.state.block.close()
