from __future__ import annotations

from dataclasses import dataclass

from lang.platforms import PlatformSpec


@dataclass(frozen=True, slots=True)
class ImagePullDirective:
    image_name: str
    platform: PlatformSpec | None = None


@dataclass(frozen=True, slots=True)
class ImageLoadDirective:
    """Load the image saved by ``target``; an empty image name means infer it."""

    target: str
    image_name: str = ""
    platform: PlatformSpec | None = None
    build_args: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class WithDockerOptions:
    compose_files: tuple[str, ...] = ()
    compose_services: tuple[str, ...] = ()
    loads: tuple[ImageLoadDirective, ...] = ()
    pulls: tuple[ImagePullDirective, ...] = ()
    mounts: tuple[str, ...] = ()
    secrets: tuple[str, ...] = ()
    with_shell: bool = True
    with_entrypoint: bool = False


def parse_load(value: str) -> tuple[str, str]:
    """Split a ``--load`` value into (image name, target reference).

    ``image=+target`` names the image explicitly; a bare ``+target`` leaves
    the image name empty so it is inferred from that target's SAVE IMAGE.
    """
    image_name, sep, target = value.partition("=")
    if not sep:
        return "", value
    return image_name, target
