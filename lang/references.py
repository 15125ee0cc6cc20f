from __future__ import annotations

import re
from dataclasses import dataclass

from .escaping import REFERENCE_MARKER

_TARGET_NAME = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9._-]*$")


class InvalidReferenceError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class TargetRef:
    """A reference to a target: ``+name``, ``./dir+name`` or ``repo[:tag]+name``."""

    name: str
    local_path: str = ""
    import_ref: str = ""
    tag: str = ""

    @property
    def is_local_internal(self) -> bool:
        return not self.local_path and not self.import_ref

    @property
    def is_remote(self) -> bool:
        return bool(self.import_ref)

    def __str__(self) -> str:
        if self.import_ref:
            prefix = f"{self.import_ref}:{self.tag}" if self.tag else self.import_ref
        else:
            prefix = self.local_path
        return f"{prefix}{REFERENCE_MARKER}{self.name}"


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    target: TargetRef
    path: str

    def __str__(self) -> str:
        return f"{self.target}/{self.path}"


def _find_marker(ref: str) -> int:
    start = 0
    while True:
        idx = ref.find(REFERENCE_MARKER, start)
        if idx == -1:
            return -1
        if idx > 0 and ref[idx - 1] == "\\":
            start = idx + 1
            continue
        return idx


def _split_prefix(prefix: str) -> tuple[str, str, str]:
    """Return (local_path, import_ref, tag) for the part before the marker."""
    if prefix == "" or prefix.startswith((".", "/")):
        return prefix, "", ""
    head, sep, tail = prefix.rpartition(":")
    if sep and "/" not in tail:
        return "", head, tail
    return "", prefix, ""


def parse_target(ref: str) -> TargetRef:
    idx = _find_marker(ref)
    if idx == -1:
        raise InvalidReferenceError(f"invalid target reference {ref!r}: missing {REFERENCE_MARKER!r}")
    name = ref[idx + 1 :]
    if not _TARGET_NAME.match(name):
        raise InvalidReferenceError(f"invalid target reference {ref!r}: bad target name {name!r}")
    prefix = ref[:idx]
    if prefix.endswith(":"):
        raise InvalidReferenceError(f"invalid target reference {ref!r}: empty tag")
    local_path, import_ref, tag = _split_prefix(prefix)
    return TargetRef(name=name, local_path=local_path, import_ref=import_ref, tag=tag)


def parse_artifact(ref: str) -> ArtifactRef:
    """Parse ``<target>/<path>``, e.g. ``+build/bin`` or ``./lib+build/out/app``."""
    idx = _find_marker(ref)
    if idx == -1:
        raise InvalidReferenceError(f"invalid artifact reference {ref!r}: missing {REFERENCE_MARKER!r}")
    rest = ref[idx + 1 :]
    slash = rest.find("/")
    if slash <= 0:
        raise InvalidReferenceError(f"invalid artifact reference {ref!r}: missing artifact path")
    path = rest[slash + 1 :]
    if not path:
        raise InvalidReferenceError(f"invalid artifact reference {ref!r}: empty artifact path")
    target = parse_target(ref[: idx + 1 + slash])
    return ArtifactRef(target=target, path=path)
