from __future__ import annotations

import re
from dataclasses import dataclass

_COMPONENT = re.compile(r"^[A-Za-z0-9_-]+$")

_KNOWN_OS = {
    "aix",
    "android",
    "darwin",
    "dragonfly",
    "freebsd",
    "hurd",
    "illumos",
    "ios",
    "js",
    "linux",
    "nacl",
    "netbsd",
    "openbsd",
    "plan9",
    "solaris",
    "windows",
    "zos",
}

_KNOWN_ARCH = {
    "386",
    "amd64",
    "amd64p32",
    "arm",
    "armbe",
    "arm64",
    "arm64be",
    "ppc64",
    "ppc64le",
    "loong64",
    "mips",
    "mipsle",
    "mips64",
    "mips64le",
    "mips64p32",
    "mips64p32le",
    "ppc",
    "riscv",
    "riscv64",
    "s390",
    "s390x",
    "sparc",
    "sparc64",
    "wasm",
}

_DEFAULT_OS = "linux"
_DEFAULT_ARCH = "amd64"


class InvalidPlatformError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class PlatformSpec:
    os: str
    architecture: str
    variant: str = ""

    def __str__(self) -> str:
        parts = [self.os, self.architecture]
        if self.variant:
            parts.append(self.variant)
        return "/".join(parts)


def _normalize_os(value: str) -> str:
    lowered = value.lower()
    if lowered == "macos":
        return "darwin"
    return lowered


def _normalize_arch(arch: str, variant: str) -> tuple[str, str]:
    arch = arch.lower()
    variant = variant.lower()
    match arch:
        case "i386":
            return "386", ""
        case "x86_64" | "x86-64" | "amd64":
            if variant == "v1":
                variant = ""
            return "amd64", variant
        case "aarch64" | "arm64":
            if variant in {"8", "v8"}:
                variant = ""
            return "arm64", variant
        case "armhf":
            return "arm", "v7"
        case "armel":
            return "arm", "v6"
        case "arm":
            if variant in {"", "7"}:
                variant = "v7"
            elif variant in {"5", "6", "8"}:
                variant = "v" + variant
            return "arm", variant
    return arch, variant


def parse_platform(specifier: str) -> PlatformSpec:
    """Parse ``os[/arch[/variant]]`` or a bare architecture into a PlatformSpec.

    A single component is tried as an operating system first and then as an
    architecture (implying linux). Names are normalized, so ``x86_64`` and
    ``amd64`` yield the same result.
    """
    if "*" in specifier:
        raise InvalidPlatformError(f"{specifier!r}: wildcards not yet supported")

    parts = specifier.split("/")
    for part in parts:
        if not _COMPONENT.match(part):
            raise InvalidPlatformError(f"{specifier!r}: invalid platform component {part!r}")

    if len(parts) == 1:
        candidate = _normalize_os(parts[0])
        if candidate in _KNOWN_OS:
            return PlatformSpec(os=candidate, architecture=_DEFAULT_ARCH)
        arch, variant = _normalize_arch(parts[0], "")
        if arch in _KNOWN_ARCH:
            return PlatformSpec(os=_DEFAULT_OS, architecture=arch, variant=variant)
        raise InvalidPlatformError(f"{specifier!r}: unknown operating system or architecture")

    if len(parts) == 2:
        os_name = _normalize_os(parts[0])
        arch, variant = _normalize_arch(parts[1], "")
        return PlatformSpec(os=os_name, architecture=arch, variant=variant)

    if len(parts) == 3:
        os_name = _normalize_os(parts[0])
        arch, variant = _normalize_arch(parts[1], parts[2])
        return PlatformSpec(os=os_name, architecture=arch, variant=variant)

    raise InvalidPlatformError(f"{specifier!r}: cannot parse platform specifier")
