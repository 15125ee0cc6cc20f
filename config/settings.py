from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from .parser import load_json_or_jsonc

_KNOWN_KEYS = {"target", "build_args", "timeout_seconds"}


@dataclass(slots=True)
class RunSettings:
    """What to interpret: target name, build-arg overrides and an optional deadline."""

    target: str = ""
    build_args: dict[str, str] = field(default_factory=dict)
    timeout_seconds: float | None = None

    @property
    def timeout_ms(self) -> int | None:
        if self.timeout_seconds is None:
            return None
        return int(self.timeout_seconds * 1000)

    def merged(
        self,
        *,
        target: str | None = None,
        build_args: Mapping[str, str] | None = None,
        timeout_seconds: float | None = None,
    ) -> "RunSettings":
        """Overlay command-line values; build args merge with the overlay winning."""
        args = dict(self.build_args)
        args.update(build_args or {})
        return RunSettings(
            target=target or self.target,
            build_args=args,
            timeout_seconds=self.timeout_seconds if timeout_seconds is None else timeout_seconds,
        )


def settings_from_mapping(data: Mapping[str, Any]) -> RunSettings:
    unknown = sorted(set(data) - _KNOWN_KEYS)
    if unknown:
        raise ValueError(f"Unknown settings key(s): {', '.join(unknown)}")

    target = data.get("target", "")
    if not isinstance(target, str):
        raise ValueError("'target' must be a string")

    build_args = data.get("build_args", {})
    if not isinstance(build_args, dict):
        raise ValueError("'build_args' must be an object")
    for key, value in build_args.items():
        if not isinstance(value, str):
            raise ValueError(f"'build_args.{key}' must be a string")

    timeout = data.get("timeout_seconds")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
            raise ValueError("'timeout_seconds' must be a number")
        if timeout < 0:
            raise ValueError("'timeout_seconds' must not be negative")

    return RunSettings(target=target, build_args=dict(build_args), timeout_seconds=timeout)


def load_settings(path: Path | None) -> RunSettings:
    if path is None:
        return RunSettings()
    return settings_from_mapping(load_json_or_jsonc(path))


def parse_build_arg(value: str) -> tuple[str, str]:
    """Split a ``KEY=VALUE`` command-line override."""
    key, sep, arg_value = value.partition("=")
    if not sep or not key:
        raise ValueError(f"build arg must be KEY=VALUE: {value}")
    return key, arg_value
