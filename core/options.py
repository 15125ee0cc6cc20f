from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Mapping, Sequence

import click

from .errors import OptionDecodeError

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

# Options end at the first positional token, like a conventional flag parser.
_CONTEXT_SETTINGS = {
    "allow_extra_args": True,
    "allow_interspersed_args": False,
    "ignore_unknown_options": False,
    "help_option_names": [],
}


class DurationType(click.ParamType):
    """Go-style durations: ``30s``, ``1m30s``, ``1.5h``, ``250ms`` or ``0``."""

    name = "duration"

    def convert(self, value: Any, param: click.Parameter | None, ctx: click.Context | None) -> timedelta:
        if isinstance(value, timedelta):
            return value

        text = str(value)
        sign = 1
        if text[:1] in ("-", "+"):
            sign = -1 if text[0] == "-" else 1
            text = text[1:]
        if text == "0":
            return timedelta(0)
        if not text:
            self.fail(f"invalid duration {value!r}", param, ctx)

        total = 0.0
        pos = 0
        while pos < len(text):
            part = _DURATION_PART.match(text, pos)
            if part is None:
                self.fail(f"invalid duration {value!r}", param, ctx)
            total += float(part.group(1)) * _DURATION_UNITS[part.group(2)]
            pos = part.end()
        return timedelta(seconds=sign * total)


DURATION = DurationType()


def flag(*decls: str, help: str) -> click.Option:
    return click.Option(list(decls), is_flag=True, default=False, help=help)


def string(*decls: str, help: str, default: str = "") -> click.Option:
    return click.Option(list(decls), default=default, help=help)


def strings(*decls: str, help: str) -> click.Option:
    return click.Option(list(decls), multiple=True, help=help)


def duration(*decls: str, default: timedelta, help: str) -> click.Option:
    return click.Option(list(decls), type=DURATION, default=default, help=help)


def integer(*decls: str, default: int, help: str) -> click.Option:
    return click.Option(list(decls), type=click.INT, default=default, help=help)


@dataclass(frozen=True, slots=True)
class DecodedOptions:
    values: Mapping[str, Any]
    args: tuple[str, ...]

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def strings(self, name: str) -> list[str]:
        return list(self.values[name] or ())


@dataclass(frozen=True)
class OptionSet:
    """The options one statement kind accepts, decoded with click."""

    statement: str
    options: tuple[click.Option, ...] = ()
    _command: click.Command = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        command = click.Command(
            self.statement,
            params=list(self.options),
            context_settings=_CONTEXT_SETTINGS,
            add_help_option=False,
        )
        object.__setattr__(self, "_command", command)

    def decode(self, words: Sequence[str]) -> DecodedOptions:
        try:
            ctx = self._command.make_context(self.statement, list(words))
        except click.ClickException as exc:
            raise OptionDecodeError(
                f"invalid {self.statement} arguments {list(words)}: {exc.format_message()}"
            ) from exc
        return DecodedOptions(values=dict(ctx.params), args=tuple(ctx.args))
