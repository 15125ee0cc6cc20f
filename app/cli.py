from __future__ import annotations

import logging
from pathlib import Path

import click

from builder.base import BuildContext
from builder.recording import RecordingBuilder
from config.settings import load_settings, parse_build_arg
from core.errors import TargetfileError
from core.interpreter import interpret

logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")
logger = logging.getLogger("targetfile")


def _build_args(values: tuple[str, ...]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for value in values:
        try:
            key, arg_value = parse_build_arg(value)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--build-arg") from exc
        parsed[key] = arg_value
    return parsed


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("targetfile", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--target", "-t", default=None, help="Target to interpret. Defaults to the settings file, then 'base'.")
@click.option("--build-arg", "build_args", multiple=True, help="ARG override as KEY=VALUE. Repeatable.")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="JSON/JSONC settings file (target, build_args, timeout_seconds).",
)
@click.option("--timeout", type=click.FloatRange(min=0), default=None, help="Deadline for the builder, in seconds.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every dispatched statement.")
def main(
    targetfile: Path,
    target: str | None,
    build_args: tuple[str, ...],
    config_file: Path | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Interpret one target of a target file and print its build plan."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        settings = load_settings(config_file)
    except ValueError as exc:
        raise click.ClickException(f"invalid settings: {exc}") from exc
    settings = settings.merged(target=target, build_args=_build_args(build_args), timeout_seconds=timeout)

    execute_target = settings.target or "base"
    build_context = BuildContext()
    if settings.timeout_ms is not None:
        build_context = BuildContext.from_timeout_ms(settings.timeout_ms)

    builder = RecordingBuilder(build_args=settings.build_args)
    text = targetfile.read_text(encoding="utf-8")
    try:
        interpret(text, execute_target, builder, build_context=build_context)
    except TargetfileError as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(f"Plan for target={execute_target} ({len(builder.steps)} steps):")
    for step in builder.steps:
        click.echo(f"  - {step.describe()}")


if __name__ == "__main__":
    main()
