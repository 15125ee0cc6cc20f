from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Mapping, Sequence

from lang.platforms import PlatformSpec
from lang.templating import render_template

from .base import BuildContext
from .directives import WithDockerOptions

logger = logging.getLogger("targetfile")


@dataclass(frozen=True, slots=True)
class PlanStep:
    operation: str
    arguments: Mapping[str, Any]

    def describe(self) -> str:
        rendered = ", ".join(f"{key}={_render(value)}" for key, value in self.arguments.items())
        return f"{self.operation}({rendered})"


def _render(value: Any) -> str:
    if isinstance(value, (PlatformSpec, timedelta)):
        return str(value)
    return repr(value)


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    if isinstance(value, Mapping):
        return dict(value)
    return value


@dataclass
class RecordingBuilder:
    """Builder that records each call as a plan step instead of building.

    ARG and ENV values are tracked so ``expand_args`` can substitute them;
    ``build_args`` overrides ARG defaults the way ``--build-arg`` does.
    Operations named in ``fail_on`` raise, which lets callers exercise
    builder failures.
    """

    build_args: Mapping[str, str] = field(default_factory=dict)
    fail_on: frozenset[str] = frozenset()
    steps: list[PlanStep] = field(default_factory=list)
    variables: dict[str, str] = field(default_factory=dict)

    def _record(self, ctx: BuildContext, operation: str, **arguments: Any) -> None:
        ctx.check()
        if operation in self.fail_on:
            raise RuntimeError(f"{operation} failed")
        step = PlanStep(operation=operation, arguments={k: _freeze(v) for k, v in arguments.items()})
        self.steps.append(step)
        logger.info("plan: %s", step.describe())

    @property
    def operations(self) -> list[str]:
        return [step.operation for step in self.steps]

    def calls(self, operation: str) -> list[Mapping[str, Any]]:
        return [step.arguments for step in self.steps if step.operation == operation]

    def expand_args(self, word: str) -> str:
        return render_template(word, self.variables)

    def from_image(
        self, ctx: BuildContext, image_name: str, platform: PlatformSpec | None, build_args: Sequence[str]
    ) -> None:
        self._record(ctx, "from_image", image_name=image_name, platform=platform, build_args=build_args)

    def from_dockerfile(
        self,
        ctx: BuildContext,
        context_path: str,
        dockerfile_path: str,
        target: str,
        platform: PlatformSpec | None,
        build_args: Sequence[str],
    ) -> None:
        self._record(
            ctx,
            "from_dockerfile",
            context_path=context_path,
            dockerfile_path=dockerfile_path,
            target=target,
            platform=platform,
            build_args=build_args,
        )

    def copy_artifact(
        self,
        ctx: BuildContext,
        src: str,
        dest: str,
        platform: PlatformSpec | None,
        build_args: Sequence[str],
        is_dir_copy: bool,
        keep_ts: bool,
        keep_own: bool,
        chown: str,
        if_exists: bool,
    ) -> None:
        self._record(
            ctx,
            "copy_artifact",
            src=src,
            dest=dest,
            platform=platform,
            build_args=build_args,
            is_dir_copy=is_dir_copy,
            keep_ts=keep_ts,
            keep_own=keep_own,
            chown=chown,
            if_exists=if_exists,
        )

    def copy_classical(
        self,
        ctx: BuildContext,
        srcs: Sequence[str],
        dest: str,
        is_dir_copy: bool,
        keep_ts: bool,
        keep_own: bool,
        chown: str,
    ) -> None:
        self._record(
            ctx,
            "copy_classical",
            srcs=srcs,
            dest=dest,
            is_dir_copy=is_dir_copy,
            keep_ts=keep_ts,
            keep_own=keep_own,
            chown=chown,
        )

    def run(
        self,
        ctx: BuildContext,
        args: Sequence[str],
        mounts: Sequence[str],
        secrets: Sequence[str],
        privileged: bool,
        with_entrypoint: bool,
        with_docker: bool,
        with_shell: bool,
        push: bool,
        with_ssh: bool,
    ) -> None:
        self._record(
            ctx,
            "run",
            args=args,
            mounts=mounts,
            secrets=secrets,
            privileged=privileged,
            with_entrypoint=with_entrypoint,
            with_docker=with_docker,
            with_shell=with_shell,
            push=push,
            with_ssh=with_ssh,
        )

    def with_docker_run(self, ctx: BuildContext, args: Sequence[str], options: WithDockerOptions) -> None:
        self._record(ctx, "with_docker_run", args=args, options=options)

    def save_artifact(
        self,
        ctx: BuildContext,
        save_from: str,
        save_to: str,
        save_as_local_to: str,
        keep_ts: bool,
        keep_own: bool,
        if_exists: bool,
    ) -> None:
        self._record(
            ctx,
            "save_artifact",
            save_from=save_from,
            save_to=save_to,
            save_as_local_to=save_as_local_to,
            keep_ts=keep_ts,
            keep_own=keep_own,
            if_exists=if_exists,
        )

    def save_image(
        self,
        ctx: BuildContext,
        image_names: Sequence[str],
        push: bool,
        insecure: bool,
        cache_hint: bool,
        cache_from: Sequence[str],
    ) -> None:
        self._record(
            ctx,
            "save_image",
            image_names=image_names,
            push=push,
            insecure=insecure,
            cache_hint=cache_hint,
            cache_from=cache_from,
        )

    def build(
        self, ctx: BuildContext, target_ref: str, platform: PlatformSpec | None, build_args: Sequence[str]
    ) -> None:
        self._record(ctx, "build", target_ref=target_ref, platform=platform, build_args=build_args)

    def workdir(self, ctx: BuildContext, path: str) -> None:
        self._record(ctx, "workdir", path=path)

    def user(self, ctx: BuildContext, user: str) -> None:
        self._record(ctx, "user", user=user)

    def cmd(self, ctx: BuildContext, args: Sequence[str], with_shell: bool) -> None:
        self._record(ctx, "cmd", args=args, with_shell=with_shell)

    def entrypoint(self, ctx: BuildContext, args: Sequence[str], with_shell: bool) -> None:
        self._record(ctx, "entrypoint", args=args, with_shell=with_shell)

    def expose(self, ctx: BuildContext, ports: Sequence[str]) -> None:
        self._record(ctx, "expose", ports=ports)

    def volume(self, ctx: BuildContext, volumes: Sequence[str]) -> None:
        self._record(ctx, "volume", volumes=volumes)

    def env(self, ctx: BuildContext, key: str, value: str) -> None:
        self._record(ctx, "env", key=key, value=value)
        self.variables[key] = value

    def arg(self, ctx: BuildContext, key: str, value: str, is_global: bool) -> None:
        effective = self.build_args.get(key, value)
        self._record(ctx, "arg", key=key, value=effective, is_global=is_global)
        self.variables[key] = effective

    def label(self, ctx: BuildContext, labels: Mapping[str, str]) -> None:
        self._record(ctx, "label", labels=labels)

    def git_clone(self, ctx: BuildContext, url: str, branch: str, dest: str, keep_ts: bool) -> None:
        self._record(ctx, "git_clone", url=url, branch=branch, dest=dest, keep_ts=keep_ts)

    def healthcheck(
        self,
        ctx: BuildContext,
        is_none: bool,
        cmd_args: Sequence[str],
        interval: timedelta,
        timeout: timedelta,
        start_period: timedelta,
        retries: int,
    ) -> None:
        self._record(
            ctx,
            "healthcheck",
            is_none=is_none,
            cmd_args=cmd_args,
            interval=interval,
            timeout=timeout,
            start_period=start_period,
            retries=retries,
        )
