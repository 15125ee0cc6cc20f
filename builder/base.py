from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Mapping, Protocol, Sequence

from lang.platforms import PlatformSpec

from .directives import WithDockerOptions


class BuildCancelled(RuntimeError):
    pass


@dataclass(frozen=True)
class BuildContext:
    """Cancellation and deadline carrier passed to every builder call."""

    deadline_ns: int | None = None
    _cancel_event: threading.Event = field(default_factory=threading.Event, repr=False, compare=False)

    @classmethod
    def from_timeout_ms(cls, milliseconds: int) -> "BuildContext":
        if milliseconds < 0:
            raise ValueError(f"invalid timeout: {milliseconds}ms")
        return cls(deadline_ns=time.monotonic_ns() + milliseconds * 1_000_000)

    def cancel(self) -> None:
        self._cancel_event.set()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def expired(self) -> bool:
        return self.deadline_ns is not None and time.monotonic_ns() >= self.deadline_ns

    def check(self) -> None:
        if self.cancelled:
            raise BuildCancelled("build cancelled")
        if self.expired():
            raise BuildCancelled("build deadline exceeded")


class GraphBuilder(Protocol):
    def expand_args(self, word: str) -> str: ...

    def from_image(
        self, ctx: BuildContext, image_name: str, platform: PlatformSpec | None, build_args: Sequence[str]
    ) -> None: ...

    def from_dockerfile(
        self,
        ctx: BuildContext,
        context_path: str,
        dockerfile_path: str,
        target: str,
        platform: PlatformSpec | None,
        build_args: Sequence[str],
    ) -> None: ...

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
    ) -> None: ...

    def copy_classical(
        self,
        ctx: BuildContext,
        srcs: Sequence[str],
        dest: str,
        is_dir_copy: bool,
        keep_ts: bool,
        keep_own: bool,
        chown: str,
    ) -> None: ...

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
    ) -> None: ...

    def with_docker_run(self, ctx: BuildContext, args: Sequence[str], options: WithDockerOptions) -> None: ...

    def save_artifact(
        self,
        ctx: BuildContext,
        save_from: str,
        save_to: str,
        save_as_local_to: str,
        keep_ts: bool,
        keep_own: bool,
        if_exists: bool,
    ) -> None: ...

    def save_image(
        self,
        ctx: BuildContext,
        image_names: Sequence[str],
        push: bool,
        insecure: bool,
        cache_hint: bool,
        cache_from: Sequence[str],
    ) -> None: ...

    def build(
        self, ctx: BuildContext, target_ref: str, platform: PlatformSpec | None, build_args: Sequence[str]
    ) -> None: ...

    def workdir(self, ctx: BuildContext, path: str) -> None: ...

    def user(self, ctx: BuildContext, user: str) -> None: ...

    def cmd(self, ctx: BuildContext, args: Sequence[str], with_shell: bool) -> None: ...

    def entrypoint(self, ctx: BuildContext, args: Sequence[str], with_shell: bool) -> None: ...

    def expose(self, ctx: BuildContext, ports: Sequence[str]) -> None: ...

    def volume(self, ctx: BuildContext, volumes: Sequence[str]) -> None: ...

    def env(self, ctx: BuildContext, key: str, value: str) -> None: ...

    def arg(self, ctx: BuildContext, key: str, value: str, is_global: bool) -> None: ...

    def label(self, ctx: BuildContext, labels: Mapping[str, str]) -> None: ...

    def git_clone(self, ctx: BuildContext, url: str, branch: str, dest: str, keep_ts: bool) -> None: ...

    def healthcheck(
        self,
        ctx: BuildContext,
        is_none: bool,
        cmd_args: Sequence[str],
        interval: timedelta,
        timeout: timedelta,
        start_period: timedelta,
        retries: int,
    ) -> None: ...
