from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StatementKind(Enum):
    """Every statement keyword of the target-file language."""

    FROM = "FROM"
    FROM_DOCKERFILE = "FROM DOCKERFILE"
    COPY = "COPY"
    RUN = "RUN"
    SAVE_ARTIFACT = "SAVE ARTIFACT"
    SAVE_IMAGE = "SAVE IMAGE"
    BUILD = "BUILD"
    WORKDIR = "WORKDIR"
    USER = "USER"
    CMD = "CMD"
    ENTRYPOINT = "ENTRYPOINT"
    EXPOSE = "EXPOSE"
    VOLUME = "VOLUME"
    ENV = "ENV"
    ARG = "ARG"
    LABEL = "LABEL"
    GIT_CLONE = "GIT CLONE"
    HEALTHCHECK = "HEALTHCHECK"
    WITH_DOCKER = "WITH DOCKER"
    END = "END"
    ADD = "ADD"
    STOPSIGNAL = "STOPSIGNAL"
    ONBUILD = "ONBUILD"
    SHELL = "SHELL"
    DOCKER_LOAD = "DOCKER LOAD"
    DOCKER_PULL = "DOCKER PULL"
    GENERIC = "GENERIC"

    @property
    def keyword(self) -> str:
        return self.value

    @classmethod
    def from_keyword(cls, keyword: str) -> "StatementKind":
        try:
            return cls(" ".join(keyword.split()))
        except ValueError:
            return cls.GENERIC


# Statements whose word list may be written as a JSON array (exec form).
MAYBE_JSON_KINDS = frozenset({StatementKind.RUN, StatementKind.CMD, StatementKind.ENTRYPOINT})


@dataclass(frozen=True, slots=True)
class Statement:
    """One parsed command, as seen by its handler.

    ``words`` are escape-normalized but not yet variable-expanded.
    """

    kind: StatementKind
    text: str
    words: tuple[str, ...] = ()
    exec_mode: bool = False
    env_key: str = ""
    env_value: str = ""
    label_keys: tuple[str, ...] = ()
    label_values: tuple[str, ...] = ()
