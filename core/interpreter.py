from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Sequence

from builder.base import BuildContext, GraphBuilder
from handlers import load_builtin_handlers, run_handler
from lang.escaping import expand_word, is_valid_variable_name, remove_line_continuations
from lang.platforms import InvalidPlatformError, PlatformSpec, parse_platform
from lang.reader import ReaderError, parse_targetfile, walk
from lang.statements import Statement, StatementKind

from .errors import (
    BuilderError,
    OptionDecodeError,
    StatementSyntaxError,
    StateInvariantError,
    TargetfileError,
    TargetNotFoundError,
)
from .runtime import BASE_TARGET, RESERVED_TARGETS, InterpreterState

logger = logging.getLogger("targetfile")


@dataclass(slots=True)
class HandlerContext:
    interpreter: "TargetInterpreter"
    statement: Statement

    @property
    def state(self) -> InterpreterState:
        return self.interpreter.state

    @property
    def builder(self) -> GraphBuilder:
        return self.interpreter.builder

    @property
    def in_base_target(self) -> bool:
        return self.state.current_target == BASE_TARGET

    def expand(self, word: str, *, keep_reference_escape: bool = False) -> str:
        return self.interpreter._expand(word, keep_reference_escape=keep_reference_escape)

    def expand_all(self, words: Sequence[str], *, keep_reference_escape: bool = False) -> list[str]:
        return [self.expand(word, keep_reference_escape=keep_reference_escape) for word in words]

    def parse_platform(self, value: str) -> PlatformSpec | None:
        expanded = self.expand(value)
        if not expanded:
            return None
        try:
            return parse_platform(expanded)
        except InvalidPlatformError as exc:
            raise OptionDecodeError(f"parse platform {expanded}: {exc}") from exc

    def apply(self, description: str, operation: Callable[..., Any], *args: Any) -> None:
        self.interpreter._call_builder(description, operation, *args)

    def reject_after_push(self) -> None:
        if self.state.push_only:
            raise StateInvariantError(f"no non-push commands allowed after a --push: {self.statement.text}")

    def enable_push_only(self) -> None:
        self.state.push_only = True


class TargetInterpreter:
    """Receives tree-walk events and turns one target's statements into builder calls.

    Only the statements of ``execute_target`` have effects. The first error is
    kept and every later event becomes a no-op; read it back with ``error()``
    once the walk has finished.
    """

    def __init__(
        self,
        builder: GraphBuilder,
        execute_target: str,
        *,
        build_context: BuildContext | None = None,
    ) -> None:
        load_builtin_handlers()
        self.builder = builder
        self.build_context = build_context or BuildContext()
        self.state = InterpreterState(execute_target=execute_target)

    # Results.

    def error(self) -> TargetfileError | None:
        if self.state.error is not None:
            return self.state.error
        if not self.state.target_found:
            return TargetNotFoundError(self.state.execute_target)
        return None

    def raise_for_error(self) -> None:
        err = self.error()
        if err is not None:
            raise err

    # Targets.

    def enter_target_header(self, name: str) -> None:
        state = self.state
        state.current_target = name
        state.push_only = False
        # Reserved names are rejected whether or not the target is selected.
        if name in RESERVED_TARGETS:
            state.latch(StateInvariantError('target name cannot be "base" or "secrets"'))
            return
        if name == state.execute_target:
            if state.target_found:
                state.latch(StateInvariantError(f"target {name} is declared twice"))
                return
            state.target_found = True
        if state.skipping:
            return

        logger.info("target=%s selected", name)
        with self._latching():
            self._call_builder(
                "apply implicit FROM +base", self.builder.from_image, "+base", None, ()
            )

    def enter_stmts(self) -> None:
        if self.state.skipping:
            return
        self.state.push_only = False

    def exit_stmts(self) -> None:
        if self.state.skipping:
            return
        with self._latching():
            self.state.block.ensure_closed()

    # Statements.

    def enter_stmt(self) -> None:
        if self.state.skipping:
            return
        self.state.begin_statement()

    def exit_stmt(self, kind: StatementKind, text: str) -> None:
        if self.state.skipping:
            return
        statement = self.state.take_statement(kind, text)
        logger.debug("target=%s statement=%s", self.state.current_target, statement.text)
        with self._latching():
            run_handler(HandlerContext(interpreter=self, statement=statement), statement)

    def enter_stmt_word(self, text: str) -> None:
        if self.state.skipping:
            return
        self.state.scratch().words.append(remove_line_continuations(text))

    def exit_stmt_words_maybe_json(self, text: str) -> None:
        if self.state.skipping:
            return
        try:
            words = json.loads(text)
        except ValueError:
            return
        # null decodes to an empty exec form.
        if words is None:
            words = []
        if isinstance(words, list) and all(isinstance(word, str) for word in words):
            scratch = self.state.scratch()
            scratch.words = words
            scratch.exec_mode = True

    def enter_env_arg_key(self, text: str) -> None:
        if self.state.skipping:
            return
        self.state.scratch().env_arg_key = text
        if not is_valid_variable_name(text):
            self.state.latch(StatementSyntaxError(f"invalid env key definition {text}"))

    def enter_env_arg_value(self, text: str) -> None:
        if self.state.skipping:
            return
        self.state.scratch().env_arg_value = text

    def enter_label_key(self, text: str) -> None:
        if self.state.skipping:
            return
        self.state.scratch().label_keys.append(text)

    def enter_label_value(self, text: str) -> None:
        if self.state.skipping:
            return
        self.state.scratch().label_values.append(text)

    # Helpers.

    @contextmanager
    def _latching(self) -> Iterator[None]:
        try:
            yield
        except TargetfileError as exc:
            logger.debug("target=%s error latched: %s", self.state.current_target, exc)
            self.state.latch(exc)

    def _expand(self, word: str, *, keep_reference_escape: bool) -> str:
        try:
            return expand_word(self.builder.expand_args, word, keep_reference_escape=keep_reference_escape)
        except Exception as exc:
            raise BuilderError(f"expand args {word}: {exc}") from exc

    def _call_builder(self, description: str, operation: Callable[..., Any], *args: Any) -> None:
        try:
            operation(self.build_context, *args)
        except Exception as exc:
            raise BuilderError(f"{description}: {exc}") from exc


def interpret(
    text: str,
    execute_target: str,
    builder: GraphBuilder,
    *,
    build_context: BuildContext | None = None,
) -> TargetInterpreter:
    """Read ``text``, walk it, and raise the terminal error if there is one."""
    try:
        tree = parse_targetfile(text)
    except ReaderError as exc:
        raise StatementSyntaxError(str(exc)) from exc

    interpreter = TargetInterpreter(builder, execute_target, build_context=build_context)
    walk(tree, interpreter)
    interpreter.raise_for_error()
    return interpreter
