from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Protocol

from .escaping import LINE_CONTINUATION
from .statements import MAYBE_JSON_KINDS, StatementKind

_TARGET_HEADER = re.compile(r"([a-zA-Z0-9][a-zA-Z0-9._-]*):[ \t]*")
_KEYWORD = re.compile(
    r"[ \t]*(?P<keyword>"
    r"(?:FROM\s+DOCKERFILE|SAVE\s+ARTIFACT|SAVE\s+IMAGE|GIT\s+CLONE"
    r"|DOCKER\s+LOAD|DOCKER\s+PULL|WITH\s+DOCKER)(?!\S)"
    r"|\S+)(?P<rest>.*)",
    re.DOTALL,
)
_ENV_ARG = re.compile(r"\s*(?P<key>[^\s=]*)(?P<sep>\s*=\s*|\s+)?(?P<value>.*)", re.DOTALL)
_WHITESPACE = " \t\r\n"


class ReaderError(ValueError):
    def __init__(self, message: str, line: int) -> None:
        super().__init__(f"line {line}: {message}")
        self.line = line


class WalkListener(Protocol):
    def enter_target_header(self, name: str) -> None: ...
    def enter_stmts(self) -> None: ...
    def exit_stmts(self) -> None: ...
    def enter_stmt(self) -> None: ...
    def enter_stmt_word(self, text: str) -> None: ...
    def exit_stmt_words_maybe_json(self, text: str) -> None: ...
    def enter_env_arg_key(self, text: str) -> None: ...
    def enter_env_arg_value(self, text: str) -> None: ...
    def enter_label_key(self, text: str) -> None: ...
    def enter_label_value(self, text: str) -> None: ...
    def exit_stmt(self, kind: StatementKind, text: str) -> None: ...


@dataclass(slots=True)
class StatementNode:
    kind: StatementKind
    text: str
    line: int
    words: list[str] = field(default_factory=list)
    words_text: str = ""
    env_key: str | None = None
    env_value: str | None = None
    labels: list[tuple[str, str | None]] = field(default_factory=list)


@dataclass(slots=True)
class TargetNode:
    name: str
    line: int
    statements: list[StatementNode] = field(default_factory=list)


@dataclass(slots=True)
class TargetFileTree:
    base: list[StatementNode] = field(default_factory=list)
    targets: list[TargetNode] = field(default_factory=list)


def split_words(body: str, line: int = 0) -> list[str]:
    """Split on unquoted whitespace, keeping quotes and escapes in the words.

    A line continuation inside a word stays part of that word; between words
    it counts as whitespace.
    """
    words: list[str] = []
    current: list[str] = []
    quote = ""
    i = 0
    while i < len(body):
        ch = body[i]
        if quote:
            current.append(ch)
            if ch == "\\" and quote == '"' and i + 1 < len(body):
                current.append(body[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = ""
            i += 1
            continue
        if ch == "\\":
            continuation = LINE_CONTINUATION.match(body, i)
            if continuation is not None:
                if current:
                    current.append(continuation.group(0))
                i = continuation.end()
                continue
            current.append(body[i : i + 2])
            i += 2
            continue
        if ch in "'\"":
            quote = ch
            current.append(ch)
            i += 1
            continue
        if ch in _WHITESPACE:
            if current:
                words.append("".join(current))
                current = []
            i += 1
            continue
        current.append(ch)
        i += 1

    if quote:
        raise ReaderError(f"unterminated {quote} quote", line)
    if current:
        words.append("".join(current))
    return words


def _logical_lines(text: str):
    """Yield (first line number, indented, logical line) with continuations kept."""
    pending: list[str] = []
    start = 0
    for number, raw in enumerate(text.splitlines(keepends=True), start=1):
        stripped = raw.strip()
        if not pending and (not stripped or stripped.startswith("#")):
            continue
        if pending and stripped.startswith("#"):
            continue
        if not pending:
            start = number
        pending.append(raw)
        if raw.rstrip("\r\n").endswith("\\"):
            continue
        logical = "".join(pending).rstrip("\r\n")
        pending = []
        yield start, logical[:1] in (" ", "\t"), logical
    if pending:
        yield start, pending[0][:1] in (" ", "\t"), "".join(pending).rstrip("\r\n\\")


def _parse_statement(logical: str, line: int) -> StatementNode:
    found = _KEYWORD.match(logical)
    if found is None:
        raise ReaderError("empty statement", line)
    kind = StatementKind.from_keyword(found.group("keyword"))
    rest = found.group("rest")
    text = " ".join(LINE_CONTINUATION.sub(" ", logical).split())
    node = StatementNode(kind=kind, text=text, line=line)

    if kind in (StatementKind.ENV, StatementKind.ARG):
        parts = _ENV_ARG.match(rest)
        node.env_key = parts.group("key")
        value = parts.group("value").rstrip()
        if value or (parts.group("sep") or "").strip() == "=":
            node.env_value = value
        return node

    if kind is StatementKind.LABEL:
        for word in split_words(rest, line):
            key, sep, value = word.partition("=")
            node.labels.append((key, value if sep else None))
        return node

    node.words = split_words(rest, line)
    if kind in MAYBE_JSON_KINDS:
        node.words_text = LINE_CONTINUATION.sub("", rest).strip()
    return node


def parse_targetfile(text: str) -> TargetFileTree:
    """Read target-file text into base statements and targets."""
    tree = TargetFileTree()
    current: TargetNode | None = None
    for line, indented, logical in _logical_lines(text):
        if not indented:
            header = _TARGET_HEADER.fullmatch(logical)
            if header is not None:
                current = TargetNode(name=header.group(1), line=line)
                tree.targets.append(current)
                continue
            if current is not None:
                raise ReaderError(f"statement outside of an indented target body: {logical.strip()}", line)

        statement = _parse_statement(logical, line)
        if current is None:
            tree.base.append(statement)
        else:
            current.statements.append(statement)
    return tree


def _walk_statement(node: StatementNode, listener: WalkListener) -> None:
    listener.enter_stmt()
    if node.env_key is not None:
        listener.enter_env_arg_key(node.env_key)
        if node.env_value is not None:
            listener.enter_env_arg_value(node.env_value)
    for key, value in node.labels:
        listener.enter_label_key(key)
        if value is not None:
            listener.enter_label_value(value)
    for word in node.words:
        listener.enter_stmt_word(word)
    if node.kind in MAYBE_JSON_KINDS:
        listener.exit_stmt_words_maybe_json(node.words_text)
    listener.exit_stmt(node.kind, node.text)


def _walk_statements(statements: list[StatementNode], listener: WalkListener) -> None:
    if not statements:
        return
    listener.enter_stmts()
    for node in statements:
        _walk_statement(node, listener)
    listener.exit_stmts()


def walk(tree: TargetFileTree, listener: WalkListener) -> None:
    """Emit enter/exit events for ``tree`` in document order."""
    _walk_statements(tree.base, listener)
    for target in tree.targets:
        listener.enter_target_header(target.name)
        _walk_statements(target.statements, listener)
