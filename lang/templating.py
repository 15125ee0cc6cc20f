from __future__ import annotations

import re
from typing import Mapping

_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_DOUBLE_QUOTE_ESCAPABLE = '"$\\`'


class ExpansionError(ValueError):
    pass


def _lookup(name: str, scope: Mapping[str, str]) -> str:
    return str(scope.get(name, ""))


def _expand_braced(body: str, scope: Mapping[str, str]) -> str:
    found = _NAME.match(body)
    if found is None:
        raise ExpansionError(f"bad substitution: ${{{body}}}")
    name = found.group(0)
    rest = body[found.end() :]
    if not rest:
        return _lookup(name, scope)

    value = _lookup(name, scope)
    match rest[:2]:
        case ":-":
            return value if value else render_template(rest[2:], scope)
        case ":+":
            return render_template(rest[2:], scope) if value else ""
        case _:
            raise ExpansionError(f"unsupported modifier in ${{{body}}}")


def _closing_brace(word: str, start: int) -> int:
    """Index of the ``}`` closing a ``${`` whose body starts at ``start``, or -1."""
    depth = 1
    i = start
    while i < len(word):
        ch = word[i]
        if ch == "\\":
            i += 2
            continue
        if word.startswith("${", i):
            depth += 1
            i += 2
            continue
        if ch == "}":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return -1


def _expand_variable(word: str, i: int, scope: Mapping[str, str]) -> tuple[str, int]:
    """Expand the ``$`` reference at ``word[i]``; return (text, next index)."""
    nxt = word[i + 1] if i + 1 < len(word) else ""
    if nxt == "{":
        end = _closing_brace(word, i + 2)
        if end == -1:
            raise ExpansionError(f"missing '}}' in {word!r}")
        return _expand_braced(word[i + 2 : end], scope), end + 1

    found = _NAME.match(word, i + 1)
    if found is None:
        return "$", i + 1
    return _lookup(found.group(0), scope), found.end()


def _expand_double_quoted(word: str, i: int, scope: Mapping[str, str], out: list[str]) -> int:
    while i < len(word):
        ch = word[i]
        if ch == '"':
            return i + 1
        if ch == "\\" and i + 1 < len(word) and word[i + 1] in _DOUBLE_QUOTE_ESCAPABLE:
            out.append(word[i + 1])
            i += 2
            continue
        if ch == "$":
            text, i = _expand_variable(word, i, scope)
            out.append(text)
            continue
        out.append(ch)
        i += 1
    raise ExpansionError(f"unterminated double quote in {word!r}")


def render_template(word: str, scope: Mapping[str, str]) -> str:
    """Expand a single shell word against ``scope``.

    Supports ``$NAME``, ``${NAME}``, ``${NAME:-word}`` and ``${NAME:+word}``.
    Quotes are removed; single-quoted text is taken literally. A backslash
    outside quotes escapes the next character. Unset names expand to "".
    """
    out: list[str] = []
    i = 0
    while i < len(word):
        ch = word[i]
        if ch == "\\":
            if i + 1 < len(word):
                out.append(word[i + 1])
                i += 2
            else:
                out.append(ch)
                i += 1
            continue
        if ch == "'":
            end = word.find("'", i + 1)
            if end == -1:
                raise ExpansionError(f"unterminated single quote in {word!r}")
            out.append(word[i + 1 : end])
            i = end + 1
            continue
        if ch == '"':
            i = _expand_double_quoted(word, i + 1, scope, out)
            continue
        if ch == "$":
            text, i = _expand_variable(word, i, scope)
            out.append(text)
            continue
        out.append(ch)
        i += 1
    return "".join(out)
