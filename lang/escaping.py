from __future__ import annotations

import re
from typing import Callable

REFERENCE_MARKER = "+"

_ESCAPED_MARKER = "\\" + REFERENCE_MARKER
_DOUBLE_ESCAPED_MARKER = "\\\\" + REFERENCE_MARKER

LINE_CONTINUATION = re.compile(r"\\(\n|\r\n)[\t ]*")
_VARIABLE_NAME = re.compile(r"[a-zA-Z_]+[a-zA-Z0-9_]*")


def escape_reference_marker(word: str) -> str:
    """Protect ``\\+`` so it survives one pass of shell-style expansion.

    Known limitation: a word that already contains ``\\\\+`` is escaped again
    rather than recognised, so its backslashes collapse differently.
    """
    return word.replace(_ESCAPED_MARKER, _DOUBLE_ESCAPED_MARKER)


def unescape_reference_marker(word: str) -> str:
    return word.replace(_ESCAPED_MARKER, REFERENCE_MARKER)


def expand_word(expander: Callable[[str], str], word: str, *, keep_reference_escape: bool) -> str:
    """Run ``expander`` over ``word`` with the reference marker protected.

    With ``keep_reference_escape`` the result keeps ``\\+`` so it can still be
    parsed as a target or artifact reference; otherwise it is a literal.
    """
    expanded = expander(escape_reference_marker(word))
    if keep_reference_escape:
        return expanded
    return unescape_reference_marker(expanded)


def remove_line_continuations(word: str) -> str:
    return LINE_CONTINUATION.sub("", word)


def is_valid_variable_name(name: str) -> bool:
    return _VARIABLE_NAME.fullmatch(name) is not None
