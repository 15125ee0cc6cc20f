from __future__ import annotations

import json
from pathlib import Path


def _string_end(text: str, start: int) -> int:
    """Index just past the JSON string literal opening at ``start``."""
    i = start + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == '"':
            return i + 1
        i += 1
    return len(text)


def strip_jsonc(text: str) -> str:
    """Drop // and /* */ comments and trailing commas; string literals are kept as-is."""
    out: list[str] = []
    pending_comma = False
    i = 0

    while i < len(text):
        ch = text[i]
        pair = text[i : i + 2]

        if pair == "//":
            newline = text.find("\n", i)
            i = len(text) if newline < 0 else newline
            continue
        if pair == "/*":
            close = text.find("*/", i + 2)
            i = len(text) if close < 0 else close + 2
            continue
        if ch in " \t\r\n":
            out.append(ch)
            i += 1
            continue

        # A comma is only emitted once the next significant character shows
        # it does not close an array or object.
        if pending_comma:
            if ch not in "]}":
                out.append(",")
            pending_comma = False
        if ch == ",":
            pending_comma = True
            i += 1
            continue
        if ch == '"':
            end = _string_end(text, i)
            out.append(text[i:end])
            i = end
            continue

        out.append(ch)
        i += 1

    if pending_comma:
        out.append(",")
    return "".join(out)


def load_json_or_jsonc(config_path: Path) -> dict:
    raw = config_path.read_text(encoding="utf-8")
    data = json.loads(strip_jsonc(raw))
    if not isinstance(data, dict):
        raise ValueError(f"Top-level settings in {config_path} must be an object")
    return data
