"""Parsing of generator macro bodies such as ``number.int(18, 80)``."""

from __future__ import annotations

import json
import re
from datetime import datetime
from typing import Any

_CALL_PATTERN = re.compile(r"^([^(]+)(?:\((.*)\))?$", re.DOTALL)
_MIDNIGHT_MARKER = "T00:00:00.000Z"
_OBJECT_KEY = re.compile(r"([A-Za-z_$][\w$]*)\s*:")


def parse_macro(body: str) -> tuple[list[str], list[Any]]:
    """Split a macro body into its dotted path and parsed arguments.

    Never raises: a body that does not look like ``path(args)`` is returned as
    a single-segment path without arguments.
    """
    match = _CALL_PATTERN.match(body)
    if match is None:
        return [body], []

    path_string, args_string = match.groups()
    if not args_string:
        return path_string.split("."), []

    return path_string.split("."), [parse_argument(raw) for raw in split_arguments(args_string)]


def split_arguments(args_string: str) -> list[str]:
    """Split an argument list on top-level commas.

    Commas inside double quotes or inside ``{}``/``[]`` do not separate
    arguments. Empty trailing arguments are dropped.
    """
    args: list[str] = []
    current: list[str] = []
    depth = 0
    in_quote = False
    previous = ""

    for ch in args_string:
        if ch == '"' and previous != "\\":
            in_quote = not in_quote

        if not in_quote:
            if ch in "{[":
                depth += 1
            elif ch in "}]":
                depth -= 1

        if ch == "," and depth == 0 and not in_quote:
            args.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        previous = ch

    tail = "".join(current).strip()
    if tail:
        args.append(tail)
    return args


def parse_argument(raw: str) -> Any:
    """Turn one raw argument into a Python value.

    Object literals may use JavaScript syntax (unquoted keys, single quotes).
    Strings carrying a midnight ISO timestamp become ``datetime`` values.
    """
    value = raw.strip()
    try:
        if value.startswith("{") and value.endswith("}"):
            return _revive_dates(_parse_object_literal(value))

        if _MIDNIGHT_MARKER in value and not value.startswith(("[", '"')):
            return _to_datetime(value)

        return _revive_dates(json.loads(value))
    except ValueError:
        return value


def _parse_object_literal(literal: str) -> Any:
    try:
        return json.loads(literal)
    except ValueError:
        pass
    return json.loads(_normalise_object_literal(literal))


def _normalise_object_literal(literal: str) -> str:
    """Rewrite a JavaScript object literal as JSON.

    Single-quoted strings become JSON strings and bare keys get quoted.
    Text inside either kind of string is copied without being looked at.
    """
    out: list[str] = []
    last = ""
    i = 0
    while i < len(literal):
        ch = literal[i]
        if ch in "\"'":
            end = _string_end(literal, i)
            if ch == "'":
                out.append(json.dumps(literal[i + 1 : end].replace("\\'", "'")))
            else:
                out.append(literal[i : end + 1])
            last = '"'
            i = end + 1
            continue

        key = _OBJECT_KEY.match(literal, i) if last in ("{", ",") else None
        if key is not None:
            out.append(f'"{key.group(1)}":')
            last = ":"
            i = key.end()
            continue

        out.append(ch)
        if not ch.isspace():
            last = ch
        i += 1
    return "".join(out)


def _string_end(literal: str, start: int) -> int:
    quote = literal[start]
    i = start + 1
    while i < len(literal):
        if literal[i] == "\\":
            i += 2
            continue
        if literal[i] == quote:
            return i
        i += 1
    raise ValueError(f"Unterminated string in {literal!r}")


def _revive_dates(parsed: Any) -> Any:
    if isinstance(parsed, dict):
        for key, item in parsed.items():
            if isinstance(item, str) and _MIDNIGHT_MARKER in item:
                parsed[key] = _to_datetime(item)
        return parsed
    if isinstance(parsed, str) and _MIDNIGHT_MARKER in parsed:
        return _to_datetime(parsed)
    return parsed


def _to_datetime(value: str) -> datetime:
    return datetime.fromisoformat(value.strip('"').replace("Z", "+00:00"))
