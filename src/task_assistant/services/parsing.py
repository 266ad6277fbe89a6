"""Parsers that turn free-form model output into structured values."""

import json
import re
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

_QUOTED_PATTERN = re.compile(r'"([^"]+)"')
_DECODER = json.JSONDecoder()


@dataclass(frozen=True)
class ParseOk(Generic[T]):
    """Successfully parsed value."""

    value: T


@dataclass(frozen=True)
class ParseFailure:
    """Raw text that did not match the expected structure."""

    raw: str
    reason: str = ""


ParseResult = ParseOk[T] | ParseFailure


def parse_json_array(text: str) -> ParseResult[list[object]]:
    """Parse the first complete JSON array embedded in the text."""
    return _decode_first(text, "[", list, "array")


def parse_json_object(text: str) -> ParseResult[dict[str, object]]:
    """Parse the first complete JSON object embedded in the text."""
    return _decode_first(text, "{", dict, "object")


def _decode_first(text: str, opener: str, kind: type, label: str) -> ParseResult:
    """Decode a JSON value starting at each ``opener`` in turn.

    Trailing prose is ignored, so a valid value followed by stray brackets
    still parses.
    """
    start = text.find(opener)
    if start == -1:
        return ParseFailure(raw=text, reason=f"no {label} found")
    reason = f"not an {label}"
    while start != -1:
        try:
            value, _end = _DECODER.raw_decode(text, start)
        except json.JSONDecodeError as exc:
            reason = str(exc)
        else:
            if isinstance(value, kind):
                return ParseOk(value)
        start = text.find(opener, start + 1)
    return ParseFailure(raw=text, reason=reason)


def parse_quoted_lines(text: str) -> ParseResult[list[str]]:
    """Collect the first quoted string of every line that starts with a quote."""
    values: list[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped.startswith('"'):
            continue
        match = _QUOTED_PATTERN.search(stripped)
        if match:
            values.append(match.group(1))
    if not values:
        return ParseFailure(raw=text, reason="no quoted lines")
    return ParseOk(values)


def strip_answer(text: str) -> str:
    """Trim whitespace, wrapping quotes and a trailing period from a short answer."""
    cleaned = text.strip().removesuffix(".")
    if len(cleaned) > 1 and cleaned.startswith('"') and cleaned.endswith('"'):
        cleaned = cleaned[1:-1]
    return cleaned.strip().removesuffix(".").strip()
