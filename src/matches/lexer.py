"""Input cursor and literal scanners for the pattern grammar."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import NoReturn

UNDEFINED_WORD = re.compile(r"undefined\b")
NULL_WORD = re.compile(r"null\b")
BOOLEAN_WORD = re.compile(r"(true|false)\b")

IDENT = re.compile(r"[a-z][_$a-zA-Z0-9]*")
KEY_IDENT = re.compile(r"[_$a-zA-Z][_$a-zA-Z0-9]*")
CLASS_NAME = re.compile(r"[A-Z][_$a-zA-Z0-9]*")
EXTRACTOR_NAME = re.compile(r"\$([_$a-zA-Z][_$a-zA-Z0-9]*)")

_WHITESPACE = re.compile(r"\s+")

_DOUBLE_QUOTED_CHARS = re.compile(r'[^"\\\n]+')
_SINGLE_QUOTED_CHARS = re.compile(r"[^'\\\n]+")
_NULL_ESCAPE = re.compile(r"\\0(?![0-9])")
_HEX_ESCAPE = re.compile(r"\\x([0-9a-fA-F]{2})")
_UNICODE_ESCAPE = re.compile(r"\\u([0-9a-fA-F]{4})")
_CHAR_ESCAPE = re.compile(r"\\(['\"\\bfnrtv])")
_ANY_ESCAPE = re.compile(r"\\(.)")

_CHAR_ESCAPES = {
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\x0b",
}

_INTEGER = re.compile(r"[1-9][0-9]+|[0-9]")
_DIGITS = re.compile(r"[0-9]+")
_EXPONENT_MARK = re.compile(r"[eE][+-]?")


class PatternSyntaxError(SyntaxError):
    """Malformed pattern text, reported with a caret under the failing column."""

    def __init__(self, reason: str, column: int, source: str, consumed: int) -> None:
        message = f"{reason} at column {column}\n{source}\n{' ' * consumed}^"
        super().__init__(message)
        self.message = message
        self.reason = reason
        self.column = column
        self.source = source

    def __str__(self) -> str:
        return self.message


@dataclass
class Cursor:
    """Consumable view over pattern text.

    ``buffer`` is the unconsumed remainder of ``source`` and ``pos`` the
    number of characters taken so far.
    """

    source: str
    buffer: str = field(init=False)
    pos: int = 0

    def __post_init__(self) -> None:
        self.buffer = self.source

    def take(self, length: int) -> str:
        chunk = self.buffer[:length]
        self.buffer = self.buffer[length:]
        self.pos += len(chunk)
        return chunk

    def peek(self, token: str | re.Pattern[str]) -> str | re.Match[str] | None:
        if isinstance(token, re.Pattern):
            return token.match(self.buffer)
        return token if self.buffer.startswith(token) else None

    def take_peek(self, token: str | re.Pattern[str]) -> str | re.Match[str] | None:
        found = self.peek(token)
        if found is None:
            return None
        self.take(len(found[0]) if isinstance(found, re.Match) else len(found))
        return found

    def skip_ws(self) -> "Cursor":
        self.take_peek(_WHITESPACE)
        return self

    def put(self, text: str) -> "Cursor":
        self.buffer = text + self.buffer
        self.pos = max(0, self.pos - len(text))
        return self

    def at_end(self) -> bool:
        return not self.buffer

    def error(self, reason: str = "Unexpected character") -> NoReturn:
        consumed = len(self.source) - len(self.buffer)
        raise PatternSyntaxError(reason, self.pos + 1, self.source, consumed)


def _scan_escape(cursor: Cursor) -> str | None:
    if cursor.take_peek(_NULL_ESCAPE):
        return "\0"
    for numeric in (_HEX_ESCAPE, _UNICODE_ESCAPE):
        match = cursor.take_peek(numeric)
        if match:
            return chr(int(match[1], 16))
    match = cursor.take_peek(_CHAR_ESCAPE)
    if match:
        return _CHAR_ESCAPES.get(match[1], match[1])
    match = cursor.take_peek(_ANY_ESCAPE)
    if match:
        return match[1]
    return None


def _scan_quoted(cursor: Cursor, quote_char: str, chars: re.Pattern[str]) -> str | None:
    if not cursor.take_peek(quote_char):
        return None
    out: list[str] = []
    while True:
        match = cursor.take_peek(chars)
        if match:
            out.append(match[0])
            continue
        if cursor.peek("\\"):
            escaped = _scan_escape(cursor)
            if escaped is None:
                break
            out.append(escaped)
            continue
        break
    if not cursor.take_peek(quote_char):
        cursor.error(f"Expected {quote_char}")
    return "".join(out)


def scan_string(cursor: Cursor) -> str | None:
    found = _scan_quoted(cursor, '"', _DOUBLE_QUOTED_CHARS)
    if found is None:
        found = _scan_quoted(cursor, "'", _SINGLE_QUOTED_CHARS)
    return found


def scan_number(cursor: Cursor) -> int | float | None:
    text = ""
    if cursor.take_peek("-"):
        text = "-"

    integer = cursor.take_peek(_INTEGER)
    if integer:
        text += integer[0]

    is_float = False
    if cursor.take_peek("."):
        digits = cursor.take_peek(_DIGITS)
        if not digits:
            cursor.error("Expected digit")
        text += "." + digits[0]
        is_float = True

    if text and text != "-":
        mark = cursor.take_peek(_EXPONENT_MARK)
        if mark:
            digits = cursor.take_peek(_DIGITS)
            if not digits:
                cursor.error("Expected digit")
            text += mark[0] + digits[0]
            is_float = True

    if text == "-":
        cursor.error("Expected number")
    if not text:
        return None
    return float(text) if is_float else int(text)
