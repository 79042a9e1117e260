"""Recursive-descent parser for pattern text."""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from .ast import (
    ArgumentList,
    Array,
    Binder,
    BooleanLiteral,
    ClassPattern,
    Extractor,
    Identifier,
    Key,
    KeyValue,
    Node,
    NullLiteral,
    NumberLiteral,
    Object,
    ObjectItem,
    Pattern,
    RestElement,
    StringLiteral,
    UndefinedLiteral,
    Wildcard,
)
from .lexer import (
    BOOLEAN_WORD,
    CLASS_NAME,
    EXTRACTOR_NAME,
    IDENT,
    KEY_IDENT,
    NULL_WORD,
    UNDEFINED_WORD,
    Cursor,
    PatternSyntaxError,
    scan_number,
    scan_string,
)

# Keywords are literals, never capture names.
_POSTFIX_REST = re.compile(r"(?!(?:null|undefined|true|false)\b)([a-z][_$a-zA-Z0-9]*)\.\.\.")

_T = TypeVar("_T", bound=Node)


@dataclass
class _Parser:
    cursor: Cursor

    def parse_argument_list(self) -> ArgumentList:
        self.cursor.skip_ws()
        items = self._rest_patterns()
        if self.cursor.skip_ws().buffer:
            self.cursor.error()
        return ArgumentList(items=tuple(items))

    def _first(self, *alternatives: Callable[[], Node | None]) -> Node | None:
        for alternative in alternatives:
            node = alternative()
            if node is not None:
                return node
        return None

    def _comma_separated(self, parse_item: Callable[[], _T | None]) -> list[_T]:
        items: list[_T] = []
        seen_rest = False
        while True:
            before = self.cursor.buffer
            item = parse_item()
            if item is None:
                break
            if isinstance(item, RestElement):
                if seen_rest:
                    # Rewind so the caret lands on the start of the offending rest.
                    self.cursor.put(before[: len(before) - len(self.cursor.buffer)])
                    self.cursor.error("Multiple ...'s not allowed")
                seen_rest = True
            items.append(item)
            if self.cursor.skip_ws().take_peek(","):
                self.cursor.skip_ws()
            else:
                break
        return items

    def _series(self, open_: str, close: str, parse_inner: Callable[[], list[_T]]) -> list[_T] | None:
        if not self.cursor.take_peek(open_):
            return None
        self.cursor.skip_ws()
        inner = parse_inner()
        if not self.cursor.skip_ws().take_peek(close):
            self.cursor.error(f"Expected {close}")
        return inner

    def _rest_patterns(self) -> list[Pattern | RestElement]:
        return self._comma_separated(self._rest_pattern)

    def _rest_pattern(self) -> Pattern | RestElement | None:
        return self._first(self._rest, self._pattern)

    def _rest(self) -> RestElement | None:
        postfix = self.cursor.take_peek(_POSTFIX_REST)
        if postfix:
            return RestElement(Identifier(postfix[1]))
        if not self.cursor.take_peek("..."):
            return None
        sub = self._pattern()
        return RestElement(Wildcard() if sub is None else sub)

    def _pattern(self) -> Pattern | None:
        return self._first(
            self._wildcard,
            self._null,
            self._undefined,
            self._boolean,
            self._number,
            self._string,
            self._class_pattern,
            self._extractor,
            self._array,
            self._object,
            self._ident_or_binder,
        )

    def _wildcard(self) -> Wildcard | None:
        if self.cursor.take_peek("_"):
            return Wildcard()
        return None

    def _null(self) -> NullLiteral | None:
        if self.cursor.take_peek(NULL_WORD):
            return NullLiteral()
        return None

    def _undefined(self) -> UndefinedLiteral | None:
        if self.cursor.take_peek(UNDEFINED_WORD):
            return UndefinedLiteral()
        return None

    def _boolean(self) -> BooleanLiteral | None:
        match = self.cursor.take_peek(BOOLEAN_WORD)
        if match:
            return BooleanLiteral(match[1] == "true")
        return None

    def _number(self) -> NumberLiteral | None:
        value = scan_number(self.cursor)
        if value is None:
            return None
        return NumberLiteral(value)

    def _string(self) -> StringLiteral | None:
        value = scan_string(self.cursor)
        if value is None:
            return None
        return StringLiteral(value)

    def _class_pattern(self) -> ClassPattern | None:
        match = self.cursor.take_peek(CLASS_NAME)
        if not match:
            return None
        name = match[0]

        keyed = self._object()
        if keyed is not None:
            return ClassPattern(name, "keyed", keyed)

        # Positional destructuring uses parens instead of brackets.
        positional = self._series("(", ")", self._rest_patterns)
        if positional is not None:
            return ClassPattern(name, "positional", Array(tuple(positional)))

        return ClassPattern(name)

    def _extractor(self) -> Extractor | None:
        match = self.cursor.take_peek(EXTRACTOR_NAME)
        if not match:
            return None
        inner = self._series("(", ")", lambda: [self._pattern()])
        if inner is None:
            return Extractor(match[1])
        return Extractor(match[1], inner[0])

    def _array(self) -> Array | None:
        items = self._series("[", "]", self._rest_patterns)
        if items is None:
            return None
        return Array(tuple(items))

    def _object(self) -> Object | None:
        items = self._series("{", "}", self._object_patterns)
        if items is None:
            return None
        return Object(tuple(items))

    def _object_patterns(self) -> list[ObjectItem]:
        return self._comma_separated(self._object_pattern)

    def _object_pattern(self) -> ObjectItem | None:
        before = self.cursor.buffer
        rest = self._rest()
        if rest is not None:
            if not isinstance(rest.pattern, (Identifier, Wildcard)):
                self.cursor.put(before[: len(before) - len(self.cursor.buffer)])
                self.cursor.error("Expected identifier after ...")
            return rest

        name = self._key()
        if name is None:
            return None
        if self.cursor.skip_ws().take_peek(":"):
            self.cursor.skip_ws()
            sub = self._pattern()
            if sub is None:
                self.cursor.error("Expected pattern")
            return KeyValue(name, sub)
        return Key(name)

    def _key(self) -> str | None:
        quoted = scan_string(self.cursor)
        if quoted is not None:
            return quoted
        match = self.cursor.take_peek(KEY_IDENT)
        if match:
            return match[0]
        return None

    def _ident_or_binder(self) -> Identifier | Binder | None:
        match = self.cursor.take_peek(IDENT)
        if not match:
            return None
        name = match[0]
        if self.cursor.take_peek("@"):
            # Literals are left out: matching one already fixes the value.
            sub = self._first(self._class_pattern, self._array, self._object)
            if sub is None:
                self.cursor.error("Expected class, array or object pattern")
            return Binder(name, sub)
        return Identifier(name)


def parse(text: str) -> ArgumentList:
    return _Parser(Cursor(text)).parse_argument_list()


def canonicalize(text: str) -> str:
    """Return the canonical spelling of ``text`` used as a cache key."""
    return parse(text).canonical


__all__ = ["PatternSyntaxError", "canonicalize", "parse"]
