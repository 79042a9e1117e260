"""AST nodes for the pattern grammar, with canonical serialization."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import ClassVar, Literal, Union

_QUOTE_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\f": "\\f",
    "\r": "\\r",
}


def quote(text: str) -> str:
    """Render ``text`` as a double-quoted literal in the canonical escaping."""
    out: list[str] = ['"']
    for ch in text:
        escaped = _QUOTE_ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
            continue
        code = ord(ch)
        if code <= 0x07 or code == 0x0B or 0x0E <= code <= 0x1F or 0x80 <= code <= 0xFF:
            out.append(f"\\x{code:02x}")
        elif 0x100 <= code <= 0xFFFF:
            out.append(f"\\u{code:04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


def render_number(value: int | float) -> str:
    if isinstance(value, int):
        return str(value)
    if math.isinf(value):
        return "1e999" if value > 0 else "-1e999"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _joined(items: tuple["Node", ...]) -> str:
    return ",".join(item.canonical for item in items)


class Node:
    """Common surface of every pattern node."""

    kind: ClassVar[str] = "node"

    @property
    def canonical(self) -> str:
        raise NotImplementedError

    @property
    def children(self) -> tuple["Node", ...]:
        return ()


@dataclass(frozen=True)
class Wildcard(Node):
    kind: ClassVar[str] = "wildcard"

    @property
    def canonical(self) -> str:
        return "_"


@dataclass(frozen=True)
class NullLiteral(Node):
    kind: ClassVar[str] = "null"

    @property
    def canonical(self) -> str:
        return "null"


@dataclass(frozen=True)
class UndefinedLiteral(Node):
    kind: ClassVar[str] = "undefined"

    @property
    def canonical(self) -> str:
        return "undefined"


@dataclass(frozen=True)
class BooleanLiteral(Node):
    value: bool
    kind: ClassVar[str] = "boolean"

    @property
    def canonical(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True)
class NumberLiteral(Node):
    value: int | float
    kind: ClassVar[str] = "number"

    @property
    def canonical(self) -> str:
        return render_number(self.value)


@dataclass(frozen=True)
class StringLiteral(Node):
    value: str
    kind: ClassVar[str] = "string"

    @property
    def canonical(self) -> str:
        return quote(self.value)


@dataclass(frozen=True)
class Identifier(Node):
    name: str
    kind: ClassVar[str] = "identifier"

    @property
    def canonical(self) -> str:
        return self.name


@dataclass(frozen=True)
class Binder(Node):
    name: str
    pattern: "Pattern"
    kind: ClassVar[str] = "binder"

    @property
    def canonical(self) -> str:
        return f"{self.name}@{self.pattern.canonical}"

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.pattern,)


@dataclass(frozen=True)
class RestElement(Node):
    pattern: "Pattern" = Wildcard()
    kind: ClassVar[str] = "rest"

    @property
    def canonical(self) -> str:
        if isinstance(self.pattern, Wildcard):
            return "..."
        return f"...{self.pattern.canonical}"

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.pattern,)


@dataclass(frozen=True)
class Array(Node):
    items: tuple["Pattern | RestElement", ...]
    kind: ClassVar[str] = "array"

    @property
    def canonical(self) -> str:
        return f"[{_joined(self.items)}]"

    @property
    def children(self) -> tuple[Node, ...]:
        return self.items


@dataclass(frozen=True)
class Key(Node):
    name: str
    kind: ClassVar[str] = "key"

    @property
    def canonical(self) -> str:
        return quote(self.name)


@dataclass(frozen=True)
class KeyValue(Node):
    name: str
    pattern: "Pattern"
    kind: ClassVar[str] = "keyValue"

    @property
    def canonical(self) -> str:
        return f"{quote(self.name)}:{self.pattern.canonical}"

    @property
    def children(self) -> tuple[Node, ...]:
        return (self.pattern,)


@dataclass(frozen=True)
class Object(Node):
    items: tuple["ObjectItem", ...]
    kind: ClassVar[str] = "object"

    @property
    def canonical(self) -> str:
        return f"{{{_joined(self.items)}}}"

    @property
    def children(self) -> tuple[Node, ...]:
        return self.items


DestructureKind = Literal["none", "positional", "keyed"]


@dataclass(frozen=True)
class ClassPattern(Node):
    name: str
    destructure: DestructureKind = "none"
    pattern: Array | Object | None = None
    kind: ClassVar[str] = "class"

    def __post_init__(self) -> None:
        expected = {"none": type(None), "positional": Array, "keyed": Object}[self.destructure]
        if not isinstance(self.pattern, expected):
            raise TypeError(f"ClassPattern {self.destructure!r} destructure cannot hold {type(self.pattern).__name__}")

    @property
    def canonical(self) -> str:
        if isinstance(self.pattern, Array):
            return f"{self.name}({_joined(self.pattern.items)})"
        if isinstance(self.pattern, Object):
            return f"{self.name}{self.pattern.canonical}"
        return self.name

    @property
    def children(self) -> tuple[Node, ...]:
        return () if self.pattern is None else (self.pattern,)


@dataclass(frozen=True)
class Extractor(Node):
    name: str
    pattern: "Pattern | None" = None
    kind: ClassVar[str] = "extractor"

    @property
    def canonical(self) -> str:
        if self.pattern is None:
            return f"${self.name}"
        return f"${self.name}({self.pattern.canonical})"

    @property
    def children(self) -> tuple[Node, ...]:
        return () if self.pattern is None else (self.pattern,)


@dataclass(frozen=True)
class ArgumentList(Node):
    items: tuple["Pattern | RestElement", ...]
    kind: ClassVar[str] = "argumentList"

    @property
    def canonical(self) -> str:
        return _joined(self.items)

    @property
    def children(self) -> tuple[Node, ...]:
        return self.items


Pattern = Union[
    Wildcard,
    NullLiteral,
    UndefinedLiteral,
    BooleanLiteral,
    NumberLiteral,
    StringLiteral,
    Identifier,
    Binder,
    Array,
    Object,
    ClassPattern,
    Extractor,
]
ObjectItem = Union[Key, KeyValue, RestElement]
