"""Alternation chain of (procedure, callback) matchers."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from loguru import logger

from .errors import PatternsExhausted

_TRACE_DISPATCH = os.environ.get("MATCHES_TRACE_DISPATCH", "0") == "1"

Procedure = Callable[[tuple[object, ...]], Sequence[object] | None]
Callback = Callable[..., object]


def _link(nodes: Sequence["Matcher"], tail: "Matcher | None" = None) -> "Matcher | None":
    chain = tail
    for node in reversed(nodes):
        chain = Matcher(node.procedure, node.callback, chain)
    return chain


@dataclass(frozen=True, eq=False)
class Matcher:
    """Immutable node of a singly-linked alternation list.

    Extending a chain rebuilds its nodes and links the result in front of the
    new tail, so any chain already handed out keeps its alternatives.
    """

    procedure: Procedure
    callback: Callback
    next: "Matcher | None" = None

    def match(self, args: tuple[object, ...]) -> object:
        node: Matcher | None = self
        position = 0
        while node is not None:
            captures = node.procedure(args)
            if _TRACE_DISPATCH:
                logger.debug(
                    "alternative {} ({}) {}",
                    position,
                    getattr(node.procedure, "canonical", node.procedure),
                    "matched" if captures is not None else "failed",
                )
            if captures is not None:
                return node.callback(*captures)
            node = node.next
            position += 1
        raise PatternsExhausted(args)

    def __iter__(self) -> Iterator["Matcher"]:
        node: Matcher | None = self
        while node is not None:
            yield node
            node = node.next

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def clone(self) -> "Matcher":
        """Structurally independent copy sharing procedures and callbacks."""
        cloned = _link(list(self))
        assert cloned is not None
        return cloned

    def last(self) -> "Matcher":
        node = self
        while node.next is not None:
            node = node.next
        return node

    def pop(self) -> tuple["Matcher | None", "Matcher"]:
        """Split off the tail: ``(chain without tail, tail)``."""
        nodes = list(self)
        return _link(nodes[:-1]), nodes[-1]

    def append(self, other: "Matcher") -> "Matcher":
        """New chain running this chain's alternatives, then ``other``'s."""
        extended = _link(list(self), other)
        assert extended is not None
        return extended

    def extend(self, procedure: Procedure, callback: Callback) -> "Matcher":
        return self.append(Matcher(procedure, callback))
