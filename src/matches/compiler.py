"""Compile pattern ASTs into matching procedures built from nested closures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

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
    RestElement,
    StringLiteral,
    UndefinedLiteral,
    Wildcard,
)
from .runtime import Pass, Runtime, default_runtime
from .values import UNDEFINED, is_mapping, is_sequence, number_equals, sequence_length, sequence_span

# A fragment checks one value, appending captures to ``out``; False aborts the match.
Fragment = Callable[[object, list[object]], bool]
RestFragment = Callable[[object, int, int, list[object]], bool]


def count_captures(node: Node) -> int:
    """Number of values a pattern node captures on a successful match."""
    own = 1 if isinstance(node, (Identifier, Key, Binder)) else 0
    return own + sum(count_captures(child) for child in node.children)


def _always(value: object, out: list[object]) -> bool:
    return True


def _capture(value: object, out: list[object]) -> bool:
    out.append(value)
    return True


def _rest_index(items: Sequence[Node]) -> int | None:
    for index, item in enumerate(items):
        if isinstance(item, RestElement):
            return index
    return None


@dataclass(frozen=True)
class CompiledPattern:
    """Matching procedure: positional arguments in, captures or ``None`` out."""

    canonical: str
    arity: int
    _match: Fragment = field(repr=False, compare=False)

    def __call__(self, args: Sequence[object]) -> tuple[object, ...] | None:
        captures: list[object] = []
        if self._match(tuple(args), captures):
            return tuple(captures)
        return None


@dataclass(frozen=True)
class _Compiler:
    runtime: Runtime

    def pattern(self, node: Node) -> Fragment:
        if isinstance(node, Wildcard):
            return _always
        if isinstance(node, Identifier):
            return _capture
        if isinstance(node, NullLiteral):
            return lambda value, out: value is None
        if isinstance(node, UndefinedLiteral):
            return lambda value, out: value is UNDEFINED
        if isinstance(node, BooleanLiteral):
            expected = node.value
            return lambda value, out: value is expected
        if isinstance(node, NumberLiteral):
            number = node.value
            return lambda value, out: number_equals(value, number)
        if isinstance(node, StringLiteral):
            text = node.value
            return lambda value, out: isinstance(value, str) and value == text
        if isinstance(node, Binder):
            return self.binder(node)
        if isinstance(node, (Array, ArgumentList)):
            return self.array(node.items)
        if isinstance(node, Object):
            return self.object(node)
        if isinstance(node, ClassPattern):
            return self.class_pattern(node)
        if isinstance(node, Extractor):
            return self.extractor(node)
        raise TypeError(f"Cannot compile {type(node).__name__} outside of a sequence or object pattern")

    def binder(self, node: Binder) -> Fragment:
        inner = self.pattern(node.pattern)

        def match_binder(value: object, out: list[object]) -> bool:
            out.append(value)
            return inner(value, out)

        return match_binder

    def array(self, items: tuple[Node, ...]) -> Fragment:
        rest_at = _rest_index(items)
        if rest_at is None:
            return self._array_exact(items)
        return self._array_rest(items, rest_at)

    def _array_exact(self, items: tuple[Node, ...]) -> Fragment:
        fragments = tuple(self.pattern(item) for item in items)
        size = len(fragments)

        def match_array(value: object, out: list[object]) -> bool:
            if not is_sequence(value) or sequence_length(value) != size:
                return False
            for index, fragment in enumerate(fragments):
                if not fragment(value[index], out):
                    return False
            return True

        return match_array

    def _array_rest(self, items: tuple[Node, ...], rest_at: int) -> Fragment:
        head = tuple(self.pattern(item) for item in items[:rest_at])
        tail = tuple(self.pattern(item) for item in items[rest_at + 1 :])
        rest = self.rest(items[rest_at])
        min_size = len(items) - 1
        tail_size = len(tail)

        def match_array_rest(value: object, out: list[object]) -> bool:
            if not is_sequence(value):
                return False
            length = sequence_length(value)
            if length < min_size:
                return False
            for index, fragment in enumerate(head):
                if not fragment(value[index], out):
                    return False
            stop = length - tail_size
            if not rest(value, rest_at, stop, out):
                return False
            for offset, fragment in enumerate(tail):
                if not fragment(value[stop + offset], out):
                    return False
            return True

        return match_array_rest

    def rest(self, node: RestElement) -> RestFragment:
        sub = node.pattern
        if isinstance(sub, Wildcard):
            return lambda value, start, stop, out: True
        if isinstance(sub, Identifier):

            def capture_span(value: object, start: int, stop: int, out: list[object]) -> bool:
                out.append(sequence_span(value, start, stop))
                return True

            return capture_span

        # Any other sub-pattern runs on every element of the span; each of its
        # capture slots aggregates into its own list.
        element = self.pattern(sub)
        slot_count = count_captures(sub)

        def match_each(value: object, start: int, stop: int, out: list[object]) -> bool:
            slots: list[list[object]] = [[] for _ in range(slot_count)]
            for index in range(start, stop):
                captured: list[object] = []
                if not element(value[index], captured):
                    return False
                for slot, item in zip(slots, captured):
                    slot.append(item)
            out.extend(slots)
            return True

        return match_each

    def object(self, node: Object) -> Fragment:
        keys = frozenset(item.name for item in node.items if not isinstance(item, RestElement))
        exact = _rest_index(node.items) is None
        steps: list[Fragment] = []
        for item in node.items:
            if isinstance(item, RestElement):
                if isinstance(item.pattern, Identifier):
                    steps.append(self._object_rest_capture(keys))
            elif isinstance(item, Key):
                steps.append(self._object_key(item.name, _capture))
            else:
                steps.append(self._object_key(item.name, self.pattern(item.pattern)))

        def match_object(value: object, out: list[object]) -> bool:
            if not is_mapping(value):
                return False
            if exact:
                if value.keys() != keys:
                    return False
            elif not all(key in value for key in keys):
                return False
            for step in steps:
                if not step(value, out):
                    return False
            return True

        return match_object

    def _object_key(self, key: str, inner: Fragment) -> Fragment:
        return lambda value, out: inner(value[key], out)

    def _object_rest_capture(self, declared: frozenset[str]) -> Fragment:
        def capture_rest(value: object, out: list[object]) -> bool:
            out.append({key: item for key, item in value.items() if key not in declared})
            return True

        return capture_rest

    def class_pattern(self, node: ClassPattern) -> Fragment:
        runtime = self.runtime
        name = node.name

        if node.destructure == "none":
            return lambda value, out: runtime.matches_type_name(value, name)

        if node.destructure == "positional":
            inner = self.array(node.pattern.items)

            def match_positional(value: object, out: list[object]) -> bool:
                if not runtime.matches_type_name(value, name):
                    return False
                components = runtime.positional(value, name)
                return components is not None and inner(components, out)

            return match_positional

        inner = self.object(node.pattern)

        def match_keyed(value: object, out: list[object]) -> bool:
            if not runtime.matches_type_name(value, name):
                return False
            components = runtime.keyed(value)
            return components is not None and inner(components, out)

        return match_keyed

    def extractor(self, node: Extractor) -> Fragment:
        runtime = self.runtime
        name = node.name
        inner = _always if node.pattern is None else self.pattern(node.pattern)

        def match_extractor(value: object, out: list[object]) -> bool:
            result = runtime.call_extractor(name, value)
            if not isinstance(result, Pass):
                return False
            return inner(result.value, out)

        return match_extractor


def compile_tree(tree: ArgumentList, runtime: Runtime | None = None) -> CompiledPattern:
    compiler = _Compiler(default_runtime if runtime is None else runtime)
    return CompiledPattern(
        canonical=tree.canonical,
        arity=count_captures(tree),
        _match=compiler.array(tree.items),
    )
