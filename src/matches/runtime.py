"""Runtime support used by compiled patterns: type tags, extractors, sum types."""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Collection, Iterator, Mapping, MutableMapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol, overload

from loguru import logger

from .errors import UnregisteredExtractorError
from .values import ValueKind, is_mapping, is_sequence, kind_of


@dataclass(frozen=True)
class Pass:
    """Success wrapper an extractor returns around the extracted value.

    A plain sentinel cannot signal failure because ``None`` and ``UNDEFINED``
    are valid values to extract.
    """

    value: object


ExtractorFn = Callable[[object, type[Pass]], object]

_BUILTIN_TAGS: dict[str, ValueKind] = {
    "Null": ValueKind.NULL,
    "Undefined": ValueKind.UNDEFINED,
    "Boolean": ValueKind.BOOLEAN,
    "Number": ValueKind.NUMBER,
    "String": ValueKind.STRING,
    "Array": ValueKind.SEQUENCE,
    "Object": ValueKind.MAPPING,
    "Function": ValueKind.CALLABLE,
    "Date": ValueKind.DATE,
    "RegExp": ValueKind.REGEXP,
}


class SumTypeRegistry(Protocol):
    """Tagged-sum-type collaborator consulted by class patterns."""

    def lookup(self, name: str) -> Collection[type] | None: ...

    def slot(self, value: object, index: int) -> object: ...

    def arity(self, value: object) -> int: ...


def _slot_names(cls: type) -> tuple[str, ...]:
    match_args = getattr(cls, "__match_args__", None)
    if match_args is not None:
        return tuple(match_args)
    if dataclasses.is_dataclass(cls):
        return tuple(f.name for f in dataclasses.fields(cls))
    raise TypeError(f"{cls.__name__} exposes neither __match_args__ nor dataclass fields")


class VariantRegistry:
    """Sum-type registry for dataclass or ``__match_args__`` based variants."""

    def __init__(self) -> None:
        self._types: dict[str, tuple[type, ...]] = {}

    def register(self, name: str, *variants: type) -> None:
        for variant in variants:
            _slot_names(variant)
        self._types[name] = self._types.get(name, ()) + tuple(variants)
        for variant in variants:
            self._types.setdefault(variant.__name__, (variant,))
        logger.debug("registered sum type {} with variants {}", name, [v.__name__ for v in variants])

    def lookup(self, name: str) -> Collection[type] | None:
        return self._types.get(name)

    def slot(self, value: object, index: int) -> object:
        return getattr(value, _slot_names(type(value))[index])

    def arity(self, value: object) -> int:
        return len(_slot_names(type(value)))


class ExtractorRegistry(MutableMapping[str, ExtractorFn]):
    """Named extractor functions callable from ``$name`` patterns."""

    def __init__(self, data: Mapping[str, ExtractorFn] | None = None) -> None:
        self._extractors: dict[str, ExtractorFn] = {}
        if data is not None:
            self.update(data)

    def __getitem__(self, name: str) -> ExtractorFn:
        return self._extractors[name]

    def __setitem__(self, name: str, fn: ExtractorFn) -> None:
        if not callable(fn):
            raise TypeError(f"Extractor {name!r} must be callable, got {type(fn).__name__}")
        self._extractors[name] = fn
        logger.debug("registered extractor {}", name)

    def __delitem__(self, name: str) -> None:
        del self._extractors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._extractors)

    def __len__(self) -> int:
        return len(self._extractors)

    @overload
    def register(self, name: str) -> Callable[[ExtractorFn], ExtractorFn]: ...

    @overload
    def register(self, name: str, fn: ExtractorFn) -> ExtractorFn: ...

    def register(self, name: str, fn: ExtractorFn | None = None):
        if fn is not None:
            self[name] = fn
            return fn

        def decorator(func: ExtractorFn) -> ExtractorFn:
            self[name] = func
            return func

        return decorator

    def unregister(self, name: str) -> ExtractorFn | None:
        fn = self._extractors.pop(name, None)
        if fn is not None:
            logger.debug("unregistered extractor {}", name)
        return fn

    def call(self, name: str, value: object) -> object:
        fn = self._extractors.get(name)
        if fn is None:
            raise UnregisteredExtractorError(name)
        return fn(value, Pass)


@dataclass
class Runtime:
    """Hooks a compiled pattern consults while matching."""

    extractors: ExtractorRegistry = field(default_factory=ExtractorRegistry)
    sum_types: SumTypeRegistry | None = None

    def _variant_of(self, value: object, name: str) -> type | None:
        if self.sum_types is None:
            return None
        for variant in self.sum_types.lookup(name) or ():
            if isinstance(value, variant):
                return variant
        return None

    def matches_type_name(self, value: object, name: str) -> bool:
        tag = _BUILTIN_TAGS.get(name)
        if tag is not None and kind_of(value) is tag:
            return True
        cls = type(value)
        if cls.__name__ == name or getattr(cls, "class_name", None) == name:
            return True
        return self._variant_of(value, name) is not None

    def call_extractor(self, name: str, value: object) -> object:
        return self.extractors.call(name, value)

    def positional(self, value: object, name: str) -> Sequence[object] | None:
        """Positional components of ``value``, or ``None`` when it has no hook."""
        unapply = getattr(type(value), "unapply", None)
        if unapply is not None:
            return unapply(value)
        if self._variant_of(value, name) is not None:
            assert self.sum_types is not None
            return [self.sum_types.slot(value, index) for index in range(self.sum_types.arity(value))]
        match_args = getattr(type(value), "__match_args__", None)
        if match_args is not None:
            return [getattr(value, attr) for attr in match_args]
        if is_sequence(value):
            return value
        return None

    def keyed(self, value: object) -> Mapping[str, object] | None:
        """Keyed components of ``value``, or ``None`` when it has no hook."""
        unapply_mapping = getattr(type(value), "unapply_mapping", None)
        if unapply_mapping is not None:
            return unapply_mapping(value)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        as_dict = getattr(value, "_asdict", None)
        if as_dict is not None:
            return as_dict()
        if is_mapping(value):
            return value
        return None


default_runtime = Runtime()
