"""Dispatchers built from pattern alternatives, and the environment that owns them."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from loguru import logger

from .cache import PatternCache
from .compiler import CompiledPattern
from .errors import MatchesSyntaxError, NotAMatcherError
from .matcher import Callback, Matcher, Procedure
from .parser import PatternSyntaxError
from .runtime import ExtractorFn, ExtractorRegistry, Runtime, SumTypeRegistry, default_runtime


@dataclass(frozen=True)
class Dispatcher:
    """Callable front of a matcher chain: first matching alternative wins."""

    chain: Matcher
    environment: "MatchEnvironment" = field(repr=False, compare=False)

    def __call__(self, *args: object) -> object:
        return self.chain.match(args)

    def alt(self, source, callback: Callback | None = None) -> "Dispatcher":
        """Return a new dispatcher that tries this one's alternatives first."""
        return self.environment.pattern(source, callback, chain=self.chain)

    def __len__(self) -> int:
        return len(self.chain)


class MatchEnvironment:
    """Pattern cache plus the extractor and sum-type registries patterns consult."""

    def __init__(
        self,
        extractors: Mapping[str, ExtractorFn] | None = None,
        sum_types: SumTypeRegistry | None = None,
        *,
        runtime: Runtime | None = None,
    ) -> None:
        if runtime is None:
            runtime = Runtime(ExtractorRegistry(extractors), sum_types)
        else:
            if extractors is not None:
                runtime.extractors.update(extractors)
            if sum_types is not None:
                runtime.sum_types = sum_types
        self.runtime = runtime
        self.cache = PatternCache(runtime)

    @property
    def extractors(self) -> ExtractorRegistry:
        return self.runtime.extractors

    @property
    def sum_types(self) -> SumTypeRegistry | None:
        return self.runtime.sum_types

    @sum_types.setter
    def sum_types(self, registry: SumTypeRegistry | None) -> None:
        self.runtime.sum_types = registry

    def compile(self, text: str) -> CompiledPattern:
        return self.cache.compile(text)

    def compile_with_errors(self, text: str) -> tuple[CompiledPattern | None, MatchesSyntaxError | None]:
        try:
            return self.compile(text), None
        except PatternSyntaxError as err:
            return None, MatchesSyntaxError.from_syntax_error(err)

    def _dispatcher(self, procedure: Procedure, callback: Callback, chain: Matcher | None) -> Dispatcher:
        node = Matcher(procedure, callback)
        linked = node if chain is None else chain.append(node)
        logger.debug("dispatcher built with {} alternatives", len(linked))
        return Dispatcher(linked, self)

    def pattern(self, source, callback: Callback | None = None, *, chain: Matcher | None = None) -> Dispatcher:
        """Build a dispatcher, optionally extending ``chain``.

        ``source`` is one of:

        - pattern text, with ``callback`` receiving the captures;
        - a mapping of pattern text to callbacks, tried in insertion order;
        - a hand-written procedure ``(args) -> captures | None`` with ``callback``;
        - an existing :class:`Dispatcher`, whose alternatives are spliced in.
        """
        if isinstance(source, Dispatcher):
            if callback is not None:
                raise TypeError("A dispatcher is spliced without a callback")
            combined = source.chain if chain is None else chain.append(source.chain)
            head, last = combined.pop()
            return self._dispatcher(last.procedure, last.callback, head)

        if isinstance(source, Mapping):
            if callback is not None:
                raise TypeError("A pattern mapping carries its own callbacks")
            if not source:
                raise ValueError("Pattern mapping has no alternatives")
            dispatcher: Dispatcher | None = None
            for text, branch in source.items():
                dispatcher = self.pattern(text, branch, chain=chain)
                chain = dispatcher.chain
            assert dispatcher is not None
            return dispatcher

        if callback is None:
            if isinstance(source, str):
                raise TypeError(f"Pattern {source!r} needs a callback")
            raise NotAMatcherError(source)
        if not callable(callback):
            raise TypeError(f"Callback must be callable, got {type(callback).__name__}")

        if isinstance(source, str):
            return self._dispatcher(self.compile(source), callback, chain)
        if callable(source):
            return self._dispatcher(source, callback, chain)
        raise TypeError(f"Cannot build a pattern from {type(source).__name__}")

    def case_of(self, *args: object) -> object:
        """Match ``args[:-1]`` against ``args[-1]`` (a dispatcher or pattern mapping)."""
        if not args:
            raise TypeError("case_of() needs a matcher as its last argument")
        *values, matcher = args
        if isinstance(matcher, Mapping):
            matcher = self.pattern(matcher)
        elif not isinstance(matcher, Dispatcher):
            raise NotAMatcherError(matcher)
        return matcher(*values)

    def extract(self, text: str, *args: object) -> tuple[object, ...] | None:
        """Single-shot match: the captures, or ``None`` when ``text`` does not match."""
        return self.compile(text)(args)


default_environment = MatchEnvironment(runtime=default_runtime)


def _env(env: MatchEnvironment | None) -> MatchEnvironment:
    return default_environment if env is None else env


def compile(text: str, env: MatchEnvironment | None = None) -> CompiledPattern:
    return _env(env).compile(text)


def compile_with_errors(
    text: str, env: MatchEnvironment | None = None
) -> tuple[CompiledPattern | None, MatchesSyntaxError | None]:
    return _env(env).compile_with_errors(text)


def pattern(
    source,
    callback: Callback | None = None,
    *,
    chain: Matcher | None = None,
    env: MatchEnvironment | None = None,
) -> Dispatcher:
    return _env(env).pattern(source, callback, chain=chain)


def case_of(*args: object, env: MatchEnvironment | None = None) -> object:
    return _env(env).case_of(*args)


def extract(text: str, *args: object, env: MatchEnvironment | None = None) -> tuple[object, ...] | None:
    return _env(env).extract(text, *args)


def extractor(name: str, env: MatchEnvironment | None = None) -> Callable[[ExtractorFn], ExtractorFn]:
    """Decorator registering an extractor under ``name``."""
    return _env(env).extractors.register(name)


__all__ = [
    "Dispatcher",
    "MatchEnvironment",
    "case_of",
    "compile",
    "compile_with_errors",
    "default_environment",
    "extract",
    "extractor",
    "pattern",
]
