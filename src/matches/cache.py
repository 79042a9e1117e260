"""Two-level memoization of compiled patterns: raw text and canonical form."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field

from loguru import logger

from .compiler import CompiledPattern, compile_tree
from .parser import parse
from .runtime import Runtime, default_runtime

_USE_PATTERN_CACHE = os.environ.get("MATCHES_DISABLE_PATTERN_CACHE", "0") != "1"


@dataclass
class PatternCache:
    """Append-only pattern cache; entries are never evicted.

    Raw pattern text maps straight to its procedure. On a raw miss the text is
    parsed and its canonical form looked up, so spellings that differ only in
    whitespace or quoting share one compiled procedure.
    """

    runtime: Runtime = field(default_factory=lambda: default_runtime)
    enabled: bool = _USE_PATTERN_CACHE
    _raw: dict[str, CompiledPattern] = field(default_factory=dict, init=False, repr=False)
    _canonical: dict[str, CompiledPattern] = field(default_factory=dict, init=False, repr=False)
    _gates: dict[str, threading.Lock] = field(default_factory=dict, init=False, repr=False)
    _canonical_gates: dict[str, threading.Lock] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    _stats: dict[str, int] = field(
        default_factory=lambda: {"raw_hits": 0, "canonical_hits": 0, "compiles": 0},
        init=False,
        repr=False,
    )

    def compile(self, text: str) -> CompiledPattern:
        if not self.enabled:
            self._stats["compiles"] += 1
            return compile_tree(parse(text), self.runtime)

        cached = self._raw.get(text)
        if cached is not None:
            self._stats["raw_hits"] += 1
            return cached

        # One gate per raw text so concurrent first compiles converge.
        with self._lock:
            gate = self._gates.setdefault(text, threading.Lock())
        with gate:
            cached = self._raw.get(text)
            if cached is not None:
                self._stats["raw_hits"] += 1
                return cached

            tree = parse(text)
            key = tree.canonical
            # Different spellings of one pattern also converge on one procedure.
            with self._lock:
                canonical_gate = self._canonical_gates.setdefault(key, threading.Lock())
            with canonical_gate:
                procedure = self._canonical.get(key)
                if procedure is not None:
                    self._stats["canonical_hits"] += 1
                    logger.debug("pattern {!r} reuses canonical procedure {!r}", text, key)
                else:
                    procedure = compile_tree(tree, self.runtime)
                    self._canonical[key] = procedure
                    self._stats["compiles"] += 1
                    logger.debug("compiled pattern {!r} with {} captures", key, procedure.arity)
            self._raw[text] = procedure
            return procedure

    def lookup(self, text: str) -> CompiledPattern | None:
        """Return a cached procedure without compiling."""
        return self._raw.get(text)

    def __contains__(self, text: object) -> bool:
        return text in self._raw

    def __len__(self) -> int:
        return len(self._canonical)

    def stats(self, *, reset: bool = False) -> dict[str, float | int]:
        raw_hits = self._stats["raw_hits"]
        canonical_hits = self._stats["canonical_hits"]
        compiles = self._stats["compiles"]
        total = raw_hits + canonical_hits + compiles
        stats: dict[str, float | int] = {
            "raw_hits": raw_hits,
            "canonical_hits": canonical_hits,
            "compiles": compiles,
            "raw_size": len(self._raw),
            "canonical_size": len(self._canonical),
            "enabled": self.enabled,
            "hit_rate": float((raw_hits + canonical_hits) / total) if total else 0.0,
        }
        if reset:
            for name in self._stats:
                self._stats[name] = 0
        return stats
