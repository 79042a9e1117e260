"""matches public API."""

from .parser import PatternSyntaxError, canonicalize, parse
from .errors import (
    MatchesError,
    MatchesSyntaxError,
    NotAMatcherError,
    PatternsExhausted,
    UnregisteredExtractorError,
)
from .compiler import CompiledPattern, compile_tree
from .matcher import Matcher
from .cache import PatternCache
from .runtime import ExtractorRegistry, Pass, Runtime, SumTypeRegistry, VariantRegistry
from .values import UNDEFINED, ValueKind, kind_of
from .dispatch import (
    Dispatcher,
    MatchEnvironment,
    case_of,
    compile,
    compile_with_errors,
    default_environment,
    extract,
    extractor,
    pattern,
)

extractors = default_environment.extractors

__all__ = [
    "CompiledPattern",
    "Dispatcher",
    "ExtractorRegistry",
    "MatchEnvironment",
    "Matcher",
    "MatchesError",
    "MatchesSyntaxError",
    "NotAMatcherError",
    "Pass",
    "PatternCache",
    "PatternSyntaxError",
    "PatternsExhausted",
    "Runtime",
    "SumTypeRegistry",
    "UNDEFINED",
    "UnregisteredExtractorError",
    "ValueKind",
    "VariantRegistry",
    "canonicalize",
    "case_of",
    "compile",
    "compile_tree",
    "compile_with_errors",
    "default_environment",
    "extract",
    "extractor",
    "extractors",
    "kind_of",
    "parse",
    "pattern",
]
