"""Runtime value model and classifiers for matched values."""

from __future__ import annotations

import datetime
import numbers
import re
from collections.abc import Mapping
from enum import Enum

import jax.numpy as jnp


class _Undefined:
    """Distinct no-value sentinel, separate from ``None``."""

    _instance: "_Undefined | None" = None

    def __new__(cls) -> "_Undefined":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class ValueKind(str, Enum):
    NULL = "null"
    UNDEFINED = "undefined"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    CALLABLE = "callable"
    DATE = "date"
    REGEXP = "regexp"
    INSTANCE = "instance"


def is_array_value(value: object) -> bool:
    return isinstance(value, jnp.ndarray)


def is_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, numbers.Number):
        return True
    if is_array_value(value):
        return value.ndim == 0 and not jnp.issubdtype(value.dtype, jnp.bool_)
    return False


def is_sequence(value: object) -> bool:
    if isinstance(value, (list, tuple)):
        return True
    if is_array_value(value):
        return value.ndim >= 1
    return False


def is_mapping(value: object) -> bool:
    return isinstance(value, Mapping)


def sequence_length(value) -> int:
    if is_array_value(value):
        return int(value.shape[0])
    return len(value)


def sequence_span(value, start: int, stop: int):
    """Return ``value[start:stop]``; Python sequences come back as a list."""
    if is_array_value(value):
        return value[start:stop]
    return list(value[start:stop])


def number_equals(value: object, literal: int | float) -> bool:
    if not is_number(value):
        return False
    return bool(value == literal)


def kind_of(value: object) -> ValueKind:
    if value is None:
        return ValueKind.NULL
    if value is UNDEFINED:
        return ValueKind.UNDEFINED
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if is_number(value):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if is_sequence(value):
        return ValueKind.SEQUENCE
    if is_mapping(value):
        return ValueKind.MAPPING
    if isinstance(value, (datetime.date, datetime.time)):
        return ValueKind.DATE
    if isinstance(value, re.Pattern):
        return ValueKind.REGEXP
    if callable(value):
        return ValueKind.CALLABLE
    return ValueKind.INSTANCE
