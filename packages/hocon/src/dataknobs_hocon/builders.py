"""Conversion between plain Python data and value trees."""

import datetime
from collections.abc import Mapping
from typing import Any

import numpy as np

from .exceptions import TypeMismatchError
from .values import (
    NULL,
    Array,
    Boolean,
    Duration,
    Float32,
    Float64,
    Int,
    Null,
    Object,
    String,
    Value,
)


def from_python(data: Any) -> Value:
    """Convert plain Python data into a value tree.

    Dicts become Objects, lists and tuples become Arrays, ``timedelta``
    becomes a Duration and numpy ``float32`` keeps its single precision.
    Existing Value nodes are passed through unchanged, so partially built
    trees (e.g. dicts holding Substitution nodes) convert as expected.

    Args:
        data: Data to convert

    Returns:
        Equivalent Value tree

    Raises:
        TypeMismatchError: If the data holds a type with no value kind
    """
    if isinstance(data, Value):
        return data
    if data is None:
        return NULL
    if isinstance(data, (bool, np.bool_)):
        return Boolean(bool(data))
    if isinstance(data, (int, np.integer)):
        return Int(int(data))
    if isinstance(data, np.float32):
        return Float32(float(data))
    if isinstance(data, (float, np.floating)):
        return Float64(float(data))
    if isinstance(data, str):
        return String(data)
    if isinstance(data, datetime.timedelta):
        return Duration.from_timedelta(data)
    if isinstance(data, Mapping):
        return Object({_convert_key(key): from_python(value) for key, value in data.items()})
    if isinstance(data, (list, tuple)):
        return Array(from_python(item) for item in data)

    raise TypeMismatchError(
        f"cannot convert {type(data).__name__} to a config value",
        context={"type": type(data).__name__},
    )


def _convert_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    # Numeric keys such as YAML's `8080: http` read naturally as strings
    if isinstance(key, int) and not isinstance(key, bool):
        return str(key)
    raise TypeMismatchError(
        f"object keys must be strings, got {type(key).__name__}: {key!r}",
        context={"key": repr(key)},
    )


def to_python(value: Value) -> Any:
    """Convert a resolved value tree into plain Python data.

    Raises:
        TypeMismatchError: If the tree still holds unresolved reference nodes
    """
    if isinstance(value, Object):
        return {key: to_python(child) for key, child in value.items()}
    if isinstance(value, Array):
        return [to_python(item) for item in value]
    if isinstance(value, Null):
        return None
    if isinstance(value, (Boolean, String, Int, Float32, Float64)):
        return value.value
    if isinstance(value, Duration):
        return value.to_timedelta()

    raise TypeMismatchError(
        f"cannot convert unresolved {value.kind.value} to plain data: {value}",
        context={"kind": value.kind.value, "value": str(value)},
    )


__all__ = ["from_python", "to_python"]
