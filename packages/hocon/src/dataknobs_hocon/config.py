"""Config: owner of a document root and its typed read API."""

import datetime
import logging
import math
import re
from collections.abc import Mapping
from typing import Any

import numpy as np

from .builders import from_python, to_python
from .exceptions import (
    ConfigNotFoundError,
    ParseFailureError,
    PathTraversalError,
    TypeMismatchError,
)
from .merge import merge_objects
from .paths import find
from .resolver import ResolveOptions, is_resolved, resolve
from .serialization import canonical_json
from .values import (
    FALSE_STRINGS,
    TRUE_STRINGS,
    Array,
    Boolean,
    Duration,
    Float32,
    Float64,
    Int,
    Object,
    String,
    Value,
)

logger = logging.getLogger(__name__)

_INT_PATTERN = re.compile(r"[+-]?[0-9]+")
_HEX_FLOAT_PATTERN = re.compile(
    r"[+-]?0[xX]([0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _parse_int(text: str) -> int | None:
    """Parse a base-10 integer string that fits in 64 bits."""
    if not _INT_PATTERN.fullmatch(text):
        return None
    value = int(text)
    if not _INT64_MIN <= value <= _INT64_MAX:
        return None
    return value


def _parse_float(text: str) -> float | None:
    """Parse a decimal or hexadecimal (``0x1p-2``) float string.

    Values outside double precision range are rejected; only the literal
    ``inf``/``infinity`` spellings produce an infinity.
    """
    if not text or text != text.strip() or "_" in text:
        return None
    try:
        if _HEX_FLOAT_PATTERN.fullmatch(text):
            value = float.fromhex(text)
        else:
            value = float(text)
    except (ValueError, OverflowError):
        return None
    if math.isinf(value) and "inf" not in text.lower():
        return None
    return value


class Config:
    """A configuration document.

    Wraps exactly one root value, normally an Object, and exposes path-based
    typed getters over it. A Config is never modified after construction:
    :meth:`resolve` and :meth:`with_fallback` return new instances.

    Getters raise instead of returning defaults:

    - ConfigNotFoundError when nothing exists at the path
    - TypeMismatchError when the value has the wrong kind
    - ParseFailureError when a coercion from the value fails

    Example:
        ```python
        config = Config.from_dict({"server": {"port": "8080", "debug": "on"}})
        config.get_int("server.port")  # 8080
        config.get_boolean("server.debug")  # True
        ```
    """

    def __init__(self, root: Value) -> None:
        """Initialize a Config around a root value.

        Args:
            root: Document root, resolved or not
        """
        if not isinstance(root, Value):
            raise TypeError(f"Config root must be a Value, got {type(root).__name__}")
        self._root = root

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Config":
        """Create a Config from plain Python data.

        Args:
            data: Configuration dictionary

        Returns:
            Config object
        """
        return cls(from_python(data))

    @property
    def root(self) -> Value:
        return self._root

    def get_root(self) -> Value:
        """Return the root value of the configuration."""
        return self._root

    def resolve(self, options: ResolveOptions | None = None) -> "Config":
        """Return a new Config with every reference in the tree resolved.

        Raises:
            ResolutionError: If a substitution or concatenation cannot be resolved
        """
        return Config(resolve(self._root, options))

    def is_resolved(self) -> bool:
        """True if the tree holds no substitutions, concatenations or alternatives."""
        return is_resolved(self._root)

    def with_fallback(self, fallback: "Config") -> "Config":
        """Merge this config over a fallback config.

        For keys present in both, this config's values win; nested objects
        present in both are merged recursively. If either root is not an
        Object, the fallback is ignored and this config is returned.

        Args:
            fallback: Config supplying values for missing keys

        Returns:
            A new merged Config, or ``self`` if the fallback was not used
        """
        if isinstance(self._root, Object) and isinstance(fallback.root, Object):
            logger.debug(f"Merging {len(self._root)} keys over {len(fallback.root)} fallback keys")
            return Config(merge_objects(self._root, fallback.root))

        logger.debug(
            f"Ignoring fallback: roots are {self._root.kind.value} and {fallback.root.kind.value}"
        )
        return self

    def get(self, path: str) -> Value | None:
        """Find the value at the given path without coercing it.

        Returns:
            The value, or None if the root is not an Object or nothing is found

        Raises:
            PathTraversalError: If the path crosses a non-object value
        """
        if not isinstance(self._root, Object):
            return None
        return find(self._root, path)

    def _require(self, path: str) -> Value:
        value = self.get(path)
        if value is None:
            raise ConfigNotFoundError(path)
        return value

    def get_string(self, path: str) -> str:
        """Return the value at path as a string, rendering non-strings."""
        return str(self._require(path))

    def get_int(self, path: str) -> int:
        """Return the value at path as an int, parsing base-10 strings."""
        value = self._require(path)
        if isinstance(value, Int):
            return value.value
        if isinstance(value, String):
            parsed = _parse_int(value.value)
            if parsed is not None:
                return parsed
        raise ParseFailureError(
            f"cannot parse value: {path} to int", context={"path": path, "value": str(value)}
        )

    def get_float32(self, path: str) -> np.float32:
        """Return the value at path as a single precision float."""
        value = self._require(path)
        if isinstance(value, (Float32, Float64)):
            return np.float32(value.value)
        if isinstance(value, String):
            parsed = _parse_float(value.value)
            if parsed is not None:
                with np.errstate(over="ignore"):
                    narrowed = np.float32(parsed)
                if math.isfinite(parsed) == bool(np.isfinite(narrowed)):
                    return narrowed
        raise ParseFailureError(
            f"cannot parse value: {path} to float32", context={"path": path, "value": str(value)}
        )

    def get_float64(self, path: str) -> float:
        """Return the value at path as a double precision float."""
        value = self._require(path)
        if isinstance(value, (Float32, Float64)):
            return value.value
        if isinstance(value, String):
            parsed = _parse_float(value.value)
            if parsed is not None:
                return parsed
        raise ParseFailureError(
            f"cannot parse value: {path} to float64", context={"path": path, "value": str(value)}
        )

    def get_boolean(self, path: str) -> bool:
        """Return the value at path as a bool.

        Strings ``true/yes/on`` and ``false/no/off`` are accepted, exactly
        as written.
        """
        value = self._require(path)
        if isinstance(value, Boolean):
            return value.value
        if isinstance(value, String):
            if value.value in TRUE_STRINGS:
                return True
            if value.value in FALSE_STRINGS:
                return False
        raise ParseFailureError(
            f"cannot parse value: {path} to boolean", context={"path": path, "value": str(value)}
        )

    def get_duration(self, path: str) -> datetime.timedelta:
        """Return the Duration at path as a timedelta; no string coercion applies."""
        value = self._require(path)
        if not isinstance(value, Duration):
            raise TypeMismatchError(
                f"cannot parse value: {path} to Duration",
                context={"path": path, "kind": value.kind.value},
            )
        return value.to_timedelta()

    def get_object(self, path: str) -> Object:
        value = self._require(path)
        if not isinstance(value, Object):
            raise TypeMismatchError(
                f"config value at path: {path} is not an object",
                context={"path": path, "kind": value.kind.value},
            )
        return value

    def get_config(self, path: str) -> "Config":
        """Return the object at path wrapped as a Config."""
        return self.get_object(path).to_config()

    def get_string_map(self, path: str) -> dict[str, Value]:
        return dict(self.get_object(path))

    def get_string_map_string(self, path: str) -> dict[str, str]:
        """Return the object at path with every value rendered as a string.

        Nested objects are not flattened; they render as JSON text.
        """
        return {key: str(value) for key, value in self.get_object(path).items()}

    def get_array(self, path: str) -> Array:
        value = self._require(path)
        if not isinstance(value, Array):
            raise TypeMismatchError(
                f"config value at path: {path} is not an array",
                context={"path": path, "kind": value.kind.value},
            )
        return value

    def get_int_list(self, path: str) -> list[int]:
        value = self._require(path)
        if isinstance(value, Array) and all(isinstance(item, Int) for item in value):
            return [item.value for item in value]  # type: ignore[attr-defined]
        raise TypeMismatchError(
            f"config value at path: {path} is not an array of integers",
            context={"path": path, "kind": value.kind.value},
        )

    def get_string_list(self, path: str) -> list[str]:
        """Return the array at path with every element rendered as a string."""
        return [str(item) for item in self.get_array(path)]

    def to_dict(self) -> Any:
        """Convert the resolved tree to plain Python data."""
        return to_python(self._root)

    def to_json(self) -> str:
        """Render the document as canonical JSON (sorted keys, no whitespace)."""
        return canonical_json(self._root.to_json())

    def __str__(self) -> str:
        return str(self._root)

    def __repr__(self) -> str:
        return f"Config({self._root!r})"

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, str):
            return False
        try:
            return self.get(path) is not None
        except PathTraversalError:
            return False

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Config):
            return NotImplemented
        return self._root == other._root

    __hash__ = None  # type: ignore[assignment]


__all__ = ["Config"]
