"""Value model for configuration documents.

A document is a tree of :class:`Value` nodes. The node kinds form a closed
set, tagged by :class:`ValueKind`:

- Scalars: ``Null``, ``Boolean``, ``String``, ``Int``, ``Float32``,
  ``Float64`` and ``Duration``
- Containers: ``Object`` (key to value mapping) and ``Array`` (ordered)
- References, present only until resolution: ``Substitution``,
  ``Concatenation`` and ``ValueWithAlternative``

Every node renders a canonical string form through ``str(value)`` and a JSON
form through ``value.to_json()``. Nodes are never mutated after construction;
merging and resolution always build new trees.

Example:
    ```python
    from dataknobs_hocon.values import Array, Int, Object, String

    server = Object({"host": String("localhost"), "ports": Array([Int(80), Int(443)])})
    str(server)
    # '{"host":"localhost", "ports":[80,443]}'
    ```
"""

from __future__ import annotations

import datetime
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, overload

import numpy as np

from .exceptions import ParseFailureError
from .serialization import duration_milliseconds, format_duration, format_float, json_marshal

if TYPE_CHECKING:
    from .config import Config

TRUE_STRINGS = ("true", "yes", "on")
FALSE_STRINGS = ("false", "no", "off")


class ValueKind(Enum):
    """Tag identifying the kind of a :class:`Value` node."""

    NULL = "null"
    BOOLEAN = "boolean"
    STRING = "string"
    INT = "int"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DURATION = "duration"
    OBJECT = "object"
    ARRAY = "array"
    SUBSTITUTION = "substitution"
    CONCATENATION = "concatenation"
    VALUE_WITH_ALTERNATIVE = "value_with_alternative"


REFERENCE_KINDS = frozenset(
    {ValueKind.SUBSTITUTION, ValueKind.CONCATENATION, ValueKind.VALUE_WITH_ALTERNATIVE}
)


class Value(ABC):
    """Base class of every node in a configuration tree."""

    kind: ClassVar[ValueKind]
    is_concatenable: ClassVar[bool] = False

    @abstractmethod
    def __str__(self) -> str:
        """Canonical string form."""

    @abstractmethod
    def to_json(self) -> str:
        """JSON form."""

    @property
    def is_reference(self) -> bool:
        """True for node kinds that only exist until resolution."""
        return self.kind in REFERENCE_KINDS


def _check_value(owner: str, value: Any) -> None:
    if not isinstance(value, Value):
        raise TypeError(
            f"{owner} members must be Value instances, got {type(value).__name__}; "
            "use from_python() to convert plain data"
        )


@dataclass(frozen=True)
class Null(Value):
    """Explicit absence of a value."""

    kind = ValueKind.NULL
    is_concatenable = True

    def __str__(self) -> str:
        return "null"

    def to_json(self) -> str:
        return "null"


NULL = Null()


@dataclass(frozen=True)
class Boolean(Value):
    value: bool

    kind = ValueKind.BOOLEAN
    is_concatenable = True

    @classmethod
    def from_string(cls, text: str) -> "Boolean":
        """Create a Boolean from ``true/yes/on`` or ``false/no/off``.

        Raises:
            ParseFailureError: If the text is not one of the six accepted words
        """
        if text in TRUE_STRINGS:
            return cls(True)
        if text in FALSE_STRINGS:
            return cls(False)
        raise ParseFailureError(
            f"cannot parse value: {text} to Boolean", context={"value": text}
        )

    def __bool__(self) -> bool:
        return self.value

    def __str__(self) -> str:
        return "true" if self.value else "false"

    def to_json(self) -> str:
        return str(self)


@dataclass(frozen=True)
class String(Value):
    value: str

    kind = ValueKind.STRING
    is_concatenable = True

    def __str__(self) -> str:
        return self.value

    def to_json(self) -> str:
        return json_marshal(self.value)


@dataclass(frozen=True)
class Int(Value):
    value: int

    kind = ValueKind.INT
    is_concatenable = True

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, np.integer)):
            raise TypeError(f"Int requires an integer, got {type(self.value).__name__}")
        object.__setattr__(self, "value", int(self.value))

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return str(self.value)

    def to_json(self) -> str:
        return str(self)


@dataclass(frozen=True)
class Float32(Value):
    """Single precision float; the stored magnitude is rounded to 32 bits."""

    value: float

    kind = ValueKind.FLOAT32

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(np.float32(self.value)))

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return format_float(self.value, 32)

    def to_json(self) -> str:
        # Quoted so the precision survives a JSON round trip
        return f'"{self}"'


@dataclass(frozen=True)
class Float64(Value):
    value: float

    kind = ValueKind.FLOAT64

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", float(self.value))

    def __float__(self) -> float:
        return self.value

    def __str__(self) -> str:
        return format_float(self.value, 64)

    def to_json(self) -> str:
        return f'"{self}"'


@dataclass(frozen=True)
class Duration(Value):
    """A signed time span with nanosecond resolution."""

    nanoseconds: int

    kind = ValueKind.DURATION

    @classmethod
    def from_timedelta(cls, delta: datetime.timedelta) -> "Duration":
        seconds = delta.days * 86_400 + delta.seconds
        return cls(seconds * 1_000_000_000 + delta.microseconds * 1_000)

    def to_timedelta(self) -> datetime.timedelta:
        """Convert to a timedelta, truncating sub-microsecond precision."""
        micros = abs(self.nanoseconds) // 1_000
        return datetime.timedelta(microseconds=-micros if self.nanoseconds < 0 else micros)

    @property
    def milliseconds(self) -> int:
        return duration_milliseconds(self.nanoseconds)

    def __str__(self) -> str:
        return format_duration(self.nanoseconds)

    def to_json(self) -> str:
        return str(self.milliseconds)


class Object(Value, Mapping[str, Value]):
    """Mapping of unique string keys to values.

    Iteration follows insertion order, but no algorithm or rendering
    contract depends on it.
    """

    kind = ValueKind.OBJECT

    __slots__ = ("_items",)

    def __init__(
        self,
        items: Mapping[str, Value] | Iterable[tuple[str, Value]] | None = None,
        **kwargs: Value,
    ) -> None:
        data: dict[str, Value] = dict(items or {}, **kwargs)
        for key, value in data.items():
            if not isinstance(key, str):
                raise TypeError(f"Object keys must be strings, got {type(key).__name__}")
            _check_value("Object", value)
        self._items = data

    def __getitem__(self, key: str) -> Value:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Object({self._items!r})"

    def __str__(self) -> str:
        return self.to_json()

    def to_json(self) -> str:
        pairs = ", ".join(
            f"{json_marshal(key)}:{value.to_json()}" for key, value in self._items.items()
        )
        return "{" + pairs + "}"

    def find(self, path: str) -> Value | None:
        """Look up a dotted path; see :func:`dataknobs_hocon.paths.find`."""
        from .paths import find

        return find(self, path)

    def copy(self) -> "Object":
        """Deep copy nested objects; see :func:`dataknobs_hocon.paths.copy_object`."""
        from .paths import copy_object

        return copy_object(self)

    def to_config(self) -> "Config":
        from .config import Config

        return Config(self)


class _ValueSequence(Value, Sequence[Value]):
    __slots__ = ("_elements",)

    def __init__(self, elements: Iterable[Value] = ()) -> None:
        items = tuple(elements)
        for item in items:
            _check_value(type(self).__name__, item)
        self._elements = items

    @overload
    def __getitem__(self, index: int) -> Value: ...

    @overload
    def __getitem__(self, index: slice) -> Sequence[Value]: ...

    def __getitem__(self, index: int | slice) -> Value | Sequence[Value]:
        if isinstance(index, slice):
            return type(self)(self._elements[index])
        return self._elements[index]

    def __len__(self) -> int:
        return len(self._elements)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, _ValueSequence):
            return NotImplemented
        return type(self) is type(other) and self._elements == other._elements

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._elements)!r})"


class Array(_ValueSequence):
    """Ordered sequence of values."""

    kind = ValueKind.ARRAY

    def __str__(self) -> str:
        return self.to_json()

    def to_json(self) -> str:
        return "[" + ",".join(item.to_json() for item in self._elements) + "]"


@dataclass(frozen=True)
class Substitution(Value):
    """Unresolved reference to the value at another path of the document."""

    path: str
    optional: bool = False

    kind = ValueKind.SUBSTITUTION
    is_concatenable = True

    def __str__(self) -> str:
        marker = "?" if self.optional else ""
        return f"${{{marker}{self.path}}}"

    def to_json(self) -> str:
        return json_marshal(str(self))


class Concatenation(_ValueSequence):
    """Adjacent value fragments waiting to be joined or merged."""

    kind = ValueKind.CONCATENATION
    is_concatenable = True

    def __init__(self, elements: Iterable[Value] = ()) -> None:
        super().__init__(elements)
        if not self._elements:
            raise ValueError("Concatenation requires at least one fragment")

    @property
    def fragments(self) -> tuple[Value, ...]:
        return self._elements

    def contains_object(self) -> bool:
        """True if any fragment is an Object, selecting object-merge mode."""
        return any(fragment.kind is ValueKind.OBJECT for fragment in self._elements)

    def __str__(self) -> str:
        return "".join(str(fragment).strip('"') for fragment in self._elements)

    def to_json(self) -> str:
        return json_marshal(str(self))


@dataclass(frozen=True)
class ValueWithAlternative(Value):
    """A default value paired with a substitution that may override it."""

    value: Value
    alternative: Substitution

    kind = ValueKind.VALUE_WITH_ALTERNATIVE

    def __str__(self) -> str:
        return f"({self.value} | {self.alternative})"

    def to_json(self) -> str:
        return json_marshal(str(self))


__all__ = [
    "ValueKind",
    "REFERENCE_KINDS",
    "TRUE_STRINGS",
    "FALSE_STRINGS",
    "Value",
    "Null",
    "NULL",
    "Boolean",
    "String",
    "Int",
    "Float32",
    "Float64",
    "Duration",
    "Object",
    "Array",
    "Substitution",
    "Concatenation",
    "ValueWithAlternative",
]
