"""Object merging and concatenation joining.

Two related operations live here:

- :func:`merge_objects` deep-merges an override object onto a base object.
  Nested objects present on both sides merge recursively; any other value in
  the override replaces the base value wholesale (arrays are not merged
  element-wise).
- :func:`concatenate` collapses resolved concatenation fragments into a
  single value, either by merging objects left to right or by joining the
  string forms of simple values.

Example:
    >>> base = Object({"a": Int(1), "nested": Object({"x": Int(10), "y": Int(20)})})
    >>> override = Object({"a": Int(2), "nested": Object({"y": Int(25)})})
    >>> str(merge_objects(override, base))
    '{"a":2, "nested":{"x":10, "y":25}}'
"""

import logging
from collections.abc import Sequence

from .exceptions import InvalidConcatenationError
from .paths import copy_object
from .values import Concatenation, Object, String, Value

logger = logging.getLogger(__name__)


def merge_objects(override: Object, base: Object) -> Object:
    """Deep merge two objects, override values taking precedence.

    Args:
        override: Object whose values win
        base: Object supplying values for keys the override lacks

    Returns:
        New merged object; neither input is modified
    """
    merged: dict[str, Value] = dict(copy_object(base))

    for key, value in override.items():
        existing = merged.get(key)
        if isinstance(existing, Object) and isinstance(value, Object):
            merged[key] = merge_objects(value, existing)
        else:
            merged[key] = value

    return Object(merged)


def concatenate(fragments: Sequence[Value]) -> Value:
    """Collapse resolved concatenation fragments into one value.

    If any fragment is an object, every fragment must be an object and they
    are merged left to right, later fragments overriding earlier ones.
    Otherwise the string forms of the fragments are joined with no
    separator.

    Args:
        fragments: Fragments free of unresolved references

    Returns:
        The merged Object or the joined String

    Raises:
        InvalidConcatenationError: If objects are mixed with other kinds
        ValueError: If there are no fragments
    """
    if not fragments:
        raise ValueError("Cannot concatenate an empty fragment sequence")

    if not any(isinstance(fragment, Object) for fragment in fragments):
        return String(str(Concatenation(fragments)))

    objects: list[Object] = []
    for fragment in fragments:
        if not isinstance(fragment, Object):
            raise InvalidConcatenationError(
                "cannot concatenate object with non-object",
                context={"fragment": str(fragment), "kind": fragment.kind.value},
            )
        objects.append(fragment)

    result = objects[0]
    for obj in objects[1:]:
        result = merge_objects(obj, result)
    logger.debug(f"Merged {len(objects)} object fragments")
    return result


__all__ = ["merge_objects", "concatenate"]
