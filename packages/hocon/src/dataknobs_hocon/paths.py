"""Dotted-path navigation over Object trees."""

from .exceptions import PathTraversalError
from .values import Object, Value

PATH_SEPARATOR = "."


def split_path(path: str) -> list[str]:
    """Split a path expression into its segment names."""
    return path.split(PATH_SEPARATOR)


def join_path(prefix: str, key: str) -> str:
    """Append a key to a path."""
    return f"{prefix}{PATH_SEPARATOR}{key}"


def find(obj: Object, path: str) -> Value | None:
    """Find the value at a dotted path.

    Args:
        obj: Object to search from
        path: Path expression such as ``"server.http.port"``

    Returns:
        The stored value, or None if any segment is missing or empty

    Raises:
        PathTraversalError: If a non-terminal segment holds a non-object value

    Example:
        >>> find(Object({"a": Object({"b": Int(1)})}), "a.b")
        Int(value=1)
    """
    keys = split_path(path)
    if not all(keys):
        return None
    current = obj
    for depth, key in enumerate(keys[:-1]):
        value = current.get(key)
        if value is None:
            return None
        if not isinstance(value, Object):
            segment_path = PATH_SEPARATOR.join(keys[: depth + 1])
            raise PathTraversalError(path, segment_path, value.kind.value)
        current = value
    return current.get(keys[-1])


def copy_object(obj: Object) -> Object:
    """Duplicate an object, recursing into nested objects.

    Non-object values are immutable and are shared with the source.
    """
    return Object(
        {key: copy_object(value) if isinstance(value, Object) else value for key, value in obj.items()}
    )


__all__ = ["PATH_SEPARATOR", "split_path", "join_path", "find", "copy_object"]
