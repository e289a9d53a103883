"""Exception hierarchy for the hocon package.

Every failure raised by the value model, the resolver and the accessor
facade derives from :class:`HoconError`, so callers can catch one type and
still inspect the structured ``context`` attached to each error.

Example:
    ```python
    from dataknobs_hocon import Config, HoconError

    try:
        port = config.get_int("server.port")
    except HoconError as e:
        logger.error(f"Error: {e}")
        if e.context:
            logger.error(f"Context: {e.context}")
    ```
"""

from typing import Any, Dict


class HoconError(Exception):
    """Base exception for the hocon package.

    Attributes:
        context: Paths, kinds and values involved in the failure
    """

    def __init__(self, message: str, context: Dict[str, Any] | None = None):
        super().__init__(message)
        self.context = context or {}


class ConfigNotFoundError(HoconError):
    """Raised when no value exists at the requested path."""

    def __init__(self, path: str):
        super().__init__(f"config value not found at path: {path}", context={"path": path})
        self.path = path


class TypeMismatchError(HoconError):
    """Raised when a value exists but is not of the requested kind.

    Used when no coercion rule applies, e.g. asking for an array at a path
    holding a string.
    """

    pass


class ParseFailureError(HoconError):
    """Raised when a value cannot be coerced to a numeric or boolean kind."""

    pass


class PathTraversalError(HoconError):
    """Raised when an intermediate path segment holds a non-object value.

    Example:
        ```python
        find(Object({"a": Int(1)}), "a.b")
        # PathTraversalError: path a.b traverses through a non-object value at: a
        ```
    """

    def __init__(self, path: str, segment_path: str, kind: Any = None):
        super().__init__(
            f"path {path} traverses through a non-object value at: {segment_path}",
            context={"path": path, "segment_path": segment_path, "kind": kind},
        )
        self.path = path
        self.segment_path = segment_path


class ResolutionError(HoconError):
    """Base class for failures while resolving references and concatenations."""

    pass


class UnresolvedSubstitutionError(ResolutionError):
    """Raised when a required substitution cannot be found in the document."""

    def __init__(self, path: str):
        super().__init__(f"substitution not resolved: ${{{path}}}", context={"path": path})
        self.path = path


class CyclicSubstitutionError(ResolutionError):
    """Raised when resolving a path revisits a path already being resolved."""

    def __init__(self, path: str, chain: list[str] | None = None):
        chain = list(chain or [])
        cycle = " -> ".join(chain + [path])
        super().__init__(
            f"cyclic substitution detected: {cycle}",
            context={"path": path, "chain": chain},
        )
        self.path = path
        self.chain = chain


class InvalidConcatenationError(ResolutionError):
    """Raised when an object-bearing concatenation holds a non-object fragment."""

    pass


class DocumentLoadError(HoconError):
    """Raised when a source document cannot be read or converted."""

    pass


__all__ = [
    "HoconError",
    "ConfigNotFoundError",
    "TypeMismatchError",
    "ParseFailureError",
    "PathTraversalError",
    "ResolutionError",
    "UnresolvedSubstitutionError",
    "CyclicSubstitutionError",
    "InvalidConcatenationError",
    "DocumentLoadError",
]
