"""Substitution resolution for configuration trees.

Resolution replaces every ``Substitution``, ``Concatenation`` and
``ValueWithAlternative`` node with a terminal value:

- ``${path}`` is replaced by the resolved value found at ``path`` from the
  document root; a missing required path is an error.
- ``${?path}`` resolves to absence when the path is missing: the enclosing
  object key or array element is dropped.
- A concatenation resolves its fragments, then joins or merges them (see
  :func:`dataknobs_hocon.merge.concatenate`).
- A value with an alternative takes the alternative when it resolves, and
  falls back to its own value otherwise.

Each path is resolved at most once. Paths currently being resolved are kept
on a stack so that a reference back into one of them is reported as a
:class:`CyclicSubstitutionError` instead of recursing forever.

Example:
    ```python
    root = Object({
        "host": String("localhost"),
        "url": Concatenation([String("http://"), Substitution("host")]),
    })
    str(resolve(root))
    # '{"host":"localhost", "url":"http://localhost"}'
    ```
"""

import logging
from dataclasses import dataclass

from .exceptions import (
    CyclicSubstitutionError,
    PathTraversalError,
    UnresolvedSubstitutionError,
)
from .merge import concatenate
from .paths import PATH_SEPARATOR, find, join_path, split_path
from .values import (
    NULL,
    Array,
    Concatenation,
    Object,
    Substitution,
    Value,
    ValueWithAlternative,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolveOptions:
    """Options controlling resolution.

    Attributes:
        allow_unresolved: Leave required substitutions that cannot be found
            in place instead of raising UnresolvedSubstitutionError
    """

    allow_unresolved: bool = False


class SubstitutionResolver:
    """Resolves the references of one document tree.

    A resolver is bound to a single root and caches every path it resolves,
    so it should not be reused for a different document.
    """

    def __init__(self, root: Value, options: ResolveOptions | None = None) -> None:
        """Initialize the resolver.

        Args:
            root: Document root that substitution paths are looked up from
            options: Resolution options (defaults to strict resolution)
        """
        self._root = root
        self._options = options or ResolveOptions()
        self._resolved: dict[str, Value | None] = {}
        self._resolving: list[str] = []

    def resolve(self) -> Value:
        """Resolve the whole document.

        Returns:
            The resolved root

        Raises:
            UnresolvedSubstitutionError: If a required substitution is missing
            CyclicSubstitutionError: If a substitution depends on itself
            InvalidConcatenationError: If objects are concatenated with non-objects
            PathTraversalError: If a substitution path crosses a non-object value
        """
        if isinstance(self._root, Object):
            result: Value | None = self._resolve_object(self._root, [])
        else:
            result = self._resolve_node(self._root, None)
        logger.debug(f"Resolved document ({len(self._resolved)} paths visited)")
        return NULL if result is None else result

    def resolve_path(self, path: str) -> Value | None:
        """Resolve the value at a single path, or None if it is absent."""
        return self._resolve_path(path)

    def _resolve_path(self, path: str) -> Value | None:
        if path in self._resolved:
            return self._resolved[path]
        if path in self._resolving:
            start = self._resolving.index(path)
            raise CyclicSubstitutionError(path, self._resolving[start:])

        self._resolving.append(path)
        try:
            result = self._compute_path(path)
        finally:
            self._resolving.pop()

        self._resolved[path] = result
        return result

    def _compute_path(self, path: str) -> Value | None:
        if not isinstance(self._root, Object):
            return None

        keys = split_path(path)
        if not all(keys):
            return None
        current = self._root
        for depth, key in enumerate(keys[:-1]):
            value = current.get(key)
            if value is None:
                return None
            if isinstance(value, Object):
                current = value
                continue

            rest = PATH_SEPARATOR.join(keys[depth + 1 :])
            if isinstance(value, Substitution):
                # ${a} then a lookup of b.c: continue the lookup at a.c
                return self._resolve_path(join_path(value.path, rest))

            prefix = PATH_SEPARATOR.join(keys[: depth + 1])
            if not value.is_reference:
                raise PathTraversalError(path, prefix, value.kind.value)

            resolved = self._resolve_path(prefix)
            if resolved is None:
                return None
            if not isinstance(resolved, Object):
                raise PathTraversalError(path, prefix, resolved.kind.value)
            return find(resolved, rest)

        raw = current.get(keys[-1])
        if raw is None:
            return None
        return self._resolve_node(raw, path)

    def _resolve_node(self, node: Value, path: str | None) -> Value | None:
        """Resolve a node; ``path`` is its location in the root, if it has one."""
        if isinstance(node, Object):
            return self._resolve_object(node, None if path is None else split_path(path))
        elif isinstance(node, Array):
            return self._resolve_array(node)
        elif isinstance(node, Substitution):
            return self._resolve_substitution(node)
        elif isinstance(node, Concatenation):
            return self._resolve_concatenation(node)
        elif isinstance(node, ValueWithAlternative):
            return self._resolve_alternative(node)
        else:
            return node

    def _resolve_object(self, obj: Object, prefix: list[str] | None) -> Object:
        """Resolve an object whose location is the key list ``prefix``, if it has one."""
        resolved: dict[str, Value] = {}
        for key, child in obj.items():
            if prefix is None or not key or PATH_SEPARATOR in key:
                # Not addressable by path: resolve in place
                value = self._resolve_node(child, None)
            else:
                value = self._resolve_path(PATH_SEPARATOR.join([*prefix, key]))
            if value is None:
                logger.debug(f"Dropping key '{key}': optional substitution is absent")
                continue
            resolved[key] = value
        return Object(resolved)

    def _resolve_array(self, array: Array) -> Array:
        elements = []
        for element in array:
            value = self._resolve_node(element, None)
            if value is None:
                logger.debug("Dropping array element: optional substitution is absent")
                continue
            elements.append(value)
        return Array(elements)

    def _resolve_substitution(self, substitution: Substitution) -> Value | None:
        value = self._resolve_path(substitution.path)
        if value is not None:
            logger.debug(f"Resolved {substitution}")
            return value
        if substitution.optional:
            return None
        if self._options.allow_unresolved:
            logger.debug(f"Leaving {substitution} unresolved")
            return substitution
        raise UnresolvedSubstitutionError(substitution.path)

    def _resolve_concatenation(self, concatenation: Concatenation) -> Value | None:
        fragments = []
        for fragment in concatenation:
            value = self._resolve_node(fragment, None)
            if value is not None:
                fragments.append(value)
        if not fragments:
            return None
        if any(fragment.is_reference for fragment in fragments):
            # Only reachable when unresolved substitutions are allowed
            return Concatenation(fragments)
        return concatenate(fragments)

    def _resolve_alternative(self, node: ValueWithAlternative) -> Value | None:
        try:
            alternative = self._resolve_substitution(node.alternative)
        except (UnresolvedSubstitutionError, CyclicSubstitutionError, PathTraversalError) as e:
            logger.debug(f"Alternative {node.alternative} not usable ({e}); keeping default")
            alternative = None

        if alternative is not None and not alternative.is_reference:
            return alternative
        return self._resolve_node(node.value, None)


def resolve(root: Value, options: ResolveOptions | None = None) -> Value:
    """Resolve every reference in a document tree.

    Args:
        root: Document root, normally an Object
        options: Resolution options

    Returns:
        A new tree free of substitutions, concatenations and alternatives
        (unless ``options.allow_unresolved`` kept some substitutions)
    """
    return SubstitutionResolver(root, options).resolve()


def is_resolved(value: Value) -> bool:
    """True if no reference node remains anywhere in the tree."""
    if value.is_reference:
        return False
    if isinstance(value, Object):
        return all(is_resolved(child) for child in value.values())
    if isinstance(value, Array):
        return all(is_resolved(element) for element in value)
    return True


__all__ = ["ResolveOptions", "SubstitutionResolver", "resolve", "is_resolved"]
