"""DataKnobs HOCON Package

A configuration document engine for a HOCON-like superset of JSON: a value
tree with substitutions, concatenations and fallback merging, resolved into
plain values and read through a typed, coercing accessor API.
"""

from .builders import from_python, to_python
from .config import Config
from .exceptions import (
    ConfigNotFoundError,
    CyclicSubstitutionError,
    DocumentLoadError,
    HoconError,
    InvalidConcatenationError,
    ParseFailureError,
    PathTraversalError,
    ResolutionError,
    TypeMismatchError,
    UnresolvedSubstitutionError,
)
from .loader import load_yaml, load_yaml_file
from .merge import concatenate, merge_objects
from .paths import copy_object, find
from .resolver import ResolveOptions, SubstitutionResolver, is_resolved, resolve
from .values import (
    NULL,
    Array,
    Boolean,
    Concatenation,
    Duration,
    Float32,
    Float64,
    Int,
    Null,
    Object,
    String,
    Substitution,
    Value,
    ValueKind,
    ValueWithAlternative,
)

__version__ = "0.1.0"
__all__ = [
    "Config",
    # Value model
    "Value",
    "ValueKind",
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
    # Navigation, merging and resolution
    "find",
    "copy_object",
    "merge_objects",
    "concatenate",
    "ResolveOptions",
    "SubstitutionResolver",
    "resolve",
    "is_resolved",
    # Conversion and loading
    "from_python",
    "to_python",
    "load_yaml",
    "load_yaml_file",
    # Errors
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
