"""YAML front end for authoring configuration documents.

Documents are plain YAML with a few tags for the node kinds YAML cannot
express on its own:

```yaml
defaults:
  host: localhost
  timeout: !duration {seconds: 30}

server:
  host: !sub defaults.host
  url: !concat ["http://", !sub defaults.host, ":", 8080]
  timeout: !alt {value: !sub defaults.timeout, alternative: !sub? overrides.timeout}
  ratio: !float32 0.75
```

| Tag | Produces |
|---|---|
| ``!sub path`` | required Substitution |
| ``!sub? path`` | optional Substitution |
| ``!concat [...]`` | Concatenation of the listed fragments |
| ``!alt {value, alternative}`` | ValueWithAlternative |
| ``!float32 n`` | Float32 |
| ``!duration {...}`` / ``!duration n`` | Duration from timedelta arguments, or nanoseconds |

YAML timestamps are kept as strings. The loaded tree is left unresolved
unless ``resolve=True`` is passed.
"""

import datetime
import logging
from pathlib import Path
from typing import IO

import yaml
from yaml.constructor import ConstructorError

from .builders import from_python
from .config import Config
from .exceptions import DocumentLoadError, HoconError
from .resolver import ResolveOptions
from .values import (
    Array,
    Concatenation,
    Duration,
    Float32,
    Object,
    Substitution,
    ValueWithAlternative,
)

logger = logging.getLogger(__name__)


class DocumentLoader(yaml.SafeLoader):
    """SafeLoader that understands the reference tags."""

    pass


def _construct_substitution(loader: yaml.SafeLoader, node: yaml.Node) -> Substitution:
    return Substitution(str(loader.construct_scalar(node)))  # type: ignore[arg-type]


def _construct_optional_substitution(loader: yaml.SafeLoader, node: yaml.Node) -> Substitution:
    return Substitution(str(loader.construct_scalar(node)), optional=True)  # type: ignore[arg-type]


def _construct_concatenation(loader: yaml.SafeLoader, node: yaml.Node) -> Concatenation:
    if not isinstance(node, yaml.SequenceNode):
        raise ConstructorError(
            None, None, "!concat expects a sequence of fragments", node.start_mark
        )
    fragments = loader.construct_sequence(node, deep=True)
    if not fragments:
        raise ConstructorError(
            None, None, "!concat needs at least one fragment", node.start_mark
        )
    return Concatenation(from_python(fragment) for fragment in fragments)


def _construct_alternative(loader: yaml.SafeLoader, node: yaml.Node) -> ValueWithAlternative:
    if not isinstance(node, yaml.MappingNode):
        raise ConstructorError(
            None, None, "!alt expects a mapping with 'value' and 'alternative'", node.start_mark
        )
    mapping = loader.construct_mapping(node, deep=True)
    if "value" not in mapping or not isinstance(mapping.get("alternative"), Substitution):
        raise ConstructorError(
            None,
            None,
            "!alt needs a 'value' and an 'alternative' given as !sub or !sub?",
            node.start_mark,
        )
    return ValueWithAlternative(from_python(mapping["value"]), mapping["alternative"])


def _construct_float32(loader: yaml.SafeLoader, node: yaml.Node) -> Float32:
    text = loader.construct_scalar(node)  # type: ignore[arg-type]
    try:
        return Float32(float(text))
    except ValueError as e:
        raise ConstructorError(
            None, None, f"!float32 expects a number, got {text!r}", node.start_mark
        ) from e


def _construct_duration(loader: yaml.SafeLoader, node: yaml.Node) -> Duration:
    try:
        if isinstance(node, yaml.MappingNode):
            kwargs = loader.construct_mapping(node, deep=True)
            return Duration.from_timedelta(datetime.timedelta(**kwargs))
        return Duration(int(loader.construct_scalar(node)))  # type: ignore[arg-type]
    except (TypeError, ValueError) as e:
        raise ConstructorError(
            None, None, f"invalid !duration: {e}", node.start_mark
        ) from e


DocumentLoader.add_constructor("!sub", _construct_substitution)
DocumentLoader.add_constructor("!sub?", _construct_optional_substitution)
DocumentLoader.add_constructor("!concat", _construct_concatenation)
DocumentLoader.add_constructor("!alt", _construct_alternative)
DocumentLoader.add_constructor("!float32", _construct_float32)
DocumentLoader.add_constructor("!duration", _construct_duration)
DocumentLoader.add_constructor(
    "tag:yaml.org,2002:timestamp", lambda loader, node: loader.construct_scalar(node)
)


def load_yaml(
    source: str | IO[str],
    resolve: bool = False,
    options: ResolveOptions | None = None,
) -> Config:
    """Load a YAML document into a Config.

    Args:
        source: YAML text or a readable text stream
        resolve: Whether to resolve references before returning
        options: Resolution options, used when ``resolve`` is True

    Returns:
        Config wrapping the document root

    Raises:
        DocumentLoadError: If the text is not valid YAML or the root is not
            a mapping or sequence
        ResolutionError: If ``resolve`` is True and resolution fails
    """
    try:
        data = yaml.load(source, Loader=DocumentLoader)
        root = from_python({} if data is None else data)
    except yaml.YAMLError as e:
        raise DocumentLoadError(f"Failed to parse YAML document: {e}") from e
    except HoconError as e:
        raise DocumentLoadError(f"Unsupported YAML content: {e}", context=e.context) from e

    if not isinstance(root, (Object, Array)):
        raise DocumentLoadError(
            "Document root must be a mapping or a sequence",
            context={"kind": root.kind.value},
        )

    config = Config(root)
    logger.info(f"Loaded YAML document ({root.kind.value} root, {len(root)} entries)")
    return config.resolve(options) if resolve else config


def load_yaml_file(
    path: str | Path,
    resolve: bool = False,
    options: ResolveOptions | None = None,
) -> Config:
    """Load a YAML file into a Config; see :func:`load_yaml`.

    Raises:
        DocumentLoadError: If the file cannot be read or parsed
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            return load_yaml(f, resolve=resolve, options=options)
    except OSError as e:
        raise DocumentLoadError(
            f"Failed to read configuration file {path}: {e}", context={"path": str(path)}
        ) from e


__all__ = ["DocumentLoader", "load_yaml", "load_yaml_file"]
