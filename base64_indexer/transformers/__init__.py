"""Output transformer registry: symbolic names to output shapes.

WHY: The CLI, the environment config and library callers all select an
output shape by name ("verbose", "dictionary"). A single resolver keeps the
accepted names in one place and rejects unknown ones before any file is
touched.

HOW: OutputShape is the closed set of built-in shapes. TRANSFORMER_NAMES
maps every accepted symbolic name to a shape, and transformer_for_shape()
dispatches a shape to its transformer class. resolve_output_transformer()
accepts a name, a shape, or a ready-made capability object.

RULES:
- Names are case-sensitive: "default", "verbose", "dictionary"
- Unknown names raise ConfigurationError naming the key
- Objects exposing create_buffer/update_buffer/transform are used as-is
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from base64_indexer.errors import ConfigurationError
from base64_indexer.transformers.base import BaseOutputTransformer
from base64_indexer.transformers.dictionary import DictionaryTransformer
from base64_indexer.transformers.verbose import VerboseTransformer

OUTPUT_SCHEMA_PATH = Path(__file__).resolve().parent / "output_schema.json"
"""JSON Schema describing both output document shapes."""

_CAPABILITIES = ("create_buffer", "update_buffer", "transform")


class OutputShape(str, enum.Enum):
    """Built-in aggregate shapes."""

    LIST = "list"
    KEYED = "keyed"


TRANSFORMER_NAMES: Dict[str, OutputShape] = {
    "default": OutputShape.LIST,
    "verbose": OutputShape.LIST,
    "dictionary": OutputShape.KEYED,
}


def transformer_for_shape(shape: OutputShape) -> BaseOutputTransformer:
    """Instantiate the transformer implementing ``shape``."""
    if shape is OutputShape.LIST:
        return VerboseTransformer()
    elif shape is OutputShape.KEYED:
        return DictionaryTransformer()
    raise ConfigurationError("Unsupported output shape {!r}".format(shape))


def resolve_output_transformer(
    value: Optional[Union[str, OutputShape, Any]],
) -> Any:
    """Turn a caller-supplied option into an output transformer.

    RULES:
    - None → the default (verbose list) transformer
    - str → looked up in TRANSFORMER_NAMES
    - OutputShape → its transformer
    - objects with all three capabilities → returned unchanged
    - anything else → ConfigurationError

    Args:
        value: Symbolic name, shape, transformer instance, or None.

    Returns:
        An object providing create_buffer, update_buffer and transform.
    """
    if value is None:
        return transformer_for_shape(TRANSFORMER_NAMES["default"])
    if isinstance(value, OutputShape):
        return transformer_for_shape(value)
    if isinstance(value, str):
        if value not in TRANSFORMER_NAMES:
            available = ", ".join(sorted(TRANSFORMER_NAMES))
            raise ConfigurationError(
                "Unknown transformer {!r}. Available transformers: {}".format(value, available)
            )
        return transformer_for_shape(TRANSFORMER_NAMES[value])
    if all(callable(getattr(value, attr, None)) for attr in _CAPABILITIES):
        return value
    raise ConfigurationError(
        "Output transformer must be a name or provide {}, got {}".format(
            ", ".join(_CAPABILITIES), type(value).__name__
        )
    )


__all__ = [
    "BaseOutputTransformer",
    "DictionaryTransformer",
    "OUTPUT_SCHEMA_PATH",
    "OutputShape",
    "TRANSFORMER_NAMES",
    "VerboseTransformer",
    "resolve_output_transformer",
    "transformer_for_shape",
]
