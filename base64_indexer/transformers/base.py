"""Abstract base output transformer.

WHY: Every output shape consumes the same batch of optimised files and the
same entries, but folds them into a different aggregate. This base class
fixes the three-operation interface so the encoder and the pipeline can
drive any output shape generically.

HOW: BaseOutputTransformer is an ABC. ``transform()`` is implemented once
here and shared by every variant: it derives the MIME type, builds the data
URI and applies the name transformer. Subclasses only decide the buffer
shape via ``create_buffer()`` and ``update_buffer()``.

RULES:
- create_buffer() returns a fresh, empty buffer on every call
- transform() never touches a buffer
- transform() rejects name transformers that return a non-str key
- update_buffer() mutates the buffer in place and returns None
- Buffer contents must be JSON-serialisable
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from base64_indexer.core.encoder import build_data_uri, lookup_mime
from base64_indexer.core.models import Entry, OptimizedFile
from base64_indexer.core.names import NameTransformer
from base64_indexer.errors import ConfigurationError


class BaseOutputTransformer(ABC):
    """Abstract base for all output transformers.

    To add a new output shape:
    1. Create a new module in transformers/
    2. Subclass BaseOutputTransformer
    3. Implement create_buffer(), update_buffer() and name
    4. Add a member to OutputShape and register its names in
       transformers/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable shape name shown in status output, e.g. 'Verbose list'."""

    @abstractmethod
    def create_buffer(self) -> Any:
        """Return a fresh, empty aggregate buffer."""

    @abstractmethod
    def update_buffer(self, buffer: Any, entry: Entry) -> None:
        """Fold one entry into the buffer in place."""

    def transform(self, name_transformer: NameTransformer, file: OptimizedFile) -> Entry:
        """Convert one optimised file into an entry.

        Args:
            name_transformer: Applied to the file's base name to get the key.
            file: The file path and the bytes to encode.

        Returns:
            Entry with the derived key and a base64 data URI.
        """
        data = build_data_uri(lookup_mime(file.path), file.contents)
        key = name_transformer(file.name)
        if not isinstance(key, str):
            raise ConfigurationError(
                "Name transformer {!r} returned {} for {!r}; expected str".format(
                    name_transformer, type(key).__name__, file.name
                )
            )
        return Entry(key=key, data=data)
