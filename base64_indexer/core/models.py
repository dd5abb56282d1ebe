"""Dataclasses passed between the pipeline stages.

WHY: The optimiser, the batch encoder and the output transformers all
exchange the same two shapes: a file as produced by the optimiser, and the
keyed data URI derived from it. Typed containers keep those contracts
explicit.

HOW: Two dataclasses:
  OptimizedFile - one member of a batch (path + possibly recompressed bytes)
  Entry         - one file's logical representation (key + data URI)

RULES:
- OptimizedFile.path keeps the path as matched (relative paths stay relative)
- Entry.data always starts with "data:" and contains one ";base64,"
- Entry is immutable once built
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict


@dataclass
class OptimizedFile:
    """One file yielded by the optimisation step.

    RULES:
    - path: the matched file path
    - contents: the bytes to encode (recompressed or original)
    """

    path: Path
    contents: bytes

    @property
    def name(self) -> str:
        """Base file name, extension included."""
        return Path(self.path).name


@dataclass(frozen=True)
class Entry:
    """A single indexed image: its key and its base64 data URI."""

    key: str
    data: str

    def to_dict(self) -> Dict[str, str]:
        """Serialisable form used by the list-shaped output."""
        return {"name": self.key, "data": self.data}
