"""Verbose (list) output transformer.

WHY: The default output keeps every file, in batch order, as an explicit
``{name, data}`` object. Nothing is lost when two files map to the same key.

HOW: The buffer is a plain list; each entry is appended as a dict.

Output shape:
    [
        {"name": "file1.png", "data": "data:image/png;base64,..."},
        {"name": "file2.png", "data": "data:image/png;base64,..."}
    ]

RULES:
- Registered as "default" and "verbose"
- Output length equals batch size; order equals processing order
- Duplicate keys are retained as separate elements
"""

from __future__ import annotations

from typing import Dict, List

from base64_indexer.core.models import Entry
from base64_indexer.transformers.base import BaseOutputTransformer


class VerboseTransformer(BaseOutputTransformer):
    """Produces an ordered list of ``{name, data}`` objects."""

    @property
    def name(self) -> str:
        return "Verbose list"

    def create_buffer(self) -> List[Dict[str, str]]:
        return []

    def update_buffer(self, buffer: List[Dict[str, str]], entry: Entry) -> None:
        buffer.append(entry.to_dict())
