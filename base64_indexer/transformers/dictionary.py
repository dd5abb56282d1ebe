"""Dictionary (keyed) output transformer.

WHY: Consumers that look images up by name want a flat object rather than
a list to scan.

HOW: Reuses the shared transform() from the base class and only swaps the
buffer for a dict keyed by entry key.

Output shape:
    {
        "file1.png": "data:image/png;base64,...",
        "file2.png": "data:image/png;base64,..."
    }

RULES:
- Registered as "dictionary"
- Duplicate keys: last write wins, no warning
- Key order follows first insertion (plain dict semantics)
"""

from __future__ import annotations

from typing import Dict

from base64_indexer.core.models import Entry
from base64_indexer.transformers.base import BaseOutputTransformer


class DictionaryTransformer(BaseOutputTransformer):
    """Produces a flat ``{name: data}`` object."""

    @property
    def name(self) -> str:
        return "Dictionary"

    def create_buffer(self) -> Dict[str, str]:
        return {}

    def update_buffer(self, buffer: Dict[str, str], entry: Entry) -> None:
        buffer[entry.key] = entry.data
