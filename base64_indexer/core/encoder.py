"""Batch encoder: fold a batch of optimised files into an aggregate buffer.

WHY: Every output shape needs the same per-file work (MIME lookup, base64
encoding, key derivation) applied to every file in batch order. The encoder
owns that loop so output transformers only describe the shape of the result.

HOW: encode_batch() asks the output transformer for a fresh buffer, then for
each file calls transform() followed by update_buffer(), and reports
progress through the run's status callback. lookup_mime() and
build_data_uri() are the helpers the shared transform() builds on.

RULES:
- The buffer is created exactly once per batch
- Files are processed strictly in the order supplied, one at a time
- Any exception from transform() aborts the batch; no buffer is returned
- Unknown MIME types fall back to application/octet-stream
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Union

from base64_indexer.core.models import OptimizedFile
from base64_indexer.core.names import NameTransformer

if TYPE_CHECKING:
    from base64_indexer.transformers.base import BaseOutputTransformer

logger = logging.getLogger(__name__)

FALLBACK_MIME_TYPE = "application/octet-stream"

# Image types some platform MIME tables leave out.
_EXTRA_TYPES = {
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
}


def lookup_mime(path: Union[str, Path]) -> str:
    """Infer a MIME type from a file path's extension."""
    mime, _ = mimetypes.guess_type(str(path), strict=False)
    if mime:
        return mime
    return _EXTRA_TYPES.get(Path(path).suffix.lower(), FALLBACK_MIME_TYPE)


def build_data_uri(mime: str, contents: bytes) -> str:
    """Build ``data:<mime>;base64,<payload>`` from raw bytes."""
    payload = base64.b64encode(contents).decode("ascii")
    return "data:{};base64,{}".format(mime, payload)


def encode_batch(
    files: Iterable[OptimizedFile],
    output_transformer: BaseOutputTransformer,
    name_transformer: NameTransformer,
    on_status: Optional[Callable[[str], None]] = None,
) -> Any:
    """Encode every file and fold the entries into a new buffer.

    Args:
        files: The batch, in the order produced by the optimiser.
        output_transformer: Defines buffer shape and fold semantics.
        name_transformer: Derives each entry's key from the base name.
        on_status: Optional progress callback; None means silent.

    Returns:
        The fully populated buffer (list or dict, depending on the
        transformer).
    """
    buffer = output_transformer.create_buffer()
    count = 0
    for file in files:
        entry = output_transformer.transform(name_transformer, file)
        output_transformer.update_buffer(buffer, entry)
        count += 1
        if on_status:
            on_status("Converted file {}".format(file.name))
    logger.debug("Encoded %d file(s)", count)
    return buffer
