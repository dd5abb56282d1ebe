"""Base64 Image Indexer: bundle images into one JSON file of data URIs.

WHY: Front-end builds and offline bundles often want a set of images
inlined as base64 data URIs, keyed by name, in a single JSON document.
This package turns a glob of images into exactly that.

HOW: Four-stage pipeline: optimise (match, verify, lossless JPEG
recompression), encode (base64 data URIs), transform (name transformer +
pluggable output shape), serialise (timestamped JSON file). Each stage is
independently testable.

RULES:
- One batch per invocation; the JSON file is written once, at the end
- Output shape and key derivation are independent, pluggable strategies
- Adding a new output shape = one new transformer module + one registry entry
"""

from base64_indexer.pipeline import run, run_async

__version__ = "0.1.0"

__all__ = ["run", "run_async", "__version__"]
