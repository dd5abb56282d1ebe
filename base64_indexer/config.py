"""Configuration defaults, .env loading, and per-run config resolution.

WHY: Default glob, output directory and transformer are plain data that
users want to override without touching code, and every run needs one
resolved, immutable view of its options. Keeping both here means the
pipeline never has to reason about missing or malformed options.

HOW: python-dotenv loads the .env file on import. Module constants read
their defaults from the environment once. resolve_config() merges caller
options with those defaults into a frozen RunConfig, validating the
transformer options before anything else runs.

RULES:
- Defaults are read once at import and never mutated afterwards
- RunConfig is frozen; one instance per run, never shared
- Unknown transformers / bad name patterns raise ConfigurationError here
- silent=True replaces the status sink with a no-op for that run only
"""

from __future__ import annotations

import functools
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

from dotenv import load_dotenv

from base64_indexer.core.models import OptimizedFile
from base64_indexer.core.names import NameTransformer, resolve_name_transformer
from base64_indexer.errors import ConfigurationError
from base64_indexer.transformers import resolve_output_transformer

# Load .env from the working directory (where the tool is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Defaults (overridable via environment)
# ---------------------------------------------------------------------------

DEFAULT_GLOB = os.getenv("BASE64_INDEXER_GLOB", "input/*.{gif,jpg,png,svg}")
DEFAULT_OUTPUT_DIR = os.getenv("BASE64_INDEXER_OUTPUT_DIR", "output/")
DEFAULT_TRANSFORMER = os.getenv("BASE64_INDEXER_TRANSFORMER", "default")
JPEGTRAN_BINARY = os.getenv("BASE64_INDEXER_JPEGTRAN", "jpegtran")

OUTPUT_FILENAME_PREFIX = "data-"
OUTPUT_TIMESTAMP_FORMAT = "%Y-%d-%m-%H-%M-%S"
"""Year-day-month-hour-minute-second, zero padded."""

JSON_INDENT = 4

Optimizer = Callable[[str], Awaitable[List[OptimizedFile]]]
StatusCallback = Callable[[str], None]


def print_status(msg: str) -> None:
    """Print a status message to stderr.

    RULES:
    - Status output never goes to stdout
    - Always flush after writing
    """
    print(msg, file=sys.stderr, flush=True)


def quiet_status(msg: str) -> None:
    """Status sink used when a run is silenced."""


@dataclass(frozen=True)
class RunConfig:
    """Fully resolved options for one pipeline run.

    RULES:
    - glob: input match pattern (brace alternatives allowed)
    - output_directory: directory the JSON document is written to
    - name_transformer: str -> str key derivation
    - output_transformer: create_buffer / update_buffer / transform bundle
    - on_status: progress sink (no-op when silent)
    - on_error: error callback, or None to raise
    - on_success: called with the output path, or None
    - optimizer: async collaborator producing the batch
    """

    glob: str
    output_directory: Path
    name_transformer: NameTransformer
    output_transformer: Any
    optimizer: Optimizer
    on_status: StatusCallback = print_status
    on_error: Optional[Callable[[BaseException], None]] = None
    on_success: Optional[Callable[[Path], None]] = None


def resolve_config(
    glob: Optional[str] = None,
    output: Optional[str] = None,
    output_transformer: Any = None,
    name_transformer: Any = None,
    silent: bool = False,
    success: Optional[Callable[[Path], None]] = None,
    error: Optional[Callable[[BaseException], None]] = None,
    on_status: Optional[StatusCallback] = None,
    optimize: bool = True,
    optimizer: Optional[Optimizer] = None,
) -> RunConfig:
    """Merge caller options with defaults into a RunConfig.

    WHY: Configuration errors must surface before the optimiser runs, so
    every option that can be wrong is resolved here.

    HOW: Empty values fall back to the module defaults. The transformer
    options are resolved through their registries, which raise
    ConfigurationError for unknown names or unusable values.

    Args:
        glob: Input pattern; defaults to DEFAULT_GLOB.
        output: Output directory; defaults to DEFAULT_OUTPUT_DIR.
        output_transformer: Name, OutputShape or capability object.
        name_transformer: Pattern string, callable, or None for identity.
        silent: Suppress progress messages.
        success: Called with the written path.
        error: Called with the error instead of raising it.
        on_status: Explicit progress sink; ignored when silent.
        optimize: False reads matched files without recompression.
        optimizer: Replacement optimisation collaborator.

    Returns:
        A frozen RunConfig for a single run.
    """
    # Imported here: the optimizer module reads JPEGTRAN_BINARY from this module
    from base64_indexer.core.optimizer import load_images, optimize_images

    if optimizer is not None and not callable(optimizer):
        raise ConfigurationError("optimizer must be callable")
    for label, callback in (("success", success), ("error", error), ("on_status", on_status)):
        if callback is not None and not callable(callback):
            raise ConfigurationError("{} callback must be callable".format(label))

    if silent:
        status = quiet_status
    else:
        status = on_status or print_status

    if optimizer is None:
        if optimize:
            optimizer = functools.partial(optimize_images, on_status=status)
        else:
            optimizer = load_images

    if output_transformer is None:
        output_transformer = DEFAULT_TRANSFORMER

    return RunConfig(
        glob=glob or DEFAULT_GLOB,
        output_directory=Path(output or DEFAULT_OUTPUT_DIR),
        name_transformer=resolve_name_transformer(name_transformer),
        output_transformer=resolve_output_transformer(output_transformer),
        optimizer=optimizer,
        on_status=status,
        on_error=error,
        on_success=success,
    )
