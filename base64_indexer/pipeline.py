"""Pipeline orchestrator: optimise, encode, transform and serialise a batch.

WHY: One invocation turns a glob pattern into one JSON document. The steps
must run in a fixed order, stop at the first failure, and report the outcome
through the caller's callbacks (or by raising). This module owns that
sequencing so the individual stages stay ignorant of each other.

HOW: run_async() starts a PipelineRun, which resolves the RunConfig, awaits
the optimiser, hands the batch to the batch encoder, and writes the buffer
with write_output(). PipelineRun tracks its RunState so callers and tests
can see where a run stopped. run() is the synchronous wrapper around
run_async().

RULES:
- Configuration errors are raised before the optimiser is awaited
- Non-indexer optimiser failures are wrapped in OptimizationError
- The buffer is serialised only after every file has been folded in
- Output path: <output>/data-<YYYY-DD-MM-HH-MM-SS>.json, numeric suffix on
  conflict (data-<ts>-2.json); existing files are never overwritten
- JSON is written as UTF-8 with 4-space indentation, not atomically
- With an error callback the error is passed to it and None is returned;
  without one the error is raised
"""

from __future__ import annotations

import asyncio
import enum
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from base64_indexer.config import (
    JSON_INDENT,
    OUTPUT_FILENAME_PREFIX,
    OUTPUT_TIMESTAMP_FORMAT,
    RunConfig,
    resolve_config,
)
from base64_indexer.core.encoder import encode_batch
from base64_indexer.errors import IndexerError, OptimizationError, SerializationError

logger = logging.getLogger(__name__)


class RunState(str, enum.Enum):
    """States of a single pipeline run.

    RULES:
    - idle → resolving_config → optimizing → encoding → serializing → done
    - failed is terminal and reachable from any working state
    - A failed run is not resumed; start a new one
    """

    IDLE = "idle"
    RESOLVING_CONFIG = "resolving_config"
    OPTIMIZING = "optimizing"
    ENCODING = "encoding"
    SERIALIZING = "serializing"
    DONE = "done"
    FAILED = "failed"


def format_timestamp(moment: datetime) -> str:
    """Format the timestamp used in output file names."""
    return moment.strftime(OUTPUT_TIMESTAMP_FORMAT)


def resolve_output_path(output_dir: Path, moment: datetime) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    WHY: Two runs within the same second share a timestamp. Overwriting
    the first artifact would silently lose it.

    RULES:
    - First attempt: data-<timestamp>.json
    - Conflict: data-<timestamp>-2.json, -3, ... until a free name is found
    """
    stem = "{}{}".format(OUTPUT_FILENAME_PREFIX, format_timestamp(moment))
    candidate = output_dir / "{}.json".format(stem)
    counter = 2
    while candidate.exists():
        candidate = output_dir / "{}-{}.json".format(stem, counter)
        counter += 1
    return candidate


def write_output(buffer: Any, output_dir: Path, moment: Optional[datetime] = None) -> Path:
    """Serialise the aggregate buffer to a new JSON file.

    Args:
        buffer: The fully populated buffer (list or dict).
        output_dir: Existing directory to write into.
        moment: Timestamp for the file name; defaults to now.

    Returns:
        Path of the written file.

    Raises:
        SerializationError: The buffer is not JSON-serialisable or the
            file could not be written (missing directory, permissions).
    """
    path = resolve_output_path(output_dir, moment or datetime.now())
    try:
        contents = json.dumps(buffer, indent=JSON_INDENT, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(path, str(exc)) from exc
    try:
        path.write_text(contents, encoding="utf-8")
    except OSError as exc:
        raise SerializationError(path, exc.strerror or str(exc)) from exc
    return path


class PipelineRun:
    """One execution of the pipeline with its state.

    WHY: The run is a small state machine. Keeping the state on an object
    rather than in module globals lets several runs coexist in one process.

    HOW: execute() resolves the options into a RunConfig, then walks the
    remaining states in order, recording each transition, and leaves the
    run in DONE or FAILED.

    RULES:
    - A new run starts IDLE; execute() may be called once
    - config is None until RESOLVING_CONFIG has succeeded
    """

    def __init__(self, **options: Any) -> None:
        self.options = options
        self.state = RunState.IDLE
        self.config: Optional[RunConfig] = None
        self.output_path: Optional[Path] = None
        self.error: Optional[BaseException] = None

    def _enter(self, state: RunState) -> None:
        logger.debug("Run state: %s -> %s", self.state.value, state.value)
        self.state = state

    async def execute(self) -> Path:
        if self.state is not RunState.IDLE:
            raise RuntimeError("A pipeline run can only be executed once")

        try:
            self._enter(RunState.RESOLVING_CONFIG)
            config = resolve_config(**self.options)
            self.config = config

            self._enter(RunState.OPTIMIZING)
            try:
                files = await config.optimizer(config.glob)
            except IndexerError:
                raise
            except Exception as exc:
                raise OptimizationError(
                    "Optimising {!r} failed: {}".format(config.glob, exc)
                ) from exc

            self._enter(RunState.ENCODING)
            files = list(files)
            transformer_name = getattr(
                config.output_transformer, "name", type(config.output_transformer).__name__
            )
            config.on_status("Encoding {} file(s) as {}".format(len(files), transformer_name))
            buffer = encode_batch(
                files,
                config.output_transformer,
                config.name_transformer,
                on_status=config.on_status,
            )

            self._enter(RunState.SERIALIZING)
            path = write_output(buffer, config.output_directory)
        except BaseException as exc:
            self.error = exc
            self._enter(RunState.FAILED)
            raise

        self.output_path = path
        self._enter(RunState.DONE)
        config.on_status("Wrote {}".format(path))
        return path


async def run_async(
    glob: Optional[str] = None,
    output: Optional[str] = None,
    output_transformer: Any = None,
    name_transformer: Any = None,
    silent: bool = False,
    success: Optional[Callable[[Path], None]] = None,
    error: Optional[Callable[[BaseException], None]] = None,
    on_status: Optional[Callable[[str], None]] = None,
    optimize: bool = True,
    optimizer: Any = None,
) -> Optional[Path]:
    """Run the pipeline once inside an existing event loop.

    Args:
        glob: Input pattern; defaults to ``input/*.{gif,jpg,png,svg}``.
        output: Output directory; defaults to ``output/``.
        output_transformer: "default", "verbose", "dictionary", an
            OutputShape, or a capability object.
        name_transformer: Pattern string, callable, or None for identity.
        silent: Suppress progress messages.
        success: Called with the output path once the file is written.
        error: Called with the error instead of raising it.
        on_status: Progress sink; defaults to stderr.
        optimize: False reads matched files without recompression.
        optimizer: Replacement optimisation collaborator.

    Returns:
        The output path, or None when an error was passed to ``error``.
    """
    pipeline_run = PipelineRun(
        glob=glob,
        output=output,
        output_transformer=output_transformer,
        name_transformer=name_transformer,
        silent=silent,
        success=success,
        error=error,
        on_status=on_status,
        optimize=optimize,
        optimizer=optimizer,
    )
    try:
        path = await pipeline_run.execute()
    except Exception as exc:
        if error is None or not callable(error):
            raise
        logger.debug("Routing %s to error callback", type(exc).__name__)
        error(exc)
        return None

    on_success = pipeline_run.config.on_success
    if on_success is not None:
        on_success(path)
    return path


def run(**options: Any) -> Optional[Path]:
    """Run the pipeline once, blocking until the JSON file is written.

    Takes the same keyword options as run_async().
    """
    return asyncio.run(run_async(**options))
