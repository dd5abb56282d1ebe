"""Default optimisation collaborator: match, verify and recompress images.

WHY: The pipeline consumes an ordered batch of (path, bytes) pairs. This
module produces that batch from a glob pattern: it expands brace
alternatives the stdlib glob does not understand, checks that raster files
are real images, and recompresses JPEGs losslessly before they are encoded.

HOW: expand_braces() turns ``input/*.{gif,png}`` into plain glob patterns.
match_files() globs each of them and returns a sorted, de-duplicated list of
files. optimize_images() verifies rasters with Pillow (in a worker thread)
and pipes JPEGs through ``jpegtran -copy none -optimize -progressive`` via
an asyncio subprocess. load_images() only matches and reads.

RULES:
- Matched paths are sorted so batch order is stable across platforms
- "**" in a pattern matches recursively
- Unreadable or unsupported rasters raise OptimizationError
- SVG and other non-raster files are passed through byte-for-byte
- Only JPEGs are recompressed; PNG/GIF bytes are left untouched
- If jpegtran is not installed, JPEG bytes are left untouched
"""

from __future__ import annotations

import asyncio
import glob as globlib
import logging
import shutil
from pathlib import Path
from typing import Callable, List, Optional

from PIL import Image, UnidentifiedImageError

from base64_indexer.config import JPEGTRAN_BINARY
from base64_indexer.core.models import OptimizedFile
from base64_indexer.errors import OptimizationError

logger = logging.getLogger(__name__)

JPEG_EXTENSIONS = frozenset({".jpg", ".jpeg", ".jpe"})

# Extensions read as-is; Pillow cannot open them.
PASSTHROUGH_EXTENSIONS = frozenset({".svg", ".svgz"})


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives into separate patterns.

    Handles nesting and several groups; a group without a comma, or an
    unbalanced brace, is kept literally.

    >>> expand_braces("input/*.{gif,png}")
    ['input/*.gif', 'input/*.png']
    """
    depth = 0
    start = -1
    for index, char in enumerate(pattern):
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0:
                options = _split_top_level(pattern[start + 1:index])
                if len(options) < 2:
                    continue
                head, tail = pattern[:start], pattern[index + 1:]
                expanded: List[str] = []
                for option in options:
                    expanded.extend(expand_braces(head + option + tail))
                return expanded
    return [pattern]


def _split_top_level(body: str) -> List[str]:
    """Split a brace body on commas that are not inside nested braces."""
    parts: List[str] = []
    depth = 0
    current = []
    for char in body:
        if char == "," and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        if char == "{":
            depth += 1
        elif char == "}" and depth:
            depth -= 1
        current.append(char)
    parts.append("".join(current))
    return parts


def match_files(pattern: str) -> List[Path]:
    """Return the files matching ``pattern``, sorted and de-duplicated.

    Args:
        pattern: Glob pattern, optionally with brace alternatives.

    Returns:
        Sorted list of matching file paths (directories excluded).
    """
    seen = set()
    for alternative in expand_braces(pattern):
        for match in globlib.glob(alternative, recursive=True):
            path = Path(match)
            if path.is_file():
                seen.add(path)
    matches = sorted(seen, key=lambda p: p.as_posix())
    logger.debug("Pattern %r matched %d file(s)", pattern, len(matches))
    return matches


def _verify_raster(path: Path) -> None:
    """Open and verify an image with Pillow, raising OptimizationError."""
    try:
        with Image.open(path) as image:
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise OptimizationError(
            "Unreadable or unsupported image {}: {}".format(path, exc)
        ) from exc


async def _read_bytes(path: Path) -> bytes:
    try:
        return await asyncio.to_thread(path.read_bytes)
    except OSError as exc:
        raise OptimizationError("Could not read {}: {}".format(path, exc)) from exc


async def _jpegtran(binary: str, contents: bytes, path: Path) -> bytes:
    """Losslessly recompress JPEG bytes as a progressive JPEG."""
    process = await asyncio.create_subprocess_exec(
        binary, "-copy", "none", "-optimize", "-progressive",
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate(contents)
    if process.returncode != 0:
        raise OptimizationError(
            "jpegtran failed for {} (exit {}): {}".format(
                path, process.returncode, stderr.decode("utf-8", "replace").strip()
            )
        )
    return stdout


async def load_images(pattern: str) -> List[OptimizedFile]:
    """Match ``pattern`` and read every file without optimising it."""
    files: List[OptimizedFile] = []
    for path in match_files(pattern):
        files.append(OptimizedFile(path=path, contents=await _read_bytes(path)))
    return files


async def optimize_images(
    pattern: str,
    jpegtran: Optional[str] = None,
    on_status: Optional[Callable[[str], None]] = None,
) -> List[OptimizedFile]:
    """Match, verify and losslessly optimise the images for ``pattern``.

    WHY: Smaller JPEG payloads mean a smaller JSON index, and verifying
    rasters up front turns a corrupt input into a clear error instead of a
    broken data URI.

    HOW: Files are handled one after another in sorted path order. Pillow
    verification runs in a worker thread; jpegtran runs as an asyncio
    subprocess fed through stdin/stdout.

    RULES:
    - Returned order equals match_files() order
    - Any failure aborts the whole batch with OptimizationError
    - jpegtran is resolved on PATH (or from BASE64_INDEXER_JPEGTRAN);
      when missing, JPEGs are returned unchanged

    Args:
        pattern: Glob pattern, optionally with brace alternatives.
        jpegtran: jpegtran binary name or path; defaults to JPEGTRAN_BINARY.
        on_status: Optional callback for status updates.

    Returns:
        The batch of optimised files.
    """
    binary = shutil.which(jpegtran or JPEGTRAN_BINARY)
    if binary is None:
        logger.debug("jpegtran not found; JPEG files will not be recompressed")

    files: List[OptimizedFile] = []
    for path in match_files(pattern):
        contents = await _read_bytes(path)
        suffix = path.suffix.lower()

        if suffix not in PASSTHROUGH_EXTENSIONS:
            await asyncio.to_thread(_verify_raster, path)

        if suffix in JPEG_EXTENSIONS and binary:
            try:
                optimised = await _jpegtran(binary, contents, path)
            except OSError as exc:
                raise OptimizationError(
                    "Could not run jpegtran for {}: {}".format(path, exc)
                ) from exc
            logger.debug("jpegtran %s: %d -> %d bytes", path, len(contents), len(optimised))
            if on_status:
                on_status("Optimised {} ({} -> {} bytes)".format(path.name, len(contents), len(optimised)))
            contents = optimised

        files.append(OptimizedFile(path=path, contents=contents))
    return files
