"""Shared test fixtures for the base64_indexer test suite.

WHY: Most test modules need small, real image files and a stand-in for
the optimisation step. Centralising them here keeps every test on the same
fixtures.

HOW: Images are generated with Pillow into tmp_path so no binary assets
live in the repo. FakeOptimizer is an async callable that records its
calls and returns a fixed batch.

RULES:
- All file I/O happens under tmp_path
- FakeOptimizer.calls counts invocations for pre-flight assertions
"""

from pathlib import Path
from typing import List, Optional

import pytest
from PIL import Image

from base64_indexer.core.models import OptimizedFile

SVG_SOURCE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="4" height="4">'
    '<rect width="4" height="4" fill="red"/></svg>'
)


def make_image(path: Path, fmt: str = "PNG", color=(200, 30, 30)) -> Path:
    """Write a tiny solid-colour image and return its path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", (4, 4), color).save(path, format=fmt)
    return path


class FakeOptimizer:
    """Async optimiser stand-in returning a fixed batch."""

    def __init__(self, files: Optional[List[OptimizedFile]] = None, exc: Optional[BaseException] = None):
        self.files = files or []
        self.exc = exc
        self.calls: List[str] = []

    async def __call__(self, pattern: str) -> List[OptimizedFile]:
        self.calls.append(pattern)
        if self.exc is not None:
            raise self.exc
        return list(self.files)


@pytest.fixture
def input_dir(tmp_path):
    directory = tmp_path / "input"
    directory.mkdir()
    return directory


@pytest.fixture
def output_dir(tmp_path):
    directory = tmp_path / "output"
    directory.mkdir()
    return directory


@pytest.fixture
def png_file(input_dir):
    """A single PNG input image."""
    return make_image(input_dir / "degree53.png")


@pytest.fixture
def jpeg_file(input_dir):
    return make_image(input_dir / "photo.jpg", fmt="JPEG")


@pytest.fixture
def svg_file(input_dir):
    path = input_dir / "icon.svg"
    path.write_text(SVG_SOURCE, encoding="utf-8")
    return path


@pytest.fixture
def mixed_inputs(png_file, jpeg_file, svg_file, input_dir):
    """PNG, JPEG, SVG and GIF files in one input directory."""
    gif = make_image(input_dir / "anim.gif", fmt="GIF")
    return [png_file, jpeg_file, svg_file, gif]

