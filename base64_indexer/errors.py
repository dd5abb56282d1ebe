"""Error taxonomy for the indexer pipeline.

WHY: Callers route every failure through a single error channel, but still
need to tell a bad option apart from an unreadable image or a failed
write. One typed exception per pipeline stage makes that possible without
string matching.

HOW: IndexerError is the common base. Each subclass is raised by exactly
one stage: configuration resolution, optimisation, name transformation,
or serialisation.

RULES:
- ConfigurationError is raised before any file I/O happens
- OptimizationError wraps the optimiser's underlying exception (``from``)
- NameTransformError carries the offending pattern and file name
- SerializationError carries the output path that could not be written
- Errors raised by caller-supplied name functions are NOT wrapped
"""

from __future__ import annotations


class IndexerError(Exception):
    """Base class for all errors raised by the indexer."""


class ConfigurationError(IndexerError, ValueError):
    """Raised when caller options cannot be resolved into a run config.

    WHY: An unknown transformer name or a broken name pattern should fail
    immediately, not halfway through a batch.

    RULES:
    - Raised during config resolution, before the optimiser is called
    - Message names the offending key or value
    """


class OptimizationError(IndexerError):
    """Raised when the image optimisation step fails.

    RULES:
    - No output file is written after this error
    """


class NameTransformError(IndexerError):
    """Raised when a pattern name transformer cannot derive a key.

    WHY: A file whose name does not match the configured pattern has no
    sensible key. Guessing one would silently corrupt the index.

    HOW: Raised by PatternNameTransformer when the pattern does not match
    the file name, or when the captured key is empty and empty keys are
    not allowed.

    RULES:
    - pattern: the textual pattern that was applied
    - name: the file base name it was applied to
    """

    def __init__(self, pattern: str, name: str, reason: str = "did not match") -> None:
        self.pattern = pattern
        self.name = name
        super().__init__(
            "Name pattern {!r} {} file name {!r}".format(pattern, reason, name)
        )


class SerializationError(IndexerError):
    """Raised when the aggregated JSON document cannot be written."""

    def __init__(self, path, message: str) -> None:
        self.path = path
        super().__init__("Could not write {}: {}".format(path, message))
