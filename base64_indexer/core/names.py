"""Name transformers: derive an entry key from a file's base name.

WHY: The JSON index is keyed by file name by default, but consumers often
want "degree53" rather than "degree53.png", or a completely custom key.
Keeping key derivation separate from output shaping lets any name strategy
combine with any output transformer.

HOW: A name transformer is any callable ``str -> str``. Three variants:
  identity_name          - returns the name unchanged (default)
  PatternNameTransformer - concatenates the capture groups of a regex
  custom callables       - supplied by the caller, used as-is

RULES:
- Transformers receive the base name with its extension
- Transformers are pure: no shared mutable state between calls
- Pattern transformers fail with NameTransformError on no match
- Errors raised by custom callables propagate unchanged
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Union

from base64_indexer.errors import ConfigurationError, NameTransformError

NameTransformer = Callable[[str], str]


def identity_name(name: str) -> str:
    """Return the file name unchanged."""
    return name


class PatternNameTransformer:
    """Build keys from the capture groups of a regular expression.

    WHY: A single textual pattern is easy to pass on the command line and
    covers the common cases (strip the extension, drop a prefix, etc.).

    HOW: The pattern is compiled once. Each call runs ``re.search`` against
    the name and joins the captured groups in order. Groups that did not
    participate in the match contribute an empty string. A pattern without
    groups yields the whole match.

    RULES:
    - No match raises NameTransformError(pattern, name)
    - An empty key raises NameTransformError unless allow_empty is set
    - An invalid pattern raises ConfigurationError at construction time
    """

    def __init__(self, pattern: str, allow_empty: bool = False) -> None:
        try:
            self._regex = re.compile(pattern)
        except re.error as exc:
            raise ConfigurationError(
                "Invalid name pattern {!r}: {}".format(pattern, exc)
            ) from exc
        self.pattern = pattern
        self.allow_empty = allow_empty

    def __call__(self, name: str) -> str:
        match = self._regex.search(name)
        if match is None:
            raise NameTransformError(self.pattern, name)

        if self._regex.groups:
            key = "".join(group or "" for group in match.groups())
        else:
            key = match.group(0)

        if not key and not self.allow_empty:
            raise NameTransformError(self.pattern, name, reason="produced an empty key for")
        return key

    def __repr__(self) -> str:
        return "PatternNameTransformer({!r})".format(self.pattern)


def resolve_name_transformer(
    value: Optional[Union[str, NameTransformer]],
) -> NameTransformer:
    """Turn a caller-supplied option into a name transformer.

    RULES:
    - None → identity_name
    - str → PatternNameTransformer(value)
    - callable → returned unchanged
    - anything else → ConfigurationError
    """
    if value is None:
        return identity_name
    if isinstance(value, str):
        return PatternNameTransformer(value)
    if callable(value):
        return value
    raise ConfigurationError(
        "Name transformer must be a pattern string or a callable, got {}".format(
            type(value).__name__
        )
    )
