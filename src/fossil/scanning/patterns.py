"""Compile a marker vocabulary into a single comment-aware matching rule."""

import re
from typing import Iterable, List, NamedTuple, Optional

from fossil.exceptions import PatternError

# Handles: //, #, /*, *, <!--
COMMENT_PREFIX = r"(?://|#|/\*|\*|<!--)"
COMMENT_SUFFIX = r"(?:-->|\*/)"


class MarkerMatch(NamedTuple):
    """Result of applying a MarkerPattern to one line."""

    marker_type: str
    text: str


class MarkerPattern:
    """A compiled marker rule.

    A line matches when, after leading whitespace, it starts with a comment
    prefix followed by one of the marker tokens as a whole word. Trailing
    comment terminators (``*/``, ``-->``) are stripped from the captured text.
    """

    def __init__(self, markers: List[str], regex: "re.Pattern[str]") -> None:
        self.markers = markers
        self.regex = regex

    def match(self, line: str) -> Optional[MarkerMatch]:
        found = self.regex.match(line)
        if found is None:
            return None
        return MarkerMatch(marker_type=found.group(1), text=found.group(2))

    def __repr__(self) -> str:
        return f"MarkerPattern(markers={self.markers!r})"


def compile_marker_pattern(markers: Iterable[str]) -> MarkerPattern:
    """Build the matching rule for a marker vocabulary.

    Args:
        markers: Marker tokens, e.g. ``["TODO", "FIXME"]``. Duplicates are
            treated as aliases.

    Returns:
        Compiled MarkerPattern

    Raises:
        PatternError: If the vocabulary is empty, contains an empty token, or
            the resulting expression fails to compile
    """
    tokens = list(dict.fromkeys(markers))
    if not tokens:
        raise PatternError("Marker vocabulary is empty")
    if any(not isinstance(token, str) or not token for token in tokens):
        raise PatternError(f"Marker tokens must be non-empty strings: {tokens!r}")

    # Longest first so that e.g. "TODO-LATER" wins over "TODO"
    alternation = "|".join(re.escape(token) for token in sorted(tokens, key=len, reverse=True))
    source = (
        rf"^\s*{COMMENT_PREFIX}\s*({alternation})(?!\w):?\s*(.*?)\s*{COMMENT_SUFFIX}?\s*$"
    )

    try:
        regex = re.compile(source)
    except re.error as e:
        raise PatternError(f"Failed to compile marker regex {source!r}: {e}") from e

    return MarkerPattern(tokens, regex)
