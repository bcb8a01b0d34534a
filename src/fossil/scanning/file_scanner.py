"""Single-pass, context-aware marker scanner for one file."""

import os
from collections import deque
from dataclasses import dataclass
from pathlib import Path
from typing import Deque, List, Union

import structlog

from fossil.exceptions import FileScanError, FileTooLargeError
from fossil.models import DebtMarker
from fossil.scanning.patterns import MarkerPattern

logger = structlog.get_logger(__name__)

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

BINARY_EXTENSIONS = frozenset(
    {"png", "jpg", "jpeg", "gif", "ico", "pdf", "zip", "tar", "gz", "exe", "dll", "so", "dylib", "bin", "dat"}
)


@dataclass
class _Idle:
    """No marker is waiting for trailing context."""


@dataclass
class _CollectingAfter:
    """``marker`` still wants ``remaining`` lines of trailing context."""

    marker: DebtMarker
    remaining: int


_ScanState = Union[_Idle, _CollectingAfter]


def _decode_line(raw: bytes) -> str:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode("utf-8")


def scan_file(path: Path, pattern: MarkerPattern, context_lines: int) -> List[DebtMarker]:
    """Scan a single file for debt markers.

    Lines that are not valid UTF-8 are skipped (but still counted, so line
    numbers stay true to the file). Context windows never overlap: the lines
    collected after one marker are not offered as leading context to the
    next, and a new match cuts short the previous marker's trailing context.

    Args:
        path: File to scan
        pattern: Compiled marker pattern
        context_lines: Lines of context to capture on each side (0 disables)

    Returns:
        Markers in ascending line order

    Raises:
        FileTooLargeError: If the file exceeds MAX_FILE_SIZE
        FileScanError: If the file cannot be opened
    """
    try:
        size = os.stat(path).st_size
    except OSError as e:
        raise FileScanError(path, "cannot stat file", e) from e
    if size > MAX_FILE_SIZE:
        raise FileTooLargeError(path, size, MAX_FILE_SIZE)

    try:
        handle = open(path, "rb")
    except OSError as e:
        raise FileScanError(path, "cannot open file", e) from e

    markers: List[DebtMarker] = []
    before: Deque[str] = deque(maxlen=context_lines)
    state: _ScanState = _Idle()

    with handle:
        try:
            for line_number, raw in enumerate(handle, start=1):
                try:
                    line = _decode_line(raw)
                except UnicodeDecodeError:
                    # Probably binary content
                    continue

                found = pattern.match(line)
                if found is not None:
                    if isinstance(state, _CollectingAfter):
                        markers.append(state.marker)

                    marker = DebtMarker(
                        marker_type=found.marker_type,
                        file_path=path,
                        line_number=line_number,
                        line_content=line,
                        context_before=list(before),
                    )
                    before.clear()

                    if context_lines > 0:
                        state = _CollectingAfter(marker, context_lines)
                    else:
                        markers.append(marker)
                        state = _Idle()
                    continue

                if isinstance(state, _CollectingAfter):
                    state.marker.context_after.append(line)
                    state.remaining -= 1
                    if state.remaining == 0:
                        markers.append(state.marker)
                        state = _Idle()
                    continue

                before.append(line)
        except OSError as e:
            logger.debug("file_read_interrupted", path=str(path), error=str(e), markers=len(markers))

    if isinstance(state, _CollectingAfter):
        markers.append(state.marker)

    return markers


def is_likely_binary(path: Path) -> bool:
    """Check whether a file is likely binary, judging by its extension."""
    return path.suffix.lower().lstrip(".") in BINARY_EXTENSIONS
