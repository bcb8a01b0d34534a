"""Marker extraction: pattern compilation, file scanning and tree walking."""

from fossil.scanning.file_scanner import MAX_FILE_SIZE, is_likely_binary, scan_file
from fossil.scanning.patterns import MarkerMatch, MarkerPattern, compile_marker_pattern
from fossil.scanning.walker import TreeWalker, scan_directory

__all__ = [
    "MAX_FILE_SIZE",
    "MarkerMatch",
    "MarkerPattern",
    "TreeWalker",
    "compile_marker_pattern",
    "is_likely_binary",
    "scan_directory",
    "scan_file",
]
