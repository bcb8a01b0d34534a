"""Data models for debt markers and configuration."""

from fossil.models.config import DEFAULT_IGNORED_DIRS, DEFAULT_MARKERS, FossilSettings, ScanConfig
from fossil.models.marker import DebtMarker, DebtReport, HistoryInfo

__all__ = [
    "DebtMarker",
    "HistoryInfo",
    "DebtReport",
    "ScanConfig",
    "FossilSettings",
    "DEFAULT_MARKERS",
    "DEFAULT_IGNORED_DIRS",
]
