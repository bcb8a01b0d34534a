"""Data models for debt markers and their git history."""

from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class HistoryInfo(BaseModel):
    """Authorship snapshot for one line, taken from git blame."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "author_name": "John Doe",
                "author_email": "john@example.com",
                "revision_id": "abc123d",
                "revision_time": "2024-01-15T10:30:00Z",
                "age_days": 347,
            }
        },
    )

    author_name: str = Field(..., description="Author name of the attributing commit")
    author_email: str = Field(..., description="Author email of the attributing commit")
    revision_id: str = Field(..., description="Abbreviated commit hash (7 chars)")
    revision_time: datetime = Field(..., description="Commit timestamp (UTC)")
    age_days: int = Field(..., ge=0, description="Whole days between commit and enrichment")

    @property
    def age_display(self) -> str:
        """Age as a short human string, e.g. ``"12d"``, ``"4m"``, ``"2y"``."""
        if self.age_days < 30:
            return f"{self.age_days}d"
        if self.age_days < 365:
            return f"{self.age_days // 30}m"
        return f"{self.age_days // 365}y"


class DebtMarker(BaseModel):
    """A single TODO/FIXME/... annotation found in a source file."""

    marker_type: str = Field(..., description="Marker token as found in source (TODO, FIXME, ...)")
    file_path: Path = Field(..., description="Path of the containing file as discovered by the walk")
    line_number: int = Field(..., ge=1, description="1-indexed line number")
    line_content: str = Field(..., description="Raw text of the matching line")
    context_before: List[str] = Field(default_factory=list, description="Lines preceding the marker")
    context_after: List[str] = Field(default_factory=list, description="Lines following the marker")

    # Populated later by the history enricher
    history_info: Optional[HistoryInfo] = Field(None, description="Git blame information if available")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "marker_type": "TODO",
                "file_path": "src/auth.py",
                "line_number": 42,
                "line_content": "    # TODO: validate token expiry",
                "context_before": ["def authenticate(token):", "    if not token:"],
                "context_after": ["    return True"],
                "history_info": None,
            }
        }
    )


class DebtReport(BaseModel):
    """Aggregated view of all markers from one scan."""

    markers: List[DebtMarker] = Field(default_factory=list)
    total_count: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_author: Dict[str, int] = Field(default_factory=dict)
    by_file: Dict[str, int] = Field(default_factory=dict)
    scan_path: Path
    scan_time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_markers(cls, markers: List[DebtMarker], scan_path: Path) -> "DebtReport":
        """Build a report, counting markers by type, author and file.

        Args:
            markers: Enriched (or raw) markers
            scan_path: Path that was scanned

        Returns:
            DebtReport with aggregate counts filled in
        """
        by_type = Counter(m.marker_type for m in markers)
        by_file = Counter(str(m.file_path) for m in markers)
        by_author = Counter(
            m.history_info.author_name for m in markers if m.history_info is not None
        )

        return cls(
            markers=markers,
            total_count=len(markers),
            by_type=dict(by_type),
            by_author=dict(by_author),
            by_file=dict(by_file),
            scan_path=scan_path,
        )

    def oldest_markers(self, limit: int) -> List[DebtMarker]:
        """Markers with history, oldest first, at most ``limit`` of them."""
        dated = [m for m in self.markers if m.history_info is not None]
        dated.sort(key=lambda m: m.history_info.age_days, reverse=True)
        return dated[:limit]
