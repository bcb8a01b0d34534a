"""Unit tests for data models."""

from datetime import datetime, timezone
from pathlib import Path

import pytest
from pydantic import ValidationError

from fossil.models import DebtMarker, DebtReport, HistoryInfo


def make_info(age_days: int, author: str = "Test") -> HistoryInfo:
    return HistoryInfo(
        author_name=author,
        author_email=f"{author.lower()}@example.com",
        revision_id="abc1234",
        revision_time=datetime.now(timezone.utc),
        age_days=age_days,
    )


def make_marker(line_number: int, marker_type: str = "TODO", info: HistoryInfo = None, file_path: str = "test.rs"):
    return DebtMarker(
        marker_type=marker_type,
        file_path=Path(file_path),
        line_number=line_number,
        line_content=f"// {marker_type}: test{line_number}",
        history_info=info,
    )


@pytest.mark.parametrize(
    "age_days,expected",
    [(0, "0d"), (15, "15d"), (29, "29d"), (30, "1m"), (60, "2m"), (364, "12m"), (365, "1y"), (400, "1y"), (800, "2y")],
)
def test_age_display(age_days, expected):
    assert make_info(age_days).age_display == expected


def test_history_info_is_immutable():
    info = make_info(10)

    with pytest.raises(ValidationError):
        info.age_days = 20


def test_history_info_rejects_negative_age():
    with pytest.raises(ValidationError):
        make_info(-1)


def test_marker_defaults():
    marker = make_marker(1)

    assert marker.context_before == []
    assert marker.context_after == []
    assert marker.history_info is None


def test_debt_report_creation():
    markers = [
        make_marker(1, info=make_info(10, "Alice")),
        make_marker(2, info=make_info(20, "Alice")),
        make_marker(3, marker_type="FIXME", file_path="lib.rs"),
    ]

    report = DebtReport.from_markers(markers, Path("."))

    assert report.total_count == 3
    assert report.by_type == {"TODO": 2, "FIXME": 1}
    assert report.by_file == {"test.rs": 2, "lib.rs": 1}
    assert report.by_author == {"Alice": 2}
    assert report.scan_path == Path(".")


def test_oldest_markers():
    """Only dated markers are ranked, oldest first."""
    markers = [
        make_marker(1, info=make_info(10)),
        make_marker(2, info=make_info(500)),
        make_marker(3),
        make_marker(4, info=make_info(90)),
    ]
    report = DebtReport.from_markers(markers, Path("."))

    oldest = report.oldest_markers(2)

    assert [m.line_number for m in oldest] == [2, 4]
    assert len(report.oldest_markers(10)) == 3
