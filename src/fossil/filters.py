"""Post-hoc filters over enriched markers."""

from typing import List

from fossil.exceptions import FilterError
from fossil.models import DebtMarker

DURATION_UNITS = {"d": 1, "w": 7, "m": 30, "y": 365}


def parse_duration(text: str) -> int:
    """Parse an age string like ``"30d"``, ``"2w"``, ``"6m"`` or ``"1y"``.

    Args:
        text: Number followed by a unit (d, w, m or y)

    Returns:
        Number of days

    Raises:
        FilterError: If the string is empty or malformed
    """
    text = text.strip() if text else ""
    if not text:
        raise FilterError("Empty duration string")

    number, unit = text[:-1], text[-1]
    if unit not in DURATION_UNITS:
        raise FilterError(f"Invalid duration unit: {unit}. Use d, w, m, or y")
    if not number.isdigit():
        raise FilterError(f"Invalid number in duration: {text}")

    return int(number) * DURATION_UNITS[unit]


def filter_by_age(markers: List[DebtMarker], min_age: str) -> List[DebtMarker]:
    """Keep markers at least ``min_age`` old. Markers without history are dropped."""
    min_days = parse_duration(min_age)
    return [
        marker
        for marker in markers
        if marker.history_info is not None and marker.history_info.age_days >= min_days
    ]


def filter_by_author(markers: List[DebtMarker], author: str) -> List[DebtMarker]:
    """Keep markers whose author name or email contains ``author`` (case-insensitive)."""
    needle = author.lower()
    return [
        marker
        for marker in markers
        if marker.history_info is not None
        and (
            needle in marker.history_info.author_name.lower()
            or needle in marker.history_info.author_email.lower()
        )
    ]


def filter_by_type(markers: List[DebtMarker], marker_type: str) -> List[DebtMarker]:
    """Keep markers of the given type (case-insensitive exact match)."""
    wanted = marker_type.lower()
    return [marker for marker in markers if marker.marker_type.lower() == wanted]
