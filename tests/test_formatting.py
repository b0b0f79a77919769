"""Tests for display helpers.

Run with: pytest tests/test_formatting.py -v
"""

import pytest

from conftest import tm_event
from concertfindr.formatting import format_display_date, format_event_line, format_time_am_pm
from concertfindr.models import EventRecord


@pytest.mark.parametrize("value,expected", [
    ("19:30:00", "7:30 PM"),
    ("00:05:00", "12:05 AM"),
    ("12:00:00", "12:00 PM"),
    ("09:15", "9:15 AM"),
    ("TBA", "TBA"),
    ("xx:30", "xx:30"),
    (None, ""),
])
def test_format_time_am_pm(value, expected):
    assert format_time_am_pm(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("2025-06-01", "06/01/2025"),
    ("June 1", "June 1"),
    (None, ""),
])
def test_format_display_date(value, expected):
    assert format_display_date(value) == expected


def test_format_event_line():
    event = EventRecord.from_api(tm_event("e1", "2025-06-01"))
    assert format_event_line(event) == "06/01/2025 7:30 PM - Show e1 @ Metro, Chicago"


def test_format_event_line_without_venue():
    event = EventRecord.from_api({"id": "e2", "name": "Pop-up", "dates": {"start": {"localDate": "2025-06-01"}}})
    assert format_event_line(event) == "06/01/2025 - Pop-up @ Venue TBD"
