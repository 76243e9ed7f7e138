"""
Unit tests for CSV rendering.
"""

from datetime import datetime, timedelta, timezone

from brevly.manager.csv_export import CSV_HEADERS, format_timestamp, render_csv

HEADER = "ID,URL,Shortened URL,Visits,Created At,Updated At"


def _link(**overrides):
    created = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    link = {
        "id": "550e8400-e29b-41d4-a716-446655440000",
        "url": "https://example.com",
        "shortened_url": "example",
        "visits": 0,
        "created_at": created,
        "updated_at": created,
    }
    link.update(overrides)
    return link


def test_header_only_when_empty():
    assert render_csv([]) == HEADER
    assert ",".join(CSV_HEADERS) == HEADER


def test_single_row_layout():
    csv = render_csv([_link()])
    lines = csv.split("\n")
    assert len(lines) == 2
    assert lines[1] == (
        '550e8400-e29b-41d4-a716-446655440000,"https://example.com",example,0,'
        "2024-01-02T03:04:05.678Z,2024-01-02T03:04:05.678Z"
    )


def test_url_quotes_are_doubled():
    csv = render_csv([_link(url='https://example.com/?q="x"')])
    assert '"https://example.com/?q=""x"""' in csv


def test_no_trailing_newline():
    assert not render_csv([_link(), _link(shortened_url="b")]).endswith("\n")


def test_timestamps_converted_to_utc():
    local = datetime(2024, 1, 2, 0, 0, 0, tzinfo=timezone(timedelta(hours=-3)))
    assert format_timestamp(local) == "2024-01-02T03:00:00.000Z"


def test_naive_timestamps_are_treated_as_utc():
    assert format_timestamp(datetime(2024, 5, 6, 7, 8, 9)) == "2024-05-06T07:08:09.000Z"
