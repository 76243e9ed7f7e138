"""
CSV rendering for the export operation.

Format:
    - header: ID,URL,Shortened URL,Visits,Created At,Updated At
    - the URL column is always double-quoted, inner quotes doubled
    - timestamps are ISO 8601 UTC with millisecond precision and a "Z" suffix
    - lines joined by "\\n", no trailing newline
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable

CSV_HEADERS = ["ID", "URL", "Shortened URL", "Visits", "Created At", "Updated At"]


def format_timestamp(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    iso = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return iso.replace("+00:00", "Z")


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def render_csv(links: Iterable[Dict[str, Any]]) -> str:
    lines = [",".join(CSV_HEADERS)]
    for link in links:
        lines.append(
            ",".join(
                [
                    link["id"],
                    _quote(link["url"]),
                    link["shortened_url"],
                    str(link["visits"]),
                    format_timestamp(link["created_at"]),
                    format_timestamp(link["updated_at"]),
                ]
            )
        )
    return "\n".join(lines)
