"""CSV export of admin datasets."""

import csv
import io
import json
from collections.abc import Callable, Iterable, Mapping
from datetime import date, datetime
from typing import Any


def _get(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _text(value: Any) -> str:
    if value is None:
        return ""
    value = getattr(value, "value", value)  # enums
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _json(value: Any) -> str:
    return json.dumps(value or {}, sort_keys=True, default=str)


def _day(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, str):
        return value.split("T")[0]
    return _text(value)


Column = tuple[str, str, Callable[[Any], str]]

DATASETS: dict[str, list[Column]] = {
    "analytics_events": [
        ("ID", "id", _text),
        ("Event Type", "event_type", _text),
        ("Event Data", "event_data", _json),
        ("User ID", "user_id", _text),
        ("Session ID", "session_id", _text),
        ("Timestamp", "timestamp", _text),
        ("User Agent", "user_agent", _text),
    ],
    "goals": [
        ("ID", "id", _text),
        ("User ID", "user_id", _text),
        ("Title", "title", _text),
        ("Description", "description", _text),
        ("Target Date", "target_date", _text),
        ("Status", "status", _text),
        ("Created At", "created_at", _day),
    ],
    "activities": [
        ("ID", "id", _text),
        ("User ID", "user_id", _text),
        ("Activity Type", "activity_type", _text),
        ("Description", "description", _text),
        ("Mood Score", "mood_score", _text),
        ("Created At", "created_at", _day),
    ],
}


def rows_to_csv(dataset: str, rows: Iterable[Any]) -> str:
    """Render ``rows`` as CSV text with the dataset's header.

    Raises KeyError for an unknown dataset.
    """
    columns = DATASETS[dataset]
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([header for header, _, _ in columns])
    for row in rows:
        writer.writerow([render(_get(row, field)) for _, field, render in columns])
    return buffer.getvalue()


def export_filename(dataset: str, today: date) -> str:
    return f"{dataset}_{today.isoformat()}.csv"
