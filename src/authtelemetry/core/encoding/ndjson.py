"""NDJSON encoder for telemetry records."""

import json
from collections.abc import Iterable

from authtelemetry.core.models import LogEntry


def _entry_to_dict(entry: LogEntry) -> dict[str, object]:
    return {
        "timestamp": entry.timestamp,
        "level": entry.level,
        "message": entry.message,
        "attributes": entry.attributes,
    }


def encode_entry(entry: LogEntry) -> str:
    """Encode a single record as one JSON line, without the trailing newline.

    Values that JSON cannot represent natively are rendered with str().
    """
    return json.dumps(_entry_to_dict(entry), default=str)


def encode_ndjson(entries: Iterable[LogEntry]) -> str:
    """Encode records to newline-delimited JSON.

    Args:
        entries: An iterable of LogEntry objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no entries.
    """
    lines = [encode_entry(entry) for entry in entries]

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
