"""Wire encoders for telemetry records."""

from authtelemetry.core.encoding.ndjson import encode_entry, encode_ndjson

__all__ = ["encode_entry", "encode_ndjson"]
