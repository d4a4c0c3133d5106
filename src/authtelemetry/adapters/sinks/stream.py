"""Line-oriented stream sink, the pipeline's default output."""

import sys
import threading
from typing import TextIO

from authtelemetry.core.encoding.ndjson import encode_entry
from authtelemetry.core.logs import level_rank
from authtelemetry.core.models import LogEntry


class StreamSink:
    """Writes each record as one NDJSON line.

    Records at WARN and above go to the error stream, the rest to the
    output stream.

    Args:
        out: Stream for routine records (default: sys.stdout at emit time).
        err: Stream for warnings and errors (default: sys.stderr at emit time).
    """

    def __init__(self, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self._out = out
        self._err = err
        self._lock = threading.Lock()

    def emit(self, entry: LogEntry) -> None:
        """Write one line and flush."""
        if level_rank(entry.level) >= level_rank("WARN"):
            stream = self._err or sys.stderr
        else:
            stream = self._out or sys.stdout
        line = encode_entry(entry) + "\n"
        with self._lock:
            stream.write(line)
            stream.flush()
