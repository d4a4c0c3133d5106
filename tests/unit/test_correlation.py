"""Tests for correlation id generation and propagation."""

import asyncio
import re
import threading

import pytest

from authtelemetry.core.correlation import (
    CorrelationManager,
    bind_correlation_id,
    current_correlation_id,
)

pytestmark = [
    pytest.mark.unit,
    pytest.mark.tier(1),
    pytest.mark.tra("Core.Correlation"),
]

ID_FORMAT = re.compile(r"^trace-(\d+)-[0-9a-f]{16}$")


class TestGenerate:
    """Tests for CorrelationManager.generate()."""

    @pytest.mark.core
    def test_format(self) -> None:
        """Ids look like trace-<epoch ms>-<16 hex chars>."""
        assert ID_FORMAT.match(CorrelationManager.generate())

    @pytest.mark.core
    def test_timestamp_is_epoch_milliseconds(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """The middle part is the current time in milliseconds."""
        import time

        monkeypatch.setattr(time, "time_ns", lambda: 1_702_300_000_123_456_789)
        match = ID_FORMAT.match(CorrelationManager.generate())

        assert match is not None
        assert match.group(1) == "1702300000123"

    @pytest.mark.core
    def test_unique_across_threads(self) -> None:
        """Ids generated concurrently from many threads never collide."""
        ids: list[str] = []
        lock = threading.Lock()

        def worker() -> None:
            local = [CorrelationManager.generate() for _ in range(1000)]
            with lock:
                ids.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(set(ids)) == 8000


class TestPropagation:
    """Tests for extracting and injecting the carrier header."""

    @pytest.mark.core
    def test_inbound_value_returned_unchanged(self) -> None:
        """A present header value is propagated as-is."""
        assert CorrelationManager().extract_or_generate("upstream-42") == "upstream-42"

    @pytest.mark.core
    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_value_generates(self, value: str | None) -> None:
        """Absent or empty headers trigger generation."""
        assert ID_FORMAT.match(CorrelationManager().extract_or_generate(value))

    @pytest.mark.core
    def test_extract_from_mapping_is_case_insensitive(self) -> None:
        """Header names are matched case-insensitively."""
        manager = CorrelationManager()
        headers = {"X-Correlation-ID": "abc", "Accept": "*/*"}

        assert manager.extract_from_headers(headers) == "abc"

    @pytest.mark.core
    def test_extract_from_raw_headers(self) -> None:
        """ASGI raw header pairs are searched as bytes."""
        manager = CorrelationManager()
        headers = [(b"accept", b"*/*"), (b"X-Correlation-Id", b"abc-123")]

        assert manager.extract_from_headers(headers) == "abc-123"

    @pytest.mark.core
    def test_extract_generates_when_header_missing(self) -> None:
        """No carrier header means a fresh id."""
        assert ID_FORMAT.match(CorrelationManager().extract_from_headers([]))
        assert ID_FORMAT.match(CorrelationManager().extract_from_headers({}))

    @pytest.mark.core
    def test_custom_header_name(self) -> None:
        """A configured header name replaces the default."""
        manager = CorrelationManager("X-Request-ID")
        assert manager.extract_from_headers({"x-request-id": "r-1"}) == "r-1"

    @pytest.mark.core
    def test_inject(self) -> None:
        """inject() sets the carrier header on a mapping."""
        headers: dict[str, str] = {}
        CorrelationManager().inject(headers, "trace-1-a")

        assert headers == {"x-correlation-id": "trace-1-a"}

    @pytest.mark.core
    def test_inject_raw_replaces_existing(self) -> None:
        """inject_raw() leaves exactly one carrier header."""
        headers = [(b"content-type", b"text/plain"), (b"x-correlation-id", b"old")]
        CorrelationManager().inject_raw(headers, "new")

        assert headers == [(b"content-type", b"text/plain"), (b"x-correlation-id", b"new")]


class TestContextBinding:
    """Tests for the context-local correlation id."""

    @pytest.mark.core
    def test_unbound_is_none(self) -> None:
        assert current_correlation_id() is None

    @pytest.mark.core
    def test_binding_is_scoped(self) -> None:
        """The id is visible inside the block and restored after it."""
        with bind_correlation_id("outer"):
            with bind_correlation_id("inner"):
                assert current_correlation_id() == "inner"
            assert current_correlation_id() == "outer"
        assert current_correlation_id() is None

    async def test_tasks_do_not_share_bindings(self) -> None:
        """Concurrent tasks each see their own id."""

        async def handler(correlation_id: str) -> str | None:
            with bind_correlation_id(correlation_id):
                await asyncio.sleep(0.001)
                return current_correlation_id()

        results = await asyncio.gather(*(handler(f"id-{i}") for i in range(10)))

        assert results == [f"id-{i}" for i in range(10)]
