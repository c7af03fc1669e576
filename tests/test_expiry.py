"""Tests for expiry stamps and HTTP value types.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from shelfcache_core.cache.expiry import FETCHED_AT_HEADER, STORED_AT_HEADER, ExpiryCodec
from shelfcache_core.http.fetcher import outgoing_headers
from shelfcache_core.http.message import Request, Response, ResponseType, make_cache_key

from conftest import FakeClock

DAY = 86400


class TestExpiryCodec:
    """Tests for ExpiryCodec."""

    def test_stamp_is_epoch_millis(self):
        """Test the stamp header format."""
        clock = FakeClock(1_700_000_000.5)
        codec = ExpiryCodec(STORED_AT_HEADER, 30 * DAY, clock)

        stamped = codec.stamp(Response(body=b"x"))
        assert stamped.headers[STORED_AT_HEADER] == "1700000000500"

    def test_stamp_does_not_mutate_original(self):
        """Test that stamping returns a copy."""
        codec = ExpiryCodec(STORED_AT_HEADER, DAY, FakeClock())
        original = Response()

        codec.stamp(original)
        assert STORED_AT_HEADER not in original.headers

    def test_fresh_until_ttl_inclusive(self):
        """Test the age <= ttl boundary."""
        clock = FakeClock()
        codec = ExpiryCodec(STORED_AT_HEADER, 30 * DAY, clock)
        stamped = codec.stamp(Response())

        clock.advance(30 * DAY)
        assert codec.is_fresh(stamped)

        clock.advance(1)
        assert not codec.is_fresh(stamped)

    def test_monotonic(self):
        """Test that an expired entry never becomes fresh again."""
        clock = FakeClock()
        codec = ExpiryCodec(FETCHED_AT_HEADER, 6 * 3600, clock)
        stamped = codec.stamp(Response())

        clock.advance(7 * 3600)
        for _ in range(3):
            assert not codec.is_fresh(stamped)
            clock.advance(3600)

    def test_missing_stamp(self):
        """Test unstamped responses with and without require_stamp."""
        clock = FakeClock()
        lenient = ExpiryCodec(STORED_AT_HEADER, DAY, clock)
        strict = ExpiryCodec(FETCHED_AT_HEADER, DAY, clock, require_stamp=True)

        assert lenient.is_fresh(Response())
        assert not strict.is_fresh(Response())

    def test_malformed_stamp_treated_as_missing(self):
        """Test an unparseable stamp."""
        codec = ExpiryCodec(FETCHED_AT_HEADER, DAY, FakeClock(), require_stamp=True)
        response = Response(headers={FETCHED_AT_HEADER: "yesterday"})

        assert codec.timestamp(response) is None
        assert not codec.is_fresh(response)


class TestMessages:
    """Tests for Request and Response."""

    def test_cache_key_drops_fragment(self):
        """Test cache key normalization."""
        request = Request("http://localhost:8000/pages/reader.html#chapter-2")
        assert request.cache_key == "GET http://localhost:8000/pages/reader.html"
        assert make_cache_key("http://x/a?b=1", "get") == "GET http://x/a?b=1"

    def test_headers_case_insensitive(self):
        """Test header lookup."""
        response = Response(headers={"Content-Type": "text/html"})
        assert response.headers["content-type"] == "text/html"

    def test_error_response(self):
        """Test the network-error response."""
        error = Response.error("http://x/")
        assert error.status == 0
        assert error.type == ResponseType.ERROR
        assert error.is_error
        assert not error.ok

    def test_internal_headers_not_forwarded(self):
        """Test that stamp headers are stripped from outgoing requests."""
        request = Request(
            "http://x/a.png",
            headers={STORED_AT_HEADER: "1", FETCHED_AT_HEADER: "2", "Accept": "image/*"},
        )
        headers = outgoing_headers(request)

        assert STORED_AT_HEADER not in headers
        assert FETCHED_AT_HEADER not in headers
        assert headers["accept"] == "image/*"
