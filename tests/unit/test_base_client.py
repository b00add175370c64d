"""
Unit Tests for the Shared REST Client

These tests verify that BaseAPIClient._get:
- Returns decoded JSON on 2xx
- Translates non-2xx statuses, timeouts and transport errors into
  UpstreamUnavailableError
- Retries rate-limit statuses only when more than one attempt is configured

The aiohttp session is replaced by a scripted fake, and asyncio.sleep is
patched so retries do not wait.

Run with:
    pytest tests/unit/test_base_client.py -v
"""

import asyncio

import aiohttp
import pytest

from core.errors import ErrorKind, UnexpectedResponseError, UpstreamUnavailableError
from providers.base_client import BaseAPIClient, dig, to_price


# ============================================
# Fake aiohttp Session
# ============================================

class FakeResponse:
    def __init__(self, status, payload=None, text="", body=None):
        self.status = status
        self.payload = payload
        self.body = body if body is not None else text.encode("utf-8")

    async def json(self, content_type=None):
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload

    async def text(self, encoding="utf-8", errors="strict"):
        return self.body.decode(encoding, errors)


class FakeRequest:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, BaseException):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Plays back one scripted outcome per GET"""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests = []
        self.closed = False

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        return FakeRequest(self.outcomes.pop(0))

    async def close(self):
        self.closed = True


@pytest.fixture
def sleeps(monkeypatch):
    delays = []

    async def fake_sleep(delay):
        delays.append(delay)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)
    return delays


def make_client(*outcomes, max_attempts=1):
    client = BaseAPIClient("fmp", "https://example.test/", timeout=5, max_attempts=max_attempts)
    client.session = FakeSession(*outcomes)
    return client


# ============================================
# Tests for _get
# ============================================

class TestGet:
    """Tests for status handling and retries"""

    @pytest.mark.asyncio
    async def test_success_returns_json(self):
        client = make_client(FakeResponse(200, [{"price": 189.84}]))

        data = await client._get("/api/v3/quote/AAPL", {"apikey": "k"}, symbol="AAPL")

        assert data == [{"price": 189.84}]
        assert client.session.requests == [("https://example.test/api/v3/quote/AAPL", {"apikey": "k"})]

    @pytest.mark.asyncio
    async def test_non_2xx_is_upstream_unavailable(self):
        client = make_client(FakeResponse(500, text="Internal Server Error"))

        with pytest.raises(UpstreamUnavailableError) as exc:
            await client._get("/x", symbol="AAPL")

        assert exc.value.status == 500
        assert exc.value.kind == ErrorKind.UPSTREAM_UNAVAILABLE
        assert exc.value.symbol == "AAPL"

    @pytest.mark.asyncio
    async def test_undecodable_error_body_is_upstream_unavailable(self):
        """Verify a non-UTF-8 error page still maps to the status error"""
        client = make_client(FakeResponse(500, body=b"\xff\xfe\xfa bad"))

        with pytest.raises(UpstreamUnavailableError) as exc:
            await client._get("/x", symbol="AAPL")

        assert exc.value.status == 500

    @pytest.mark.asyncio
    async def test_rate_limit_not_retried_by_default(self, sleeps):
        client = make_client(FakeResponse(429, text="Too Many Requests"))

        with pytest.raises(UpstreamUnavailableError) as exc:
            await client._get("/x")

        assert exc.value.status == 429
        assert sleeps == []

    @pytest.mark.asyncio
    async def test_rate_limit_retried_when_enabled(self, sleeps):
        client = make_client(
            FakeResponse(429, text="slow down"),
            FakeResponse(200, {"ok": True}),
            max_attempts=3,
        )

        assert await client._get("/x") == {"ok": True}
        assert sleeps == [1.5]
        assert len(client.session.requests) == 2

    @pytest.mark.asyncio
    async def test_timeout_is_upstream_unavailable(self):
        client = make_client(asyncio.TimeoutError())

        with pytest.raises(UpstreamUnavailableError, match="Timed out"):
            await client._get("/x")

    @pytest.mark.asyncio
    async def test_transport_error_is_upstream_unavailable(self):
        client = make_client(aiohttp.ClientConnectionError("connection reset"))

        with pytest.raises(UpstreamUnavailableError, match="connection reset"):
            await client._get("/x")

    @pytest.mark.asyncio
    async def test_invalid_json_is_unexpected_shape(self):
        client = make_client(FakeResponse(200, ValueError("Expecting value")))

        with pytest.raises(UnexpectedResponseError):
            await client._get("/x")

    @pytest.mark.asyncio
    async def test_close_releases_session(self):
        client = make_client()
        session = client.session

        await client.close()

        assert session.closed
        assert client.session is None


# ============================================
# Tests for Response Helpers
# ============================================

class TestHelpers:
    """Tests for dig and to_price"""

    def test_dig_nested_dicts_and_lists(self):
        data = {"data": [{"id": 1}]}
        assert dig(data, "data", 0, "id") == 1

    def test_dig_missing_hop(self):
        assert dig({"a": {}}, "a", "b", "c") is None
        assert dig([], 0) is None
        assert dig({"a": "text"}, "a", "b") is None

    @pytest.mark.parametrize("value,expected", [
        (43250.71, 43250.71),
        ("1.08", 1.08),
        (0, None),
        (-5, None),
        ("abc", None),
        (None, None),
        (True, None),
        (float("nan"), None),
    ])
    def test_to_price(self, value, expected):
        assert to_price(value) == expected
