"""Tests for the shared HTTP client."""

from __future__ import annotations

from unittest.mock import patch

import requests
from urllib3.util.retry import Retry

from wildlife_sightings.services.http import (
    DEFAULT_RETRY,
    DEFAULT_TIMEOUT,
    POOL_MAXSIZE,
    create_session,
    session,
)


class TestDefaultRetry:
    """Verify the single-attempt policy."""

    def test_no_retries(self) -> None:
        assert DEFAULT_RETRY.total == 0
        assert DEFAULT_RETRY.connect == 0
        assert DEFAULT_RETRY.read == 0

    def test_status_left_to_caller(self) -> None:
        assert DEFAULT_RETRY.raise_on_status is False

    def test_only_safe_methods(self) -> None:
        allowed = DEFAULT_RETRY.allowed_methods
        assert "GET" in allowed
        assert "POST" not in allowed


class TestCreateSession:
    """Verify session factory."""

    def test_returns_session(self) -> None:
        assert isinstance(create_session(), requests.Session)

    def test_mounts_both_schemes(self) -> None:
        s = create_session()
        for url in ("https://example.com", "http://example.com"):
            assert isinstance(s.get_adapter(url), requests.adapters.HTTPAdapter)

    def test_adapter_has_retry(self) -> None:
        adapter = create_session().get_adapter("https://example.com")
        assert adapter.max_retries.total == 0

    def test_pool_fits_tiled_fan_out(self) -> None:
        adapter = create_session().get_adapter("https://example.com")
        assert adapter._pool_maxsize == POOL_MAXSIZE
        assert POOL_MAXSIZE >= 9

    def test_custom_retry(self) -> None:
        s = create_session(retry=Retry(total=2, backoff_factor=1))
        assert s.get_adapter("https://example.com").max_retries.total == 2

    def test_headers(self) -> None:
        s = create_session()
        assert s.headers["User-Agent"].startswith("wildlife-sightings/")
        assert s.headers["Accept"] == "application/json"

    def test_default_timeout_injected(self) -> None:
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep)
            _, kwargs = mock_send.call_args
            assert kwargs.get("timeout") == 42

    def test_explicit_timeout_not_overridden(self) -> None:
        s = create_session(timeout=42)
        prep = requests.Request("GET", "https://example.com").prepare()
        with patch.object(
            requests.adapters.HTTPAdapter, "send", return_value=requests.Response()
        ) as mock_send:
            s.send(prep, timeout=5)
            _, kwargs = mock_send.call_args
            assert kwargs.get("timeout") == 5


class TestModuleSession:
    """Verify the module-level singleton."""

    def test_session_is_configured(self) -> None:
        assert session.get_adapter("https://example.com").max_retries.total == 0

    def test_default_timeout(self) -> None:
        assert DEFAULT_TIMEOUT == 30
