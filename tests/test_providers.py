"""Tests for the provider clients wrapping each datasource."""

from __future__ import annotations

import logging
from unittest.mock import Mock, patch

import pytest

from wildlife_sightings.errors import (
    ConfigurationError,
    InputValidationError,
    UnsupportedOperationError,
    UpstreamProviderError,
)
from wildlife_sightings.providers import EBirdClient, GeoQuery, INatClient
from wildlife_sightings.schemas import (
    BoundingBox,
    CenterRadius,
    LatLng,
    Provider,
    RecencyWindow,
)

CENTER_RADIUS = CenterRadius(center=LatLng(lat=37.7749, lng=-122.4194), radius_km=27.75)
BBOX = BoundingBox(ne=LatLng(lat=38.0249, lng=-122.1694), sw=LatLng(lat=37.5249, lng=-122.6694))
QUERY = GeoQuery(center_radius=CENTER_RADIUS, bbox=BBOX)


class TestEBirdClient:
    """Test EBirdClient."""

    def test_provider_tag(self) -> None:
        assert EBirdClient("k").provider is Provider.EBIRD

    @pytest.mark.parametrize(("key", "configured"), [("k", True), ("", False), (None, False)])
    def test_configured(self, key: str | None, configured: bool) -> None:
        assert EBirdClient(key).configured is configured

    def test_fetch_without_key_raises(self) -> None:
        with pytest.raises(ConfigurationError):
            EBirdClient(None).fetch(QUERY)

    @patch("wildlife_sightings.datasources.ebird.fetch_recent_observations")
    def test_fetch_uses_center_radius_and_default_lookback(self, mock_fetch: Mock) -> None:
        mock_fetch.return_value = [{"obsId": "1"}]
        http = Mock()

        result = EBirdClient("k", base_url="http://stub", http=http, max_workers=3).fetch(QUERY)

        assert result == [{"obsId": "1"}]
        mock_fetch.assert_called_once_with(
            CENTER_RADIUS,
            api_key="k",
            back_days=7,
            base_url="http://stub",
            http=http,
            max_workers=3,
        )

    @pytest.mark.parametrize(
        ("recency", "days"),
        [(RecencyWindow.TODAY, 1), (RecencyWindow.THIS_WEEK, 7), (RecencyWindow.THIS_MONTH, 30)],
    )
    @patch("wildlife_sightings.datasources.ebird.fetch_recent_observations", return_value=[])
    def test_recency_maps_to_back_days(
        self, mock_fetch: Mock, recency: RecencyWindow, days: int
    ) -> None:
        EBirdClient("k").fetch(QUERY, recency=recency)
        assert mock_fetch.call_args.kwargs["back_days"] == days

    @patch("wildlife_sightings.datasources.ebird.fetch_recent_observations")
    def test_upstream_failure_is_empty(
        self, mock_fetch: Mock, caplog: pytest.LogCaptureFixture
    ) -> None:
        mock_fetch.side_effect = UpstreamProviderError("ebird", "503 Service Unavailable")

        with caplog.at_level(logging.WARNING):
            assert EBirdClient("k").fetch(QUERY) == []
        assert "eBird fetch failed" in caplog.text

    def test_lookup_unsupported(self) -> None:
        with pytest.raises(UnsupportedOperationError):
            EBirdClient("k").lookup("OBS123")


class TestINatClient:
    """Test INatClient."""

    def test_always_configured(self) -> None:
        assert INatClient().configured is True
        assert INatClient().provider is Provider.INAT

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observations", return_value=[])
    def test_prefers_bounding_box(self, mock_fetch: Mock) -> None:
        INatClient().fetch(QUERY)
        assert mock_fetch.call_args.args[0] == BBOX

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observations", return_value=[])
    def test_falls_back_to_center_radius(self, mock_fetch: Mock) -> None:
        INatClient().fetch(GeoQuery(center_radius=CENTER_RADIUS))
        assert mock_fetch.call_args.args[0] == CENTER_RADIUS

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observations", return_value=[])
    def test_recency_and_photo_forwarded(self, mock_fetch: Mock) -> None:
        INatClient().fetch(QUERY, recency=RecencyWindow.THIS_MONTH, has_photo=True)
        assert mock_fetch.call_args.kwargs["recent_days"] == 30
        assert mock_fetch.call_args.kwargs["has_photos"] is True

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observations", return_value=[])
    def test_default_lookback(self, mock_fetch: Mock) -> None:
        INatClient().fetch(QUERY)
        assert mock_fetch.call_args.kwargs["recent_days"] == 14
        assert mock_fetch.call_args.kwargs["has_photos"] is None

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observations")
    def test_upstream_failure_is_empty(self, mock_fetch: Mock) -> None:
        mock_fetch.side_effect = UpstreamProviderError("inat", "timeout")
        assert INatClient().fetch(QUERY) == []

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observation")
    def test_lookup_numeric_id(self, mock_lookup: Mock) -> None:
        mock_lookup.return_value = {"id": 123}
        http = Mock()
        assert INatClient(http=http).lookup("123") == {"id": 123}
        mock_lookup.assert_called_once_with(
            123, base_url="https://api.inaturalist.org/v1", http=http
        )

    @pytest.mark.parametrize("native_id", ["abc", "12a", "-5", "1.5", "\u00b2", "\u0661\u0662"])
    def test_lookup_rejects_non_numeric(self, native_id: str) -> None:
        with pytest.raises(InputValidationError):
            INatClient().lookup(native_id)

    @patch("wildlife_sightings.datasources.inaturalist.fetch_observation")
    def test_lookup_upstream_error_propagates(self, mock_lookup: Mock) -> None:
        mock_lookup.side_effect = UpstreamProviderError("inat", "502 Bad Gateway")
        with pytest.raises(UpstreamProviderError):
            INatClient().lookup("123")
