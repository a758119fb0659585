"""
Provider clients used by the aggregator.

Each client wraps one datasource behind the same two calls:

- ``fetch(query, recency, has_photo)`` returns raw records and never raises
  for upstream trouble: a failed provider simply contributes nothing.
- ``lookup(native_id)`` returns one raw record, None, or raises
  ``UnsupportedOperationError`` when the provider has no such endpoint.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from wildlife_sightings.datasources import ebird, inaturalist
from wildlife_sightings.datasources.ebird import client as ebird_client
from wildlife_sightings.datasources.inaturalist import client as inat_client
from wildlife_sightings.errors import (
    ConfigurationError,
    InputValidationError,
    UnsupportedOperationError,
    UpstreamProviderError,
)
from wildlife_sightings.schemas import BoundingBox, CenterRadius, Provider, RecencyWindow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoQuery:
    """Both projections of a viewport; each provider picks the one it supports."""

    center_radius: CenterRadius
    bbox: BoundingBox | None = None


class ProviderClient(Protocol):
    provider: Provider

    @property
    def configured(self) -> bool: ...

    def fetch(
        self,
        query: GeoQuery,
        recency: RecencyWindow | None = None,
        has_photo: bool | None = None,
    ) -> list[dict[str, Any]]: ...

    def lookup(self, native_id: str) -> dict[str, Any] | None: ...


# =============================================================================
# eBird
# =============================================================================


class EBirdClient:
    """Avian provider: center+radius only, tiled past 50 km, no photos."""

    provider = Provider.EBIRD

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = ebird_client.API_BASE,
        http: requests.Session | None = None,
        max_workers: int = 9,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.http = http
        self.max_workers = max_workers

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def fetch(
        self,
        query: GeoQuery,
        recency: RecencyWindow | None = None,
        has_photo: bool | None = None,
    ) -> list[dict[str, Any]]:
        """Recent bird sightings. ``has_photo`` is ignored; eBird returns none."""
        if not self.api_key:
            msg = "EBIRD_API_KEY is not set"
            raise ConfigurationError(msg)

        back_days = recency.days if recency else ebird_client.DEFAULT_BACK_DAYS
        try:
            return ebird.fetch_recent_observations(
                query.center_radius,
                api_key=self.api_key,
                back_days=back_days,
                base_url=self.base_url,
                http=self.http,
                max_workers=self.max_workers,
            )
        except UpstreamProviderError as exc:
            logger.warning("eBird fetch failed, continuing without it: %s", exc)
            return []

    def lookup(self, native_id: str) -> dict[str, Any] | None:
        msg = "eBird has no endpoint for fetching a single observation by id"
        raise UnsupportedOperationError(msg)


# =============================================================================
# iNaturalist
# =============================================================================


class INatClient:
    """Multi-taxa provider: prefers a bounding box, no radius ceiling."""

    provider = Provider.INAT

    def __init__(
        self,
        *,
        base_url: str = inat_client.API_BASE,
        http: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url
        self.http = http

    @property
    def configured(self) -> bool:
        return True

    def fetch(
        self,
        query: GeoQuery,
        recency: RecencyWindow | None = None,
        has_photo: bool | None = None,
    ) -> list[dict[str, Any]]:
        """Recent research/needs-id observations with open geoprivacy."""
        recent_days = recency.days if recency else inaturalist.DEFAULT_RECENT_DAYS
        try:
            return inaturalist.fetch_observations(
                query.bbox or query.center_radius,
                recent_days=recent_days,
                has_photos=has_photo,
                base_url=self.base_url,
                http=self.http,
            )
        except UpstreamProviderError as exc:
            logger.warning("iNaturalist fetch failed, continuing without it: %s", exc)
            return []

    def lookup(self, native_id: str) -> dict[str, Any] | None:
        """Point lookup by numeric iNaturalist id.

        Raises:
            InputValidationError: ``native_id`` is not a positive integer.
            UpstreamProviderError: Upstream failed for a reason other than 404.
        """
        if not (native_id.isascii() and native_id.isdigit()):
            msg = f"Invalid iNaturalist observation id: {native_id!r}"
            raise InputValidationError(msg)
        return inaturalist.fetch_observation(int(native_id), base_url=self.base_url, http=self.http)
