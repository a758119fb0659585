"""
Aggregation pipeline.

    viewport + filters
      → cache lookup (hit: return)
      → bbox + center/radius
      → fetch every selected provider concurrently
      → normalize → local filters → deduplicate
      → cache store → return

A provider that fails, raises, or is not configured contributes no records;
the request still succeeds with whatever the others returned.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import requests

from wildlife_sightings.cache import ObservationCache, cache_key
from wildlife_sightings.config import Settings, get_settings
from wildlife_sightings.dedupe import deduplicate_observations
from wildlife_sightings.errors import ConfigurationError, ObservationNotFoundError
from wildlife_sightings.normalize import normalize_all
from wildlife_sightings.providers import EBirdClient, GeoQuery, INatClient, ProviderClient
from wildlife_sightings.query import split_observation_id
from wildlife_sightings.schemas import FilterParams, Observation, Provider, Viewport
from wildlife_sightings.services.http import create_session
from wildlife_sightings.viewport import to_bounding_box, to_center_radius

logger = logging.getLogger(__name__)


def apply_filters(observations: list[Observation], filters: FilterParams) -> list[Observation]:
    """Filters providers cannot apply upstream: taxa buckets and photo presence."""
    result = observations
    if filters.taxa:
        result = [obs for obs in result if obs.taxa_bucket in filters.taxa]
    if filters.has_photo is True:
        result = [obs for obs in result if obs.photo_url]
    elif filters.has_photo is False:
        result = [obs for obs in result if not obs.photo_url]
    return result


class ObservationAggregator:
    """Fans a viewport query out to every provider and merges the results."""

    def __init__(
        self,
        clients: Iterable[ProviderClient],
        cache: ObservationCache | None = None,
        http: requests.Session | None = None,
    ) -> None:
        self.clients: dict[Provider, ProviderClient] = {c.provider: c for c in clients}
        self.cache = cache if cache is not None else ObservationCache()
        self._http = http

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ObservationAggregator:
        """Wire up both providers and a cache from application settings."""
        settings = settings or get_settings()
        http = create_session(timeout=settings.http_timeout_seconds)
        clients: list[ProviderClient] = [
            EBirdClient(
                settings.ebird_api_key,
                base_url=settings.ebird_base_url,
                http=http,
                max_workers=settings.max_workers,
            ),
            INatClient(base_url=settings.inat_base_url, http=http),
        ]
        cache = ObservationCache(
            ttl_seconds=settings.cache_ttl_seconds,
            max_entries=settings.cache_max_entries,
            evict_count=settings.cache_evict_count,
        )
        return cls(clients, cache, http=http)

    # -------------------------------------------------------------------------
    # Viewport queries
    # -------------------------------------------------------------------------

    def select_providers(self, filters: FilterParams) -> list[ProviderClient]:
        """Clients to query for ``filters``, in merge order."""
        selected: list[ProviderClient] = []
        for provider, client in self.clients.items():
            if not filters.wants(provider):
                continue
            # eBird never has photos, so a has-photo filter would discard all of it.
            if provider is Provider.EBIRD and filters.has_photo is True:
                continue
            if not client.configured:
                logger.warning("%s is not configured, leaving it out", provider.value)
                continue
            selected.append(client)
        return selected

    def _fetch_one(
        self, client: ProviderClient, query: GeoQuery, filters: FilterParams
    ) -> list[dict[str, Any]]:
        try:
            return client.fetch(query, filters.recency, filters.has_photo)
        except ConfigurationError as exc:
            logger.warning("%s is misconfigured, leaving it out: %s", client.provider.value, exc)
        except Exception:
            logger.exception("%s fetch raised, continuing without it", client.provider.value)
        return []

    def get_observations(
        self, viewport: Viewport, filters: FilterParams | None = None
    ) -> list[Observation]:
        """
        Normalized, deduplicated sightings for a viewport.

        Identical requests within the cache TTL are served from the cache
        without touching any provider.
        """
        filters = filters or FilterParams()
        key = cache_key(viewport, filters)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Cache hit for %s", key)
            return cached

        query = GeoQuery(
            center_radius=to_center_radius(viewport, max_radius_km=None),
            bbox=to_bounding_box(viewport),
        )
        clients = self.select_providers(filters)

        merged: list[Observation] = []
        if clients:
            with ThreadPoolExecutor(max_workers=len(clients)) as executor:
                futures = [
                    (client.provider, executor.submit(self._fetch_one, client, query, filters))
                    for client in clients
                ]
                for provider, future in futures:
                    records = future.result()
                    observations = normalize_all(provider, records)
                    logger.info(
                        "%s returned %d records (%d usable)",
                        provider.value,
                        len(records),
                        len(observations),
                    )
                    merged.extend(observations)

        result = deduplicate_observations(apply_filters(merged, filters))
        self.cache.set(key, result)
        return result

    # -------------------------------------------------------------------------
    # Point lookup
    # -------------------------------------------------------------------------

    def get_observation(self, observation_id: str) -> Observation:
        """
        Look up one observation by its provider-qualified id.

        Raises:
            InputValidationError: Malformed id or unknown provider.
            UnsupportedOperationError: The provider has no point lookup.
            ObservationNotFoundError: No georeferenced record with that id.
            UpstreamProviderError: The provider call failed.
        """
        provider, native_id = split_observation_id(observation_id)
        client = self.clients.get(provider)
        if client is None:
            msg = f"{provider.value} is not enabled"
            raise ObservationNotFoundError(msg)

        record = client.lookup(native_id)
        observations = normalize_all(provider, [record]) if record is not None else []
        if not observations:
            msg = f"Observation {observation_id} not found"
            raise ObservationNotFoundError(msg)
        return observations[0]

    def close(self) -> None:
        """Drop cached data and close the HTTP session this aggregator owns."""
        self.cache.clear()
        if self._http is not None:
            self._http.close()
            self._http = None
