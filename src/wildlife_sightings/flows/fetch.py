"""
Prefect flow that snapshots one viewport's sightings to the data store.

Useful for pre-warming a region or capturing what the map showed at a point
in time. Snapshots stay fresh for the cache TTL; a fresh snapshot is reused
instead of hitting the providers again.

Run locally:
    wildlife-sightings fetch --lat 37.7749 --lng -122.4194 --lat-delta 0.5 --lng-delta 0.5

Run with Prefect dashboard:
    prefect server start &
    wildlife-sightings fetch ...
"""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from wildlife_sightings.aggregator import ObservationAggregator
from wildlife_sightings.cache import cache_key
from wildlife_sightings.config import get_settings
from wildlife_sightings.schemas import FilterParams, Viewport
from wildlife_sightings.store import DataStore

store = DataStore(get_settings().data_dir)

SNAPSHOT_DIR = Path("live/observations")
SNAPSHOT_SOURCE = "ebird.org+inaturalist.org"


def snapshot_path(viewport: Viewport, filters: FilterParams | None = None) -> Path:
    """Store path for a viewport, named after a digest of its cache key."""
    digest = hashlib.sha1(cache_key(viewport, filters).encode()).hexdigest()[:16]  # noqa: S324
    return SNAPSHOT_DIR / f"{digest}.json"


@task(name="aggregate-viewport", cache_policy=NO_CACHE)
def aggregate_viewport(
    viewport: Viewport, filters: FilterParams | None = None
) -> list[dict[str, Any]]:
    """Run the aggregation pipeline once for a viewport."""
    aggregator = ObservationAggregator.from_settings()
    try:
        observations = aggregator.get_observations(viewport, filters)
    finally:
        aggregator.close()
    return [obs.to_api() for obs in observations]


@task(name="save-snapshot", cache_policy=NO_CACHE)
def save_snapshot(
    viewport: Viewport,
    filters: FilterParams | None,
    observations: list[dict[str, Any]],
) -> Path:
    """Save a viewport snapshot via store, fresh for one cache TTL."""
    ttl = timedelta(seconds=get_settings().cache_ttl_seconds)
    return store.write(
        snapshot_path(viewport, filters),
        {"observations": observations},
        source=SNAPSHOT_SOURCE,
        valid_until=datetime.now(UTC) + ttl,
        cache_key=cache_key(viewport, filters),
        count=len(observations),
    )


@flow(name="fetch-viewport", log_prints=True)
def fetch_viewport(
    viewport: Viewport,
    filters: FilterParams | None = None,
    force: bool = False,
) -> dict[str, Any]:
    """
    Fetch and store sightings for a viewport.

    Skips the providers when a fresh snapshot already exists, unless
    ``force`` is set.
    """
    path = snapshot_path(viewport, filters)
    if not force and store.is_fresh(path):
        print(f"Snapshot {path} is fresh, skipping fetch.")
        data = store.read(path) or {}
        return {
            "path": str(store.base / path),
            "observations": len(data.get("observations", [])),
            "fresh": True,
        }

    print(f"Fetching sightings around ({viewport.lat}, {viewport.lng})...")
    observations = aggregate_viewport(viewport, filters)
    output_path = save_snapshot(viewport, filters, observations)
    print(f"Saved {len(observations)} sightings to {output_path}")
    return {"path": str(output_path), "observations": len(observations), "fresh": False}
