"""Merge provider outputs into one duplicate-free list."""

from __future__ import annotations

from collections.abc import Iterable

from wildlife_sightings.schemas import LatLng, Observation
from wildlife_sightings.viewport import haversine_distance_km

#: Same species closer than this is treated as one sighting (30 m).
DEDUPE_DISTANCE_KM = 0.03


def _same_name(a: str | None, b: str | None) -> bool:
    return bool(a) and a == b


def same_species(a: Observation, b: Observation) -> bool:
    """Common or scientific names match, ignoring fields empty on both sides."""
    return _same_name(a.common_name, b.common_name) or _same_name(
        a.scientific_name, b.scientific_name
    )


def is_spatial_duplicate(
    a: Observation, b: Observation, threshold_km: float = DEDUPE_DISTANCE_KM
) -> bool:
    """Same species within ``threshold_km`` of each other."""
    if not same_species(a, b):
        return False
    distance = haversine_distance_km(LatLng(lat=a.lat, lng=a.lng), LatLng(lat=b.lat, lng=b.lng))
    return distance < threshold_km


def deduplicate_observations(
    observations: Iterable[Observation],
    threshold_km: float = DEDUPE_DISTANCE_KM,
) -> list[Observation]:
    """
    Drop exact and near duplicates, keeping the first occurrence.

    A record is dropped if its id was already accepted (overlapping eBird
    tiles return the same record twice), or if an accepted record of the
    same species lies within ``threshold_km`` (the same sighting reported to
    both providers). Order of the survivors is input order.

    Compares each record against every accepted one: O(n^2), fine for the
    ~100 records per request each provider returns.
    """
    seen: set[str] = set()
    result: list[Observation] = []

    for obs in observations:
        if obs.id in seen:
            continue
        if any(is_spatial_duplicate(existing, obs, threshold_km) for existing in result):
            continue
        seen.add(obs.id)
        result.append(obs)

    return result
