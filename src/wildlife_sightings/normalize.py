"""
Provider record → ``Observation`` normalization.

One function per provider. Both return None for records that cannot be placed
on a map or cannot be given a stable id, so callers can simply skip them.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from wildlife_sightings.datasources.inaturalist import parse_location
from wildlife_sightings.schemas import Observation, Provider, RawPayload, TaxaBucket

logger = logging.getLogger(__name__)

#: iNaturalist ``iconic_taxon_name`` → bucket. Anything else is Other.
ICONIC_TAXA: dict[str, TaxaBucket] = {
    "Aves": TaxaBucket.BIRD,
    "Mammalia": TaxaBucket.MAMMAL,
    "Reptilia": TaxaBucket.REPTILE,
    "Amphibia": TaxaBucket.AMPHIBIAN,
    "Actinopterygii": TaxaBucket.FISH,
    "Insecta": TaxaBucket.INSECT,
    "Arachnida": TaxaBucket.ARACHNID,
    "Mollusca": TaxaBucket.MOLLUSK,
    "Plantae": TaxaBucket.PLANT,
    "Fungi": TaxaBucket.FUNGI,
}

EBIRD_SPECIES_URL = "https://ebird.org/species/{code}"
INAT_OBSERVATION_URL = "https://www.inaturalist.org/observations/{id}"

_EBIRD_DATE_FORMATS = ("%Y-%m-%d %H:%M", "%Y-%m-%d")


def observation_id(provider: Provider, native_id: str | int) -> str:
    """Provider-qualified id, e.g. ``inat-12345``."""
    return f"{provider.value}-{native_id}"


def map_iconic_taxon(name: str | None) -> TaxaBucket:
    """Bucket for an iNaturalist iconic taxon name."""
    if not name:
        return TaxaBucket.OTHER
    return ICONIC_TAXA.get(name, TaxaBucket.OTHER)


def _text(value: Any) -> str | None:
    """Non-empty stripped string, else None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _build(**fields: Any) -> Observation | None:
    try:
        return Observation(**fields)
    except ValidationError as exc:
        logger.debug("Dropping %s: %s", fields.get("id"), exc.errors()[0]["msg"])
        return None


# =============================================================================
# eBird
# =============================================================================


def _parse_ebird_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    for fmt in _EBIRD_DATE_FORMATS:
        try:
            return datetime.strptime(str(value), fmt)
        except ValueError:
            continue
    return None


def ebird_native_id(record: dict[str, Any]) -> str | None:
    """``obsId``, else checklist + species code. None if neither is present."""
    obs_id = _text(record.get("obsId"))
    if obs_id:
        return obs_id
    sub_id = _text(record.get("subId"))
    species_code = _text(record.get("speciesCode"))
    if sub_id and species_code:
        return f"{sub_id}-{species_code}"
    return None


def normalize_ebird(record: dict[str, Any]) -> Observation | None:
    """Normalize one eBird ``data/obs/geo/recent`` record."""
    native_id = ebird_native_id(record)
    if native_id is None:
        return None

    species_code = _text(record.get("speciesCode"))
    return _build(
        id=observation_id(Provider.EBIRD, native_id),
        provider=Provider.EBIRD,
        lat=record.get("lat"),
        lng=record.get("lng"),
        observed_at=_parse_ebird_datetime(record.get("obsDt")),
        place_guess=_text(record.get("locName")),
        common_name=_text(record.get("comName")),
        scientific_name=_text(record.get("sciName")),
        taxa_bucket=TaxaBucket.BIRD,
        photo_url=None,
        detail_url=EBIRD_SPECIES_URL.format(code=species_code) if species_code else None,
        raw=RawPayload(provider=Provider.EBIRD, native_id=native_id, fields=dict(record)),
    )


# =============================================================================
# iNaturalist
# =============================================================================


def _parse_inat_datetime(obs: dict[str, Any]) -> datetime | None:
    for key in ("time_observed_at", "observed_on"):
        value = obs.get(key)
        if not value:
            continue
        try:
            return datetime.fromisoformat(str(value))
        except ValueError:
            continue
    return None


def best_photo_url(photos: Any) -> str | None:
    """First photo URL, upgraded from the square thumbnail to medium size."""
    if not photos or not isinstance(photos, list):
        return None
    first = photos[0] if isinstance(photos[0], dict) else {}
    url = _text(first.get("url"))
    if url is None:
        return None
    return url.replace("square", "medium")


def normalize_inat(record: dict[str, Any]) -> Observation | None:
    """Normalize one iNaturalist ``/observations`` result."""
    native_id = _text(record.get("id"))
    coords = parse_location(record.get("location"))
    if native_id is None or coords is None:
        return None

    taxon = record.get("taxon")
    if not isinstance(taxon, dict):
        taxon = {}
    scientific_name = _text(taxon.get("name"))
    return _build(
        id=observation_id(Provider.INAT, native_id),
        provider=Provider.INAT,
        lat=coords[0],
        lng=coords[1],
        observed_at=_parse_inat_datetime(record),
        place_guess=_text(record.get("place_guess")),
        common_name=_text(taxon.get("preferred_common_name")) or scientific_name,
        scientific_name=scientific_name,
        taxa_bucket=map_iconic_taxon(taxon.get("iconic_taxon_name")),
        photo_url=best_photo_url(record.get("photos")),
        detail_url=INAT_OBSERVATION_URL.format(id=native_id),
        raw=RawPayload(provider=Provider.INAT, native_id=native_id, fields=dict(record)),
    )


_NORMALIZERS = {
    Provider.EBIRD: normalize_ebird,
    Provider.INAT: normalize_inat,
}


def normalize_all(provider: Provider, records: list[dict[str, Any]]) -> list[Observation]:
    """Normalize a provider's records, skipping any that cannot be placed."""
    normalizer = _NORMALIZERS[provider]
    observations: list[Observation] = []
    for record in records:
        parsed = normalizer(record)
        if parsed is not None:
            observations.append(parsed)
    skipped = len(records) - len(observations)
    if skipped:
        logger.debug("Skipped %d unusable %s records", skipped, provider.value)
    return observations
