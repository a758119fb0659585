"""
Domain models for the sightings aggregator.

Pydantic models shared by every layer. Provider responses are normalized into
``Observation``; requests are described by ``Viewport`` + ``FilterParams``.
"""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# =============================================================================
# Enumerations
# =============================================================================


class Provider(StrEnum):
    """Upstream data source. The value doubles as the observation id prefix."""

    EBIRD = "ebird"
    INAT = "inat"


class TaxaBucket(StrEnum):
    """Coarse taxonomic category used for filtering and marker colors."""

    BIRD = "Bird"
    MAMMAL = "Mammal"
    REPTILE = "Reptile"
    AMPHIBIAN = "Amphibian"
    FISH = "Fish"
    INSECT = "Insect"
    ARACHNID = "Arachnid"
    MOLLUSK = "Mollusk"
    PLANT = "Plant"
    FUNGI = "Fungi"
    OTHER = "Other"


class RecencyWindow(StrEnum):
    """How far back to look for sightings."""

    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"

    @property
    def days(self) -> int:
        return {"today": 1, "this_week": 7, "this_month": 30}[self.value]


# =============================================================================
# Observations
# =============================================================================


class RawPayload(BaseModel):
    """Provider record kept for diagnostics, tagged with where it came from."""

    provider: Provider
    native_id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class Observation(BaseModel):
    """A single sighting, normalized across providers."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    id: str = Field(..., description="'{provider}-{native id}'")
    provider: Provider
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    observed_at: datetime | None = None
    place_guess: str | None = None
    common_name: str | None = None
    scientific_name: str | None = None
    taxa_bucket: TaxaBucket = TaxaBucket.OTHER
    photo_url: str | None = None
    detail_url: str | None = None
    raw: RawPayload | None = None

    def to_api(self) -> dict[str, Any]:
        """JSON-ready dict with camelCase keys, as served to map clients."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# Geographic
# =============================================================================


class LatLng(BaseModel):
    """A WGS84 point."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Viewport(BaseModel):
    """Rectangular map region: center point plus full latitude/longitude spans."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)
    lat_delta: float = Field(..., gt=0, allow_inf_nan=False)
    lng_delta: float = Field(..., gt=0, allow_inf_nan=False)

    @property
    def center(self) -> LatLng:
        return LatLng(lat=self.lat, lng=self.lng)


class BoundingBox(BaseModel):
    """NE/SW corner pair equivalent to a viewport."""

    model_config = ConfigDict(frozen=True)

    ne: LatLng
    sw: LatLng


class CenterRadius(BaseModel):
    """Circular approximation of a viewport."""

    model_config = ConfigDict(frozen=True)

    center: LatLng
    radius_km: float = Field(..., ge=0)


# =============================================================================
# Filters
# =============================================================================


class FilterParams(BaseModel):
    """Optional request filters. None / empty means unrestricted."""

    model_config = ConfigDict(frozen=True)

    recency: RecencyWindow | None = None
    has_photo: bool | None = None
    taxa: frozenset[TaxaBucket] = frozenset()
    providers: frozenset[Provider] = frozenset()

    def wants(self, provider: Provider) -> bool:
        """True if ``provider`` is allowed by the provider set."""
        return not self.providers or provider in self.providers
