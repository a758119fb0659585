"""
Request parameter parsing.

Turns raw string parameters (HTTP query string or CLI flags) into a
``Viewport`` and ``FilterParams``. Every failure is an
``InputValidationError`` so callers can map it straight to a 400.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from enum import StrEnum
from typing import TypeVar

from pydantic import ValidationError

from wildlife_sightings.errors import InputValidationError
from wildlife_sightings.schemas import FilterParams, Provider, RecencyWindow, TaxaBucket, Viewport

E = TypeVar("E", bound=StrEnum)

REQUIRED_VIEWPORT_PARAMS = ("lat", "lng", "latDelta", "lngDelta")

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


def _parse_float(name: str, raw: str | None) -> float:
    if raw is None or not str(raw).strip():
        msg = f"Missing required parameter: {name}"
        raise InputValidationError(msg)
    try:
        value = float(raw)
    except ValueError:
        msg = f"Parameter {name} must be a number"
        raise InputValidationError(msg) from None
    if not math.isfinite(value):
        msg = f"Parameter {name} must be finite"
        raise InputValidationError(msg)
    return value


def parse_viewport(params: Mapping[str, str | None]) -> Viewport:
    """Build a Viewport from ``lat``, ``lng``, ``latDelta``, ``lngDelta``."""
    lat, lng, lat_delta, lng_delta = (
        _parse_float(name, params.get(name)) for name in REQUIRED_VIEWPORT_PARAMS
    )
    try:
        return Viewport(lat=lat, lng=lng, lat_delta=lat_delta, lng_delta=lng_delta)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else "viewport"
        msg = f"Invalid {field}: {first['msg']}"
        raise InputValidationError(msg) from None


def parse_bool(name: str, raw: str | None) -> bool | None:
    """Tri-state boolean: None when absent or empty."""
    if raw is None or not raw.strip():
        return None
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    msg = f"Parameter {name} must be true or false"
    raise InputValidationError(msg)


def parse_enum(name: str, raw: str | None, enum: type[E]) -> E | None:
    if raw is None or not raw.strip():
        return None
    try:
        return enum(raw.strip())
    except ValueError:
        allowed = ", ".join(m.value for m in enum)
        msg = f"Parameter {name} must be one of: {allowed}"
        raise InputValidationError(msg) from None


def parse_enum_list(name: str, raw: str | None, enum: type[E]) -> frozenset[E]:
    """Comma-separated enum values; blanks between commas are ignored."""
    if raw is None:
        return frozenset()
    members = [part.strip() for part in raw.split(",") if part.strip()]
    return frozenset(parse_enum(name, member, enum) for member in members)  # type: ignore[misc]


def parse_filters(params: Mapping[str, str | None]) -> FilterParams:
    """Build FilterParams from ``recency``, ``hasPhoto``, ``taxa``, ``provider``."""
    return FilterParams(
        recency=parse_enum("recency", params.get("recency"), RecencyWindow),
        has_photo=parse_bool("hasPhoto", params.get("hasPhoto")),
        taxa=parse_enum_list("taxa", params.get("taxa"), TaxaBucket),
        providers=parse_enum_list("provider", params.get("provider"), Provider),
    )


def split_observation_id(observation_id: str) -> tuple[Provider, str]:
    """Split ``"{provider}-{native id}"`` on the first dash."""
    provider_tag, sep, native_id = observation_id.partition("-")
    if not sep or not native_id:
        msg = "Invalid observation ID format"
        raise InputValidationError(msg)
    try:
        return Provider(provider_tag), native_id
    except ValueError:
        msg = f"Unknown provider: {provider_tag}"
        raise InputValidationError(msg) from None
