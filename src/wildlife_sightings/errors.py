"""
Exception types for the aggregation pipeline.

Each maps to one outcome at the HTTP edge (see ``api/app.py``):

- InputValidationError      → 400
- ObservationNotFoundError  → 404
- UnsupportedOperationError → 501
- UpstreamProviderError     → 502 for point lookups; during a viewport query the
                              provider just contributes no records
- ConfigurationError        → never surfaced; the provider is left out of the request
"""

from __future__ import annotations


class SightingsError(Exception):
    """Base class for all errors raised by this package."""


class InputValidationError(SightingsError):
    """Request parameters are missing, non-numeric, or out of range."""


class UpstreamProviderError(SightingsError):
    """A provider call failed (transport error, non-2xx, malformed body)."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class ConfigurationError(SightingsError):
    """A provider is missing a required credential or setting."""


class UnsupportedOperationError(SightingsError):
    """The provider has no upstream endpoint for the requested operation."""


class ObservationNotFoundError(SightingsError):
    """A point lookup found no georeferenced record."""
