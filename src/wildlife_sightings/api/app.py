"""
HTTP API.

    GET /observations?lat=&lng=&latDelta=&lngDelta=[&recency=&hasPhoto=&taxa=&provider=]
    GET /observation/{id}
    GET /health

Errors are JSON ``{"error": ...}`` bodies. Unexpected failures are logged
with their traceback and answered with a generic message, never the raw
exception text.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wildlife_sightings import __version__
from wildlife_sightings.aggregator import ObservationAggregator
from wildlife_sightings.errors import (
    InputValidationError,
    ObservationNotFoundError,
    UnsupportedOperationError,
    UpstreamProviderError,
)
from wildlife_sightings.query import parse_filters, parse_viewport

logger = logging.getLogger(__name__)

#: The only messages a client ever sees for server-side failures.
USER_MESSAGES = {
    "internal": "Something went wrong while loading sightings. Please try again.",
    "upstream": "The sighting provider is temporarily unavailable.",
    "unsupported": "This provider does not support looking up a single observation.",
}


def _error(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body: dict[str, str] = {"error": error}
    if message is not None:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


def get_aggregator(request: Request) -> ObservationAggregator:
    aggregator: ObservationAggregator = request.app.state.aggregator
    return aggregator


# =============================================================================
# Routes
# =============================================================================


def list_observations(request: Request) -> dict[str, Any]:
    """Aggregated sightings for the requested viewport."""
    params = request.query_params
    viewport = parse_viewport(params)
    filters = parse_filters(params)
    observations = get_aggregator(request).get_observations(viewport, filters)
    return {"observations": [obs.to_api() for obs in observations]}


def get_observation(observation_id: str, request: Request) -> dict[str, Any]:
    """A single observation by provider-qualified id."""
    observation = get_aggregator(request).get_observation(observation_id)
    return {"observation": observation.to_api()}


def health(request: Request) -> dict[str, Any]:
    aggregator = get_aggregator(request)
    return {
        "status": "ok",
        "version": __version__,
        "providers": {p.value: c.configured for p, c in aggregator.clients.items()},
        "cache": aggregator.cache.stats(),
    }


# =============================================================================
# Error handlers
# =============================================================================


async def _on_input_error(_request: Request, exc: Exception) -> JSONResponse:
    return _error(400, str(exc))


async def _on_not_found(_request: Request, exc: Exception) -> JSONResponse:
    return _error(404, "Observation not found")


async def _on_unsupported(_request: Request, exc: Exception) -> JSONResponse:
    return _error(501, USER_MESSAGES["unsupported"], str(exc))


async def _on_upstream(_request: Request, exc: Exception) -> JSONResponse:
    logger.warning("Upstream failure during lookup: %s", exc)
    return _error(502, USER_MESSAGES["upstream"])


async def _on_http_error(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content={"error": detail}, headers=exc.headers)


async def _on_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return _error(500, "Internal server error", USER_MESSAGES["internal"])


# =============================================================================
# Application factory
# =============================================================================


def create_app(aggregator: ObservationAggregator | None = None) -> FastAPI:
    """
    Build the API application.

    Args:
        aggregator: Pipeline to serve. When omitted, one is built from
            settings at startup and closed at shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = getattr(app.state, "aggregator", None) is None
        if owned:
            app.state.aggregator = ObservationAggregator.from_settings()
        try:
            yield
        finally:
            if owned:
                app.state.aggregator.close()
                app.state.aggregator = None

    app = FastAPI(title="wildlife-sightings", version=__version__, lifespan=lifespan)
    app.state.aggregator = aggregator

    app.add_api_route("/observations", list_observations, methods=["GET"])
    app.add_api_route("/observation/{observation_id}", get_observation, methods=["GET"])
    app.add_api_route("/health", health, methods=["GET"])

    app.add_exception_handler(InputValidationError, _on_input_error)
    app.add_exception_handler(ObservationNotFoundError, _on_not_found)
    app.add_exception_handler(UnsupportedOperationError, _on_unsupported)
    app.add_exception_handler(UpstreamProviderError, _on_upstream)
    app.add_exception_handler(StarletteHTTPException, _on_http_error)
    app.add_exception_handler(Exception, _on_unexpected)
    return app
