"""Wildlife Sightings - nearby animal sightings aggregated for a map viewport.

Architecture::

    viewport.py    Viewport → bounding box / center+radius, haversine distance
    datasources/   Upstream APIs (eBird recent sightings, iNaturalist observations)
    providers.py   Provider clients: tiling, failure → empty result, point lookup
    normalize.py   Provider records → shared Observation schema
    dedupe.py      Identity + spatial deduplication across providers
    cache.py       TTL + capacity bounded response cache
    aggregator.py  The pipeline: cache → fan-out → normalize → dedupe → cache
    api/           FastAPI app (GET /observations, GET /observation/{id})
    flows/         Prefect flow snapshotting a viewport into store.py
    services/      Shared HTTP session

Data flow: api → aggregator → providers → datasources → normalize → dedupe → cache
"""

__version__ = "0.1.0"
__author__ = "Michael Howden"

__all__ = ["__version__"]
