"""
Prefect orchestration flows.

- fetch.py - snapshot one viewport's sightings into the data store
"""

from wildlife_sightings.flows.fetch import fetch_viewport

__all__ = ["fetch_viewport"]
