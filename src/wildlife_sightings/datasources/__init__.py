"""Upstream sighting providers.

Each subdirectory is one provider with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # API URLs, constants, raw requests
    └── observations.py   # Fetch functions returning raw record dicts

Client functions raise ``UpstreamProviderError`` on any transport or decoding
failure. Converting that into "no records from this provider" happens one
level up, in ``wildlife_sightings.providers``.

Adding a new provider
---------------------
1. Create ``datasources/{name}/`` with the files above.
2. Add a ``Provider`` member in ``schemas.py`` and a normalizer in
   ``normalize.py``.
3. Wrap the fetch functions in a ``ProviderClient`` in ``providers.py`` and
   register it with ``ObservationAggregator``.
4. Add tests in ``tests/test_{name}.py``.
"""
