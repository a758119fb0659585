"""
Shared HTTP client for upstream provider calls.

Provides a pre-configured ``requests.Session`` with a default timeout and a
single-attempt retry policy: a failed provider call is reported once and the
aggregate response goes out without that provider, rather than holding the map
client while we back off.

Usage::

    from wildlife_sightings.services.http import session

    resp = session.get("https://api.example.com/v1/data")
    resp.raise_for_status()
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from wildlife_sightings import __version__

#: Every upstream call is single-attempt.
DEFAULT_RETRY = Retry(
    total=0,
    connect=0,
    read=0,
    redirect=3,
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,  # let resp.raise_for_status() handle it
)

DEFAULT_TIMEOUT = 30  # seconds

#: Upper bound on pooled connections per host (tiles fan out up to 3x3).
POOL_MAXSIZE = 16


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """
    Build a ``requests.Session`` with retry adapter mounted.

    Args:
        retry: Custom retry strategy (defaults to ``DEFAULT_RETRY``).
        timeout: Default timeout applied to every request.
    """
    s = requests.Session()
    adapter = HTTPAdapter(max_retries=retry or DEFAULT_RETRY, pool_maxsize=POOL_MAXSIZE)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = f"wildlife-sightings/{__version__}"
    s.headers["Accept"] = "application/json"

    # Inject a default timeout so a hung upstream cannot stall a request forever.
    _original_send = s.send

    def _send_with_timeout(
        prepared: requests.PreparedRequest, **kwargs: object
    ) -> requests.Response:
        kwargs.setdefault("timeout", timeout)
        return _original_send(prepared, **kwargs)  # type: ignore[arg-type]

    s.send = _send_with_timeout  # type: ignore[method-assign]
    return s


#: Module-level session, import and use directly.
session: requests.Session = create_session()
