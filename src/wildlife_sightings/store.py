"""Freshness-aware JSON snapshot store.

Snapshots written by ``flows/fetch.py`` live under ``{base}/live/`` and are
wrapped in a metadata envelope::

    {"meta": {"source": ..., "fetched_at": ..., "valid_until": ...}, "data": ...}

``valid_until`` lets the fetch flow skip viewports that are still fresh.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import Any


class DataStore:
    """Reads and writes metadata-enveloped JSON files with an expiry."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.live = base_dir / "live"

    def read(self, path: Path) -> Any | None:
        """Return the ``data`` payload, or None if the file doesn't exist."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data")

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Return the full envelope (meta + data), or None if missing."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            envelope: dict[str, Any] = json.load(f)
        return envelope

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``live/observations/x.json``).
            data: JSON-serializable payload stored under ``data``.
            source: Where the data came from (e.g. ``"ebird+inaturalist"``).
            valid_until: Expiry timestamp. None means never fresh.
            **params: Extra metadata fields (viewport, filters, counts).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
            **params,
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()

        with full.open("w") as f:
            json.dump({"meta": meta, "data": data}, f, indent=2)
        return full

    def valid_until(self, path: Path) -> datetime | None:
        """Expiry of a stored file, or None if missing or open-ended."""
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        raw = envelope.get("meta", {}).get("valid_until")
        if raw is None:
            return None
        expiry = datetime.fromisoformat(raw)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return expiry

    def is_fresh(self, path: Path) -> bool:
        """True if the file exists and its ``valid_until`` is in the future."""
        expiry = self.valid_until(path)
        return expiry is not None and datetime.now(UTC) < expiry

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
