"""Normalise incoming storage notifications into a :class:`StorageObject`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from story_indexer.models import StorageObject


def _unwrap(event: Any) -> Any:
    """Return the notification payload from a CloudEvent or a legacy event."""
    if isinstance(event, Mapping):
        data = event.get("data")
        return data if isinstance(data, Mapping) and data else event
    data = getattr(event, "data", None)
    return data if data is not None else event


def normalize_event(event: Any, default_bucket: str | None = None) -> StorageObject:
    """Build a :class:`StorageObject` from a structured or legacy event.

    Accepted shapes:

    * legacy background event ``{"bucket": ..., "name": ...}``;
    * structured CloudEvent envelope ``{"data": {"bucket": ..., "name": ...}}``;
    * any object with a ``.data`` attribute holding the payload.

    *default_bucket* fills in a missing bucket.  Missing fields come
    back as ``None`` and are handled by the pipeline as a skip.
    """
    payload = _unwrap(event)
    if not isinstance(payload, Mapping):
        return StorageObject(bucket=default_bucket)
    bucket = payload.get("bucket") or default_bucket
    name = payload.get("name") or None
    return StorageObject(bucket=bucket, name=name)
