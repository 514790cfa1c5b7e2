"""Storage-key classification.

Story documents live under::

    users/{owner_id}/{collection_id}/story_data/{category}/{filename}.md

Anything else is silently skipped by the pipeline.
"""

from __future__ import annotations

import re

from story_indexer.models import OwnershipMetadata

USERS_SEGMENT = "users"
STORY_DATA_SEGMENT = "story_data"
MIN_SEGMENTS = 6

_MARKDOWN_RE = re.compile(r"\.(md|markdown)$", re.IGNORECASE)


def classify_path(key: str) -> OwnershipMetadata | None:
    """Parse *key* into :class:`OwnershipMetadata`, or ``None`` if it doesn't match.

    >>> classify_path("users/u1/b1/story_data/outline/x.md")
    OwnershipMetadata(owner_id='u1', collection_id='b1', category='outline')
    >>> classify_path("other/x.md") is None
    True
    """
    parts = key.split("/")
    if len(parts) < MIN_SEGMENTS:
        return None
    if parts[0] != USERS_SEGMENT or parts[3] != STORY_DATA_SEGMENT:
        return None
    owner_id, collection_id, category = parts[1], parts[2], parts[4]
    if not (owner_id and collection_id and category):
        return None
    return OwnershipMetadata(owner_id=owner_id, collection_id=collection_id, category=category)


def is_markdown(key: str) -> bool:
    """Return ``True`` for ``.md`` / ``.markdown`` keys (case-insensitive)."""
    return bool(_MARKDOWN_RE.search(key))
