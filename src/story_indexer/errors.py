"""Failure kinds raised by the indexing pipeline.

Every fatal condition derives from :class:`IndexingError` so the
invocation boundary can surface it with a single ``except`` clause.
Skips are *not* errors; see :class:`story_indexer.models.SkipReason`.
"""

from __future__ import annotations


class IndexingError(Exception):
    """Base class for failures that abort an indexing run."""


class ConfigError(IndexingError):
    """Required project / index configuration is missing."""


class NotFoundError(IndexingError):
    """The triggering document is absent from storage."""

    def __init__(self, bucket: str, key: str) -> None:
        super().__init__(f"Object not found: gs://{bucket}/{key}")
        self.bucket = bucket
        self.key = key


class DocumentReadError(IndexingError):
    """Storage returned an error other than not-found while reading."""

    def __init__(self, bucket: str, key: str, reason: str) -> None:
        super().__init__(f"Failed to read gs://{bucket}/{key}: {reason}")
        self.bucket = bucket
        self.key = key


class EmbeddingError(IndexingError):
    """The embedding service returned a missing or malformed vector."""

    def __init__(self, message: str, *, chunk_index: int | None = None) -> None:
        if chunk_index is not None:
            message = f"chunk {chunk_index}: {message}"
        super().__init__(message)
        self.chunk_index = chunk_index


class UpsertError(IndexingError):
    """A datapoint batch could not be written to the vector index.

    Batches before ``batch_index`` stay committed.
    """

    def __init__(self, batch_index: int, batch_size: int, reason: str) -> None:
        super().__init__(f"Upsert of batch {batch_index} ({batch_size} datapoints) failed: {reason}")
        self.batch_index = batch_index
        self.batch_size = batch_size
