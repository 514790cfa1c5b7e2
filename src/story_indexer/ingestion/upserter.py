"""Vector → datapoint conversion and batched index writes."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from story_indexer.backends.base import VectorIndex
from story_indexer.errors import UpsertError
from story_indexer.models import Datapoint, OwnershipMetadata, Restriction

logger = logging.getLogger(__name__)

# Restrict namespaces the query side filters on.
OWNER_NAMESPACE = "user_id"
COLLECTION_NAMESPACE = "book_id"
CATEGORY_NAMESPACE = "data_type"
SOURCE_PATH_NAMESPACE = "source_path"


def datapoint_id(document_key: str, index: int) -> str:
    """Stable per-chunk id: ``<document_key>#<index>``."""
    return f"{document_key}#{index}"


def build_restricts(metadata: OwnershipMetadata, document_key: str) -> list[Restriction]:
    return [
        Restriction(namespace=OWNER_NAMESPACE, allow_list=[metadata.owner_id]),
        Restriction(namespace=COLLECTION_NAMESPACE, allow_list=[metadata.collection_id]),
        Restriction(namespace=CATEGORY_NAMESPACE, allow_list=[metadata.category]),
        Restriction(namespace=SOURCE_PATH_NAMESPACE, allow_list=[document_key]),
    ]


def build_datapoints(
    vectors: Sequence[Sequence[float]],
    metadata: OwnershipMetadata,
    document_key: str,
) -> list[Datapoint]:
    """Build one :class:`Datapoint` per vector, ids following vector order."""
    restricts = build_restricts(metadata, document_key)
    return [
        Datapoint(
            datapoint_id=datapoint_id(document_key, i),
            feature_vector=list(vector),
            restricts=restricts,
        )
        for i, vector in enumerate(vectors)
    ]


def batched(items: Sequence[Datapoint], batch_size: int) -> Iterator[Sequence[Datapoint]]:
    """Yield consecutive slices of at most *batch_size* items."""
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for start in range(0, len(items), batch_size):
        yield items[start : start + batch_size]


class Upserter:
    """Write datapoints to a :class:`VectorIndex` in bounded, ordered batches."""

    def __init__(self, index: VectorIndex, *, batch_size: int = 100) -> None:
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        self.index = index
        self.batch_size = batch_size

    def upsert(
        self,
        vectors: Sequence[Sequence[float]],
        metadata: OwnershipMetadata,
        document_key: str,
    ) -> list[Datapoint]:
        """Upsert *vectors* for *document_key* and return the written datapoints.

        Batches are issued sequentially.  If one fails, an
        :class:`UpsertError` is raised and earlier batches stay written;
        re-running the same document overwrites them by id.
        """
        datapoints = build_datapoints(vectors, metadata, document_key)
        batches = 0
        for batches, batch in enumerate(batched(datapoints, self.batch_size), 1):
            try:
                self.index.upsert(list(batch))
            except Exception as exc:
                raise UpsertError(batches, len(batch), str(exc)) from exc
            logger.info("  upserted batch %d (%d datapoints)", batches, len(batch))

        logger.info("Upserted %d datapoints in %d batches", len(datapoints), batches)
        return datapoints
