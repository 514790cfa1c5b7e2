"""Chroma implementation of :class:`VectorIndex`."""

from __future__ import annotations

import logging

import chromadb

from story_indexer.backends.base import VectorIndex
from story_indexer.models import Datapoint

logger = logging.getLogger(__name__)


class ChromaVectorIndex(VectorIndex):
    """Chroma-backed vector index.

    Restrict namespaces are flattened into Chroma metadata, so the
    same ``user_id`` / ``book_id`` / ``data_type`` filters apply at
    query time.

    Parameters
    ----------
    collection_name:
        Name of the Chroma collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    """

    def __init__(
        self,
        collection_name: str,
        *,
        host: str = "localhost",
        port: int = 8000,
        distance_metric: str = "cosine",
        client: chromadb.ClientAPI | None = None,
    ) -> None:
        self.collection_name = collection_name
        self._client = client or chromadb.HttpClient(host=host, port=port)
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": distance_metric},
        )

    def upsert(self, datapoints: list[Datapoint]) -> None:
        self._collection.upsert(
            ids=[dp.datapoint_id for dp in datapoints],
            embeddings=[dp.feature_vector for dp in datapoints],
            metadatas=[dp.restrict_map() for dp in datapoints],
        )
        logger.debug("Upserted %d datapoints into collection %s", len(datapoints), self.collection_name)
