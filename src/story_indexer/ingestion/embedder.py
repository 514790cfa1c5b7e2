"""Chunk → vector embedding."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from numbers import Real
from typing import Any

from story_indexer.backends.base import EmbeddingService
from story_indexer.errors import EmbeddingError
from story_indexer.models import Chunk

logger = logging.getLogger(__name__)


def _as_vector(values: Any) -> list[float] | None:
    if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
        return None
    if not values or not all(isinstance(v, Real) and not isinstance(v, bool) for v in values):
        return None
    return [float(v) for v in values]


def decode_embedding(payload: Any) -> list[float]:
    """Extract the embedding vector from a raw embedding-service response.

    Accepted shapes:

    * a plain sequence of numbers;
    * a prediction mapping ``{"embeddings": {"values": [...]}}``;
    * a non-empty sequence of such predictions (the first one is used).

    Raises
    ------
    EmbeddingError
        If *payload* is empty, lacks a vector, or the vector is not numeric.
    """
    if payload is None:
        raise EmbeddingError("Empty embedding response")

    vector = _as_vector(payload)
    if vector is not None:
        return vector

    prediction = payload
    if not isinstance(payload, Mapping):
        if isinstance(payload, (str, bytes)) or not isinstance(payload, Sequence):
            raise EmbeddingError(f"Unexpected embedding response type {type(payload).__name__}")
        if len(payload) == 0:
            raise EmbeddingError("Empty embedding response")
        prediction = payload[0]
    if not isinstance(prediction, Mapping):
        raise EmbeddingError("Embedding prediction is not a mapping")

    embeddings = prediction.get("embeddings")
    if not isinstance(embeddings, Mapping):
        raise EmbeddingError("Embedding prediction has no 'embeddings' field")
    vector = _as_vector(embeddings.get("values"))
    if vector is None:
        raise EmbeddingError("Embedding prediction has no numeric 'values'")
    return vector


class Embedder:
    """Map chunks to index-aligned embedding vectors.

    Parameters
    ----------
    service:
        Backend that performs one inference call per text.
    max_workers:
        Number of concurrent ``predict`` calls.  ``1`` dispatches
        sequentially.  Output order always matches input order.
    """

    def __init__(self, service: EmbeddingService, *, max_workers: int = 1) -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.service = service
        self.max_workers = max_workers

    def _embed_one(self, chunk: Chunk) -> list[float]:
        try:
            return decode_embedding(self.service.predict(chunk.text))
        except EmbeddingError as exc:
            raise EmbeddingError(str(exc), chunk_index=chunk.sequence_index) from exc

    def embed(self, chunks: Sequence[Chunk]) -> list[list[float]]:
        """Return one vector per chunk, in the same order as *chunks*.

        Raises
        ------
        EmbeddingError
            If any response is missing or malformed; no partial result is returned.
        """
        if not chunks:
            return []
        if self.max_workers == 1 or len(chunks) == 1:
            vectors = [self._embed_one(chunk) for chunk in chunks]
        else:
            with ThreadPoolExecutor(max_workers=min(self.max_workers, len(chunks))) as pool:
                # map() yields in submission order regardless of completion order
                vectors = list(pool.map(self._embed_one, chunks))

        dims = {len(v) for v in vectors}
        if len(dims) > 1:
            raise EmbeddingError(f"Inconsistent embedding dimensions: {sorted(dims)}")
        logger.info("Generated %d embeddings (dim=%d)", len(vectors), len(vectors[0]))
        return vectors
