"""Abstract interfaces for the services the pipeline depends on.

The core never talks to Google Cloud, Chroma, or a model runtime
directly.  Adding a backend only requires subclassing one of these
bases and wiring it into :class:`story_indexer.backends.factory.ServiceHandles`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from story_indexer.models import Datapoint


class DocumentStore(ABC):
    """Read-only access to the object store holding source documents."""

    @abstractmethod
    def read(self, bucket: str, key: str) -> str:
        """Return the UTF-8 text of ``bucket/key``.

        Raises
        ------
        story_indexer.errors.NotFoundError
            If the object does not exist.
        story_indexer.errors.DocumentReadError
            For any other storage failure.
        """
        ...


class EmbeddingService(ABC):
    """One-text-per-call embedding inference."""

    @abstractmethod
    def predict(self, text: str) -> Any:
        """Return the raw service response for *text*.

        The response is decoded by
        :func:`story_indexer.ingestion.embedder.decode_embedding`, so
        backends may return either a plain vector or the service's
        native prediction structure.
        """
        ...


class VectorIndex(ABC):
    """Write side of a vector index with upsert-by-id semantics."""

    @abstractmethod
    def upsert(self, datapoints: list[Datapoint]) -> None:
        """Insert or overwrite *datapoints* in one write call."""
        ...
