"""Lazy construction of service handles and the pipeline from :class:`Settings`."""

from __future__ import annotations

import logging

from story_indexer.backends.base import DocumentStore, EmbeddingService, VectorIndex
from story_indexer.config import Settings
from story_indexer.ingestion.embedder import Embedder
from story_indexer.ingestion.pipeline import IndexingPipeline
from story_indexer.ingestion.upserter import Upserter

logger = logging.getLogger(__name__)


class ServiceHandles:
    """Per-process cache of backend clients.

    Each client is created on first access and reused for every later
    invocation handled by the same process.  Backend modules are
    imported lazily so only the configured SDKs are loaded.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._document_store: DocumentStore | None = None
        self._embedding_service: EmbeddingService | None = None
        self._vector_index: VectorIndex | None = None

    @property
    def document_store(self) -> DocumentStore:
        if self._document_store is None:
            from story_indexer.backends.gcs import GcsDocumentStore

            self._document_store = GcsDocumentStore(project=self.settings.project_id or None)
        return self._document_store

    @property
    def embedding_service(self) -> EmbeddingService:
        if self._embedding_service is None:
            s = self.settings
            if s.embedding_backend == "huggingface":
                from story_indexer.backends.huggingface import HuggingFaceEmbeddingService

                self._embedding_service = HuggingFaceEmbeddingService(s.embedding_model)
            else:
                from story_indexer.backends.vertex import VertexEmbeddingService

                self._embedding_service = VertexEmbeddingService(
                    s.embedding_endpoint, api_endpoint=s.resolved_api_endpoint
                )
            logger.info("Embedding backend: %s (%s)", s.embedding_backend, s.embedding_model)
        return self._embedding_service

    @property
    def vector_index(self) -> VectorIndex:
        if self._vector_index is None:
            s = self.settings
            if s.index_backend == "chroma":
                from story_indexer.backends.chroma_store import ChromaVectorIndex

                self._vector_index = ChromaVectorIndex(
                    s.index_id, host=s.chroma_host, port=s.chroma_port
                )
            else:
                from story_indexer.backends.vertex import VertexVectorIndex

                self._vector_index = VertexVectorIndex(
                    s.index_name, api_endpoint=s.resolved_api_endpoint
                )
            logger.info("Index backend: %s (%s)", s.index_backend, s.index_id)
        return self._vector_index

    def clear(self) -> None:
        """Drop all cached clients."""
        self._document_store = None
        self._embedding_service = None
        self._vector_index = None


def build_pipeline(settings: Settings, handles: ServiceHandles | None = None) -> IndexingPipeline:
    """Validate *settings* and assemble an :class:`IndexingPipeline`.

    Raises
    ------
    story_indexer.errors.ConfigError
        If the project or index id is missing.
    """
    settings.require_index_target()
    handles = handles or ServiceHandles(settings)
    return IndexingPipeline(
        store=handles.document_store,
        embedder=Embedder(handles.embedding_service, max_workers=settings.embedding_concurrency),
        upserter=Upserter(handles.vector_index, batch_size=settings.upsert_batch_size),
        chunk_size=settings.chunk_size,
        chunk_overlap=settings.chunk_overlap,
        bucket_filter=settings.bucket_name,
    )
