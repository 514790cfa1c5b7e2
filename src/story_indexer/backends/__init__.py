"""
Backends — concrete clients for storage, embedding, and the vector index.

Public surface
--------------
- :class:`DocumentStore`, :class:`EmbeddingService`, :class:`VectorIndex` — interfaces.
- :class:`ServiceHandles`, :func:`build_pipeline` — lazy wiring from settings.
- :class:`GcsDocumentStore`, :class:`VertexEmbeddingService`,
  :class:`VertexVectorIndex`, :class:`ChromaVectorIndex`,
  :class:`HuggingFaceEmbeddingService` — implementations (lazily imported).
"""

from story_indexer.backends.base import DocumentStore, EmbeddingService, VectorIndex

__all__ = [
    "ChromaVectorIndex",
    "DocumentStore",
    "EmbeddingService",
    "GcsDocumentStore",
    "HuggingFaceEmbeddingService",
    "ServiceHandles",
    "VectorIndex",
    "VertexEmbeddingService",
    "VertexVectorIndex",
    "build_pipeline",
]

_LAZY = {
    "ChromaVectorIndex": "story_indexer.backends.chroma_store",
    "GcsDocumentStore": "story_indexer.backends.gcs",
    "HuggingFaceEmbeddingService": "story_indexer.backends.huggingface",
    "ServiceHandles": "story_indexer.backends.factory",
    "VertexEmbeddingService": "story_indexer.backends.vertex",
    "VertexVectorIndex": "story_indexer.backends.vertex",
    "build_pipeline": "story_indexer.backends.factory",
}


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import implementations to avoid pulling in cloud SDKs at import time."""
    if name in _LAZY:
        import importlib

        return getattr(importlib.import_module(_LAZY[name]), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
