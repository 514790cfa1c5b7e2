"""Shared pytest configuration, fakes, and fixtures."""

from __future__ import annotations

from typing import Any

import pytest

from story_indexer.backends.base import DocumentStore, EmbeddingService, VectorIndex
from story_indexer.errors import NotFoundError
from story_indexer.ingestion.embedder import Embedder
from story_indexer.ingestion.pipeline import IndexingPipeline
from story_indexer.ingestion.upserter import Upserter
from story_indexer.models import Datapoint


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


# ── Fakes for deterministic testing ─────────────────────────────────────


class FakeDocumentStore(DocumentStore):
    """In-memory object store keyed by ``(bucket, key)``."""

    def __init__(self, objects: dict[tuple[str, str], str] | None = None) -> None:
        self.objects = dict(objects or {})
        self.reads: list[tuple[str, str]] = []

    def read(self, bucket: str, key: str) -> str:
        self.reads.append((bucket, key))
        try:
            return self.objects[(bucket, key)]
        except KeyError:
            raise NotFoundError(bucket, key) from None


class FakeEmbeddingService(EmbeddingService):
    """Returns Vertex-shaped predictions whose vector encodes the text length."""

    def __init__(self, dim: int = 3) -> None:
        self.dim = dim
        self.calls: list[str] = []

    def predict(self, text: str) -> Any:
        self.calls.append(text)
        return [{"embeddings": {"values": [float(len(text))] * self.dim}}]


class FakeVectorIndex(VectorIndex):
    """Dict-backed index that records every write call."""

    def __init__(self, fail_on_call: int | None = None) -> None:
        self.fail_on_call = fail_on_call
        self.calls: list[list[Datapoint]] = []
        self.datapoints: dict[str, Datapoint] = {}

    def upsert(self, datapoints: list[Datapoint]) -> None:
        if self.fail_on_call is not None and len(self.calls) + 1 == self.fail_on_call:
            raise RuntimeError("index unavailable")
        self.calls.append(list(datapoints))
        for dp in datapoints:
            self.datapoints[dp.datapoint_id] = dp


# ── Fixtures ────────────────────────────────────────────────────────────

BUCKET = "story-bucket"
STORY_KEY = "users/u1/b1/story_data/outline/chapter-1.md"

STORY_TEXT = """# Chapter One

The village woke before dawn.

## The Market

Stalls opened one by one along the river road.

## The Stranger

A rider arrived from the north carrying a sealed letter.
"""


@pytest.fixture()
def document_store() -> FakeDocumentStore:
    return FakeDocumentStore({(BUCKET, STORY_KEY): STORY_TEXT})


@pytest.fixture()
def embedding_service() -> FakeEmbeddingService:
    return FakeEmbeddingService()


@pytest.fixture()
def vector_index() -> FakeVectorIndex:
    return FakeVectorIndex()


@pytest.fixture()
def pipeline(
    document_store: FakeDocumentStore,
    embedding_service: FakeEmbeddingService,
    vector_index: FakeVectorIndex,
) -> IndexingPipeline:
    return IndexingPipeline(
        store=document_store,
        embedder=Embedder(embedding_service),
        upserter=Upserter(vector_index, batch_size=2),
        chunk_size=60,
        chunk_overlap=10,
        bucket_filter=BUCKET,
    )
