"""Pipeline orchestrator — classify → read → chunk → embed → upsert.

One call to :meth:`IndexingPipeline.run` handles one storage event::

    Received ─► Classified ─► Loaded ─► Chunked ─► Embedded ─► Upserted ─► Done
        │            │           │
        └────────────┴───────────┴──► Skipped

Skips end the run successfully without touching the index.  Every
failure propagates to the caller; nothing is retried here.
"""

from __future__ import annotations

import logging

from story_indexer.backends.base import DocumentStore
from story_indexer.ingestion.chunker import chunk_markdown
from story_indexer.ingestion.embedder import Embedder
from story_indexer.ingestion.paths import classify_path, is_markdown
from story_indexer.ingestion.upserter import Upserter
from story_indexer.models import IndexingResult, PipelineState, SkipReason, StorageObject

logger = logging.getLogger(__name__)


class IndexingPipeline:
    """Index a single story document into the vector index.

    Parameters
    ----------
    store:
        Source of document text.
    embedder:
        Chunk → vector mapper.
    upserter:
        Batched index writer.
    chunk_size / chunk_overlap:
        Chunking parameters, in characters.
    bucket_filter:
        When set, events for any other bucket are skipped.
    """

    def __init__(
        self,
        store: DocumentStore,
        embedder: Embedder,
        upserter: Upserter,
        *,
        chunk_size: int = 1200,
        chunk_overlap: int = 200,
        bucket_filter: str | None = None,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.upserter = upserter
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.bucket_filter = bucket_filter

    # -- state helpers ---------------------------------------------------------

    @staticmethod
    def _advance(result: IndexingResult, state: PipelineState) -> None:
        logger.info("%s: %s -> %s", result.object_key, result.state.value, state.value)
        result.state = state
        result.transitions.append(state)

    def _skip(self, result: IndexingResult, reason: SkipReason, message: str) -> IndexingResult:
        logger.info("Skipping %s: %s", result.object_key, message)
        result.skip_reason = reason
        self._advance(result, PipelineState.SKIPPED)
        return result

    # -- main entry point ------------------------------------------------------

    def run(self, obj: StorageObject) -> IndexingResult:
        """Run the pipeline for *obj* and return the outcome.

        Raises
        ------
        story_indexer.errors.IndexingError
            Any read, embedding, or upsert failure.  Datapoints written
            before an upsert failure remain in the index.
        """
        result = IndexingResult(bucket=obj.bucket, object_key=obj.name)
        bucket, key = obj.bucket, obj.name

        if not bucket or not key:
            return self._skip(
                result,
                SkipReason.MISSING_LOCATION,
                f"missing bucket or name in event (bucket={bucket!r}, name={key!r})",
            )
        if self.bucket_filter and bucket != self.bucket_filter:
            return self._skip(
                result,
                SkipReason.BUCKET_MISMATCH,
                f"event for bucket {bucket} ignored; expecting {self.bucket_filter}",
            )
        if not is_markdown(key):
            return self._skip(result, SkipReason.NOT_MARKDOWN, "not a markdown object")

        metadata = classify_path(key)
        if metadata is None:
            return self._skip(
                result, SkipReason.PATH_MISMATCH, "path does not match story_data structure"
            )
        result.metadata = metadata
        self._advance(result, PipelineState.CLASSIFIED)
        logger.info(
            "Indexing %s (owner=%s, collection=%s, category=%s)",
            obj.uri,
            metadata.owner_id,
            metadata.collection_id,
            metadata.category,
        )

        text = self.store.read(bucket, key)
        self._advance(result, PipelineState.LOADED)
        if not text.strip():
            return self._skip(result, SkipReason.EMPTY_DOCUMENT, "empty file; nothing to index")

        chunks = chunk_markdown(text, self.chunk_size, self.chunk_overlap)
        result.chunk_count = len(chunks)
        self._advance(result, PipelineState.CHUNKED)
        logger.info(
            "Created %d chunks (size≈%d, overlap=%d)",
            len(chunks),
            self.chunk_size,
            self.chunk_overlap,
        )

        vectors = self.embedder.embed(chunks)
        self._advance(result, PipelineState.EMBEDDED)

        datapoints = self.upserter.upsert(vectors, metadata, key)
        result.datapoint_ids = [dp.datapoint_id for dp in datapoints]
        result.batches = -(-len(datapoints) // self.upserter.batch_size)
        self._advance(result, PipelineState.UPSERTED)

        self._advance(result, PipelineState.DONE)
        logger.info("Indexed %s: %d vectors in %d batches", obj.uri, len(datapoints), result.batches)
        return result
