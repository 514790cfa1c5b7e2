"""Domain models flowing through the indexing pipeline."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OwnershipMetadata(BaseModel):
    """Ownership identifiers parsed from a document's storage key.

    Attributes
    ----------
    owner_id:
        The user who owns the story.
    collection_id:
        The book (collection) the document belongs to.
    category:
        The story-data type, e.g. ``"outline"`` or ``"characters"``.
    """

    model_config = ConfigDict(frozen=True)

    owner_id: str = Field(min_length=1)
    collection_id: str = Field(min_length=1)
    category: str = Field(min_length=1)


class Chunk(BaseModel):
    """An ordered slice of document text prepared for embedding."""

    model_config = ConfigDict(frozen=True)

    sequence_index: int = Field(ge=0)
    text: str = Field(min_length=1)


class Restriction(BaseModel):
    """A filterable namespace / value pair attached to a datapoint."""

    namespace: str
    allow_list: list[str]


class Datapoint(BaseModel):
    """A vector plus its filter restrictions, the unit written to the index."""

    datapoint_id: str
    feature_vector: list[float]
    restricts: list[Restriction] = Field(default_factory=list)

    def restrict_map(self) -> dict[str, str]:
        """Flatten single-valued restricts into a ``namespace -> value`` dict."""
        return {r.namespace: r.allow_list[0] for r in self.restricts if r.allow_list}


class StorageObject(BaseModel):
    """Canonical ``{bucket, name}`` record produced at the trigger boundary."""

    bucket: str | None = None
    name: str | None = None

    @property
    def uri(self) -> str:
        return f"gs://{self.bucket}/{self.name}"


class PipelineState(str, Enum):
    RECEIVED = "received"
    CLASSIFIED = "classified"
    LOADED = "loaded"
    CHUNKED = "chunked"
    EMBEDDED = "embedded"
    UPSERTED = "upserted"
    DONE = "done"
    SKIPPED = "skipped"


class SkipReason(str, Enum):
    """Why an event ended without touching the index."""

    MISSING_LOCATION = "missing_location"
    BUCKET_MISMATCH = "bucket_mismatch"
    NOT_MARKDOWN = "not_markdown"
    PATH_MISMATCH = "path_mismatch"
    EMPTY_DOCUMENT = "empty_document"


class IndexingResult(BaseModel):
    """Outcome of one pipeline run."""

    state: PipelineState = PipelineState.RECEIVED
    bucket: str | None = None
    object_key: str | None = None
    metadata: OwnershipMetadata | None = None
    skip_reason: SkipReason | None = None
    chunk_count: int = 0
    datapoint_ids: list[str] = Field(default_factory=list)
    batches: int = 0
    transitions: list[PipelineState] = Field(default_factory=lambda: [PipelineState.RECEIVED])

    @property
    def skipped(self) -> bool:
        return self.state is PipelineState.SKIPPED
