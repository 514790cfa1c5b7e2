"""Shared configuration loaded from environment / .env file."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings

from story_indexer.errors import ConfigError


class Settings(BaseSettings):
    """Application-wide settings, populated from env vars or .env file."""

    # Google Cloud
    project_id: str = Field(
        default="",
        validation_alias=AliasChoices("project_id", "google_cloud_project", "gcloud_project"),
    )
    location: str = "us-central1"
    api_endpoint: str = Field(
        default="",
        description="Vertex AI API host. Derived from ``location`` when empty.",
    )

    # Vector index
    index_id: str = Field(
        default="",
        validation_alias=AliasChoices("index_id", "vector_search_index_id"),
    )
    index_backend: Literal["vertex", "chroma"] = "vertex"
    chroma_host: str = "localhost"
    chroma_port: int = 8000
    upsert_batch_size: int = Field(default=100, gt=0)

    # Source bucket
    bucket_name: str | None = Field(
        default=None,
        validation_alias=AliasChoices("bucket_name", "gcs_bucket_name"),
        description="Only events for this bucket are indexed when set.",
    )

    # Embedding
    embedding_model: str = "text-embedding-004"
    embedding_backend: Literal["vertex", "huggingface"] = "vertex"
    embedding_concurrency: int = Field(default=1, ge=1)

    # Chunking (characters)
    chunk_size: int = Field(default=1200, gt=0)
    chunk_overlap: int = Field(default=200, ge=0)

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @property
    def resolved_api_endpoint(self) -> str:
        return self.api_endpoint or f"{self.location}-aiplatform.googleapis.com"

    @property
    def embedding_endpoint(self) -> str:
        """Publisher model path used by the prediction service."""
        return (
            f"projects/{self.project_id}/locations/{self.location}"
            f"/publishers/google/models/{self.embedding_model}"
        )

    @property
    def index_name(self) -> str:
        return f"projects/{self.project_id}/locations/{self.location}/indexes/{self.index_id}"

    def require_index_target(self) -> None:
        """Raise :class:`ConfigError` unless the project and index are configured."""
        missing = [
            env
            for env, value in (
                ("GOOGLE_CLOUD_PROJECT", self.project_id),
                ("VECTOR_SEARCH_INDEX_ID", self.index_id),
            )
            if not value
        ]
        if missing:
            raise ConfigError(f"{', '.join(missing)} {'is' if len(missing) == 1 else 'are'} required")


# Singleton — import `settings` wherever needed.
settings = Settings()
