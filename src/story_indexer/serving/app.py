"""FastAPI application receiving storage events for indexing."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from fastapi import Body, Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from story_indexer import __version__
from story_indexer.config import settings
from story_indexer.errors import IndexingError
from story_indexer.ingestion.pipeline import IndexingPipeline
from story_indexer.models import IndexingResult
from story_indexer.serving.events import normalize_event

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Story Indexer",
    version=__version__,
    description="Chunks, embeds and indexes story documents on object creation.",
)


@lru_cache(maxsize=1)
def get_pipeline() -> IndexingPipeline:
    """Build the pipeline once per process (raises ``ConfigError`` if unconfigured)."""
    from story_indexer.backends.factory import build_pipeline

    return build_pipeline(settings)


@app.exception_handler(IndexingError)
async def indexing_error_handler(request: Request, exc: IndexingError) -> JSONResponse:
    """Surface failures as 500 so the trigger redelivers the event."""
    logger.exception("Indexing failed: %s", exc, exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"error": type(exc).__name__, "detail": str(exc)},
    )


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/", response_model=IndexingResult)
def receive_event(
    event: dict[str, Any] = Body(...),
    pipeline: IndexingPipeline = Depends(get_pipeline),
) -> IndexingResult:
    """Index the object named by a storage "finalized" notification."""
    obj = normalize_event(event, default_bucket=settings.bucket_name)
    return pipeline.run(obj)
