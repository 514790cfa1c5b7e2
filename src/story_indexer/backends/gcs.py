"""Google Cloud Storage implementation of :class:`DocumentStore`."""

from __future__ import annotations

import logging

from google.api_core.exceptions import GoogleAPICallError, NotFound
from google.cloud import storage

from story_indexer.backends.base import DocumentStore
from story_indexer.errors import DocumentReadError, NotFoundError

logger = logging.getLogger(__name__)


class GcsDocumentStore(DocumentStore):
    """Reads story documents from GCS buckets.

    Parameters
    ----------
    project:
        Project used for the storage client.  ``None`` lets the client
        infer it from the environment.
    client:
        Pre-built ``storage.Client`` (mainly for tests).
    """

    def __init__(self, project: str | None = None, *, client: storage.Client | None = None) -> None:
        self._client = client or storage.Client(project=project)

    def read(self, bucket: str, key: str) -> str:
        blob = self._client.bucket(bucket).blob(key)
        try:
            text = blob.download_as_text(encoding="utf-8")
        except NotFound as exc:
            raise NotFoundError(bucket, key) from exc
        except GoogleAPICallError as exc:
            raise DocumentReadError(bucket, key, str(exc)) from exc
        logger.info("Read gs://%s/%s (%d chars)", bucket, key, len(text))
        return text
