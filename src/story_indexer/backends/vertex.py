"""Vertex AI backends: text-embedding prediction and Vector Search upserts."""

from __future__ import annotations

import logging
from typing import Any

from google.cloud import aiplatform_v1
from google.protobuf import json_format, struct_pb2

from story_indexer.backends.base import EmbeddingService, VectorIndex
from story_indexer.models import Datapoint

logger = logging.getLogger(__name__)


def _to_value(obj: dict[str, Any]) -> struct_pb2.Value:
    return json_format.ParseDict(obj, struct_pb2.Value())


class VertexEmbeddingService(EmbeddingService):
    """Calls a Vertex AI publisher text-embedding model, one text per request.

    Parameters
    ----------
    endpoint:
        Full model path, e.g.
        ``projects/p/locations/us-central1/publishers/google/models/text-embedding-004``.
    api_endpoint:
        Regional API host, e.g. ``us-central1-aiplatform.googleapis.com``.
    """

    def __init__(
        self,
        endpoint: str,
        *,
        api_endpoint: str,
        client: aiplatform_v1.PredictionServiceClient | None = None,
    ) -> None:
        self.endpoint = endpoint
        self._client = client or aiplatform_v1.PredictionServiceClient(
            client_options={"api_endpoint": api_endpoint}
        )

    def predict(self, text: str) -> Any:
        response = self._client.predict(
            endpoint=self.endpoint,
            instances=[_to_value({"content": text})],
            parameters=_to_value({}),
        )
        # Prediction values are unwrapped by the embedder's decode step.
        return list(response.predictions)


class VertexVectorIndex(VectorIndex):
    """Streams datapoints into a Vertex AI Vector Search index.

    Parameters
    ----------
    index_name:
        ``projects/{p}/locations/{l}/indexes/{index_id}``.
    api_endpoint:
        Regional API host.
    """

    def __init__(
        self,
        index_name: str,
        *,
        api_endpoint: str,
        client: aiplatform_v1.IndexServiceClient | None = None,
    ) -> None:
        self.index_name = index_name
        self._client = client or aiplatform_v1.IndexServiceClient(
            client_options={"api_endpoint": api_endpoint}
        )

    @staticmethod
    def to_index_datapoint(datapoint: Datapoint) -> aiplatform_v1.IndexDatapoint:
        return aiplatform_v1.IndexDatapoint(
            datapoint_id=datapoint.datapoint_id,
            feature_vector=datapoint.feature_vector,
            restricts=[
                aiplatform_v1.IndexDatapoint.Restriction(
                    namespace=r.namespace,
                    allow_list=r.allow_list,
                )
                for r in datapoint.restricts
            ],
        )

    def upsert(self, datapoints: list[Datapoint]) -> None:
        request = aiplatform_v1.UpsertDatapointsRequest(
            index=self.index_name,
            datapoints=[self.to_index_datapoint(dp) for dp in datapoints],
        )
        self._client.upsert_datapoints(request=request)
        logger.debug("Sent %d datapoints to %s", len(datapoints), self.index_name)
