"""Local sentence-transformer embeddings via LangChain."""

from __future__ import annotations

from typing import TYPE_CHECKING

from langchain_huggingface import HuggingFaceEmbeddings

from story_indexer.backends.base import EmbeddingService

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings


class HuggingFaceEmbeddingService(EmbeddingService):
    """Embeds text in-process with a HuggingFace sentence-transformer.

    Parameters
    ----------
    model_name:
        HuggingFace model id, e.g. ``sentence-transformers/all-MiniLM-L6-v2``.
    embeddings:
        Any LangChain ``Embeddings`` to use instead of building a
        ``HuggingFaceEmbeddings`` for *model_name*.
    """

    def __init__(
        self,
        model_name: str,
        *,
        normalize_embeddings: bool = True,
        embeddings: Embeddings | None = None,
    ) -> None:
        self.model_name = model_name
        self._embeddings = embeddings or HuggingFaceEmbeddings(
            model_name=model_name,
            encode_kwargs={"normalize_embeddings": normalize_embeddings},
        )

    def predict(self, text: str) -> list[float]:
        return self._embeddings.embed_query(text)
