from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import httpx

from paperlens.application.ports.embedding_port import EmbeddingPort
from paperlens.domain.errors import EmbeddingError

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"


@dataclass
class OllamaEmbeddingAdapter(EmbeddingPort):
    """Sequential-only embeddings: the local backend has no batch endpoint.

    embed_batch issues one request per text, so latency grows linearly
    with the number of chunks.
    """

    base_url: str = DEFAULT_OLLAMA_URL
    model: str = "nomic-embed-text"
    timeout_s: float = 60.0
    http_client: httpx.AsyncClient | None = None

    async def _post(self, client: httpx.AsyncClient, text: str) -> list[float]:
        r = await client.post(
            f"{self.base_url.rstrip('/')}/api/embeddings",
            json={"model": self.model, "prompt": text},
            timeout=self.timeout_s,
        )
        if r.is_error:
            raise EmbeddingError(f"Ollama embedding failed: {r.status_code} {r.reason_phrase}")
        try:
            data = r.json()
        except ValueError as ex:
            raise EmbeddingError(f"Ollama returned a non-JSON body: {ex}") from ex
        vector = data.get("embedding") if isinstance(data, dict) else None
        if not isinstance(vector, list):
            raise EmbeddingError("Ollama embedding response has no 'embedding' list")
        try:
            return [float(x) for x in vector]
        except (TypeError, ValueError) as ex:
            raise EmbeddingError(f"Ollama embedding has non-numeric values: {ex}") from ex

    async def _embed_all(self, texts: Sequence[str]) -> list[list[float]]:
        try:
            if self.http_client is not None:
                return [await self._post(self.http_client, t) for t in texts]
            async with httpx.AsyncClient() as client:
                return [await self._post(client, t) for t in texts]
        except httpx.HTTPError as ex:
            raise EmbeddingError(f"Ollama embedding request failed: {ex}") from ex

    async def embed(self, text: str) -> list[float]:
        return (await self._embed_all([text]))[0]

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        logger.debug("Embedding %d texts sequentially with %s", len(texts), self.model)
        return await self._embed_all(texts)
