from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from paperlens.application.ports.embedding_port import EmbeddingPort
from paperlens.domain.errors import ConfigError, EmbeddingError

logger = logging.getLogger(__name__)


@dataclass
class OpenAIEmbeddingAdapter(EmbeddingPort):
    """Batch-capable embeddings: one request for N texts."""

    api_key: str | None
    model: str = "text-embedding-3-small"
    base_url: str | None = None

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ConfigError("OpenAI API key required")
        # Deferred to first use to avoid a hard dependency in tests
        self._client: Any | None = None

    def _ensure_client(self) -> Any:
        if self._client is None:
            module = import_module("openai")
            self._client = module.AsyncOpenAI(api_key=self.api_key, base_url=self.base_url)
        return self._client

    async def _create(self, payload: str | list[str]) -> list[list[float]]:
        try:
            client = self._ensure_client()
            resp: Any = await client.embeddings.create(model=self.model, input=payload)
            return [list(map(float, item.embedding)) for item in resp.data]
        except Exception as ex:  # noqa: BLE001
            # Translate external errors to domain-specific errors
            raise EmbeddingError(f"OpenAI embedding failed: {ex}") from ex

    async def embed(self, text: str) -> list[float]:
        return (await self._create(text))[0]

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        logger.debug("Embedding %d texts with %s", len(texts), self.model)
        return await self._create(list(texts))
