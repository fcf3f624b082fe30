from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from importlib import import_module
from typing import Any

from paperlens.application.ports.embedding_port import EmbeddingPort
from paperlens.domain.errors import EmbeddingError


@dataclass
class SentenceTransformersEmbeddingAdapter(EmbeddingPort):
    """Local, batch-capable embeddings via sentence-transformers.

    The model is loaded on first use; encoding runs in a worker thread so the
    event loop stays responsive while a large paper is embedded.
    """

    model: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"  # switch to "cuda" when available
    batch_size: int = 64
    local_files_only: bool = False  # support offline deployments
    _model: Any | None = field(default=None, init=False, repr=False)

    def _ensure_model(self) -> Any:
        if self._model is not None:
            return self._model
        try:
            st_module = import_module("sentence_transformers")
            self._model = st_module.SentenceTransformer(
                self.model,
                device=self.device,
                local_files_only=self.local_files_only,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Failed to load embedding model '{self.model}': {ex}") from ex
        return self._model

    def _encode(self, texts: list[str]) -> list[list[float]]:
        model = self._ensure_model()
        try:
            raw_vectors = model.encode(
                texts,
                batch_size=self.batch_size,
                normalize_embeddings=True,
                convert_to_numpy=True,
                show_progress_bar=False,
            )
        except Exception as ex:  # noqa: BLE001
            raise EmbeddingError(f"Embedding texts failed: {ex}") from ex
        return [[float(x) for x in vec] for vec in raw_vectors]

    async def embed(self, text: str) -> list[float]:
        return (await self.embed_batch([text]))[0]

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        return await asyncio.to_thread(self._encode, list(texts))
