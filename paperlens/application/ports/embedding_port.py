from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal, Protocol, runtime_checkable

ProviderKind = Literal["openai", "anthropic", "ollama", "sentence-transformers"]


@dataclass(frozen=True)
class ProviderConfig:
    """Backend selection shared by embedding and generation factories."""

    provider: str
    api_key: str | None = None
    model: str | None = None
    base_url: str | None = None


@runtime_checkable
class EmbeddingPort(Protocol):
    model: str

    async def embed(self, text: str) -> list[float]: ...

    async def embed_batch(self, texts: Sequence[str]) -> list[list[float]]: ...
