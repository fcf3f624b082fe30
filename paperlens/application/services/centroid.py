from __future__ import annotations

from collections.abc import Sequence

from paperlens.application.ports.embedding_port import EmbeddingPort
from paperlens.domain.errors import EmptyInputError
from paperlens.domain.models import Chunk
from paperlens.domain.similarity import mean_vector


async def compute_centroid(chunks: Sequence[Chunk], provider: EmbeddingPort) -> list[float]:
    """Embed every chunk text and average the vectors into one paper-level query.

    Raises:
        EmptyInputError: If no chunks are given
    """
    if not chunks:
        raise EmptyInputError("Cannot compute centroid of empty chunks")
    vectors = await provider.embed_batch([c.text for c in chunks])
    return mean_vector(vectors)
