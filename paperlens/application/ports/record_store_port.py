from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from paperlens.domain.models import Chunk, Embedding, PaperMetadata

if TYPE_CHECKING:  # pragma: no cover
    from paperlens.application.schemas import StoredAnalysis


@runtime_checkable
class RecordStorePort(Protocol):
    """Persistence collaborator.

    Keys: papers by paper_id; chunks and embeddings by (paper_id, chunk_id)
    with bulk upsert; analyses by (paper_id, analysis_version).
    """

    async def get_paper(self, paper_id: str) -> PaperMetadata | None: ...

    async def save_paper(self, paper: PaperMetadata) -> None: ...

    async def get_chunks(self, paper_id: str) -> list[Chunk]: ...

    async def save_chunks(self, chunks: Sequence[Chunk]) -> None: ...

    async def get_embeddings(self, paper_id: str) -> list[Embedding]: ...

    async def save_embeddings(self, embeddings: Sequence[Embedding]) -> None: ...

    async def save_analysis(self, record: StoredAnalysis) -> None: ...

    async def get_analysis(
        self, paper_id: str, version: str = "1.0.0"
    ) -> StoredAnalysis | None: ...

    async def delete_paper(self, paper_id: str) -> None: ...
