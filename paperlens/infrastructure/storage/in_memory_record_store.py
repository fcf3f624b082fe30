from __future__ import annotations

from collections.abc import Sequence

from paperlens.application.ports.record_store_port import RecordStorePort
from paperlens.application.schemas import StoredAnalysis
from paperlens.domain.models import Chunk, Embedding, PaperMetadata


class InMemoryRecordStore(RecordStorePort):
    """Process-local record store with the same keys as a persistent one.

    Dicts keep insertion order, so chunks come back in the order they were
    first saved.
    """

    def __init__(self) -> None:
        self._papers: dict[str, PaperMetadata] = {}
        self._chunks: dict[tuple[str, str], Chunk] = {}
        self._embeddings: dict[tuple[str, str], Embedding] = {}
        self._analyses: dict[tuple[str, str], StoredAnalysis] = {}

    async def get_paper(self, paper_id: str) -> PaperMetadata | None:
        return self._papers.get(paper_id)

    async def save_paper(self, paper: PaperMetadata) -> None:
        self._papers[paper.paper_id] = paper

    async def get_chunks(self, paper_id: str) -> list[Chunk]:
        return [c for (pid, _), c in self._chunks.items() if pid == paper_id]

    async def save_chunks(self, chunks: Sequence[Chunk]) -> None:
        for c in chunks:
            self._chunks[(c.paper_id, c.chunk_id)] = c

    async def get_embeddings(self, paper_id: str) -> list[Embedding]:
        return [e for (pid, _), e in self._embeddings.items() if pid == paper_id]

    async def save_embeddings(self, embeddings: Sequence[Embedding]) -> None:
        for e in embeddings:
            self._embeddings[(e.paper_id, e.chunk_id)] = e

    async def save_analysis(self, record: StoredAnalysis) -> None:
        # Same (paper_id, version) supersedes the previous record.
        self._analyses[(record.paper_id, record.analysis_version)] = record

    async def get_analysis(self, paper_id: str, version: str = "1.0.0") -> StoredAnalysis | None:
        return self._analyses.get((paper_id, version))

    async def delete_paper(self, paper_id: str) -> None:
        self._papers.pop(paper_id, None)
        for store in (self._chunks, self._embeddings, self._analyses):
            for key in [k for k in store if k[0] == paper_id]:
                del store[key]
