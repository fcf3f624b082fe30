# paperlens/application/use_cases/analyze_paper.py
from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field, replace

from paperlens.application.dto.analysis_dto import AnalyzePaperRequest
from paperlens.application.ports.clock_port import ClockPort
from paperlens.application.ports.embedding_port import EmbeddingPort
from paperlens.application.ports.generation_port import GenerationPort
from paperlens.application.ports.page_extractor_port import PageExtractorPort
from paperlens.application.ports.record_store_port import RecordStorePort
from paperlens.application.schemas import Analysis, StoredAnalysis
from paperlens.application.services.centroid import compute_centroid
from paperlens.domain.errors import (
    DomainError,
    EmbeddingError,
    ExtractionError,
    NoContentError,
    PaperNotFoundError,
)
from paperlens.domain.models import AnalysisOptions, Chunk, Embedding, PaperMetadata
from paperlens.domain.services.chunking import ChunkingParams, chunk_pdf_pages, chunk_text
from paperlens.domain.services.retrieval import (
    DEFAULT_TASK_CONFIGS,
    TaskRetrievalConfig,
    retrieve_for_tasks,
)
from paperlens.domain.types import Result

logger = logging.getLogger(__name__)

# (stage, paper_id); stages: extraction, embedding, retrieval, generation, complete
ProgressCallback = Callable[[str, str], None]


@dataclass
class AnalyzePaper:
    """
    Application use case: paper -> chunks -> embeddings -> centroid ->
    per-task retrieval -> generation -> persisted analysis.

    Components raise typed DomainErrors; this use case decides on the
    abstract fallback and returns every other failure as Result.failure.
    Only fully validated analyses reach the store.
    """

    store: RecordStorePort
    embedding: EmbeddingPort
    generator: GenerationPort
    clock: ClockPort
    extractor: PageExtractorPort | None = None
    chunking: ChunkingParams = field(default_factory=ChunkingParams)
    task_configs: Mapping[str, TaskRetrievalConfig] = field(
        default_factory=lambda: dict(DEFAULT_TASK_CONFIGS)
    )
    on_progress: ProgressCallback | None = None

    async def execute(self, req: AnalyzePaperRequest) -> Result[StoredAnalysis, DomainError]:
        try:
            paper = await self.store.get_paper(req.paper_id)
            if paper is None:
                raise PaperNotFoundError(f"Paper not found: {req.paper_id}")
            chunks = await self._ensure_chunks(paper)
            stored = await self._analyze(paper, chunks, req.options)
        except DomainError as ex:
            logger.warning("Analysis of %s failed: %s: %s", req.paper_id, type(ex).__name__, ex)
            return Result.failure(ex)
        return Result.success(stored)

    def _progress(self, stage: str, paper_id: str) -> None:
        logger.info("Analysis stage %s for %s", stage, paper_id)
        if self.on_progress is not None:
            self.on_progress(stage, paper_id)

    # ---------- chunks ----------

    async def _ensure_chunks(self, paper: PaperMetadata) -> list[Chunk]:
        chunks = await self.store.get_chunks(paper.paper_id)
        if chunks:
            return chunks

        self._progress("extraction", paper.paper_id)
        if paper.pdf_url and self.extractor is not None:
            try:
                chunks = await self._chunks_from_pdf(paper, self.extractor, paper.pdf_url)
            except ExtractionError as ex:
                logger.warning("PDF extraction failed for %s: %s", paper.paper_id, ex)
                if not paper.abstract:
                    raise NoContentError(
                        f"Failed to extract PDF: {ex}. No abstract available as fallback."
                    ) from ex
                logger.info("Using abstract-only content for %s", paper.paper_id)
                chunks = self._chunks_from_abstract(paper)
        elif paper.abstract:
            chunks = self._chunks_from_abstract(paper)
        else:
            raise NoContentError(
                "No content available to analyze. Please ensure PDF URL or abstract is available."
            )

        await self.store.save_chunks(chunks)
        return chunks

    async def _chunks_from_pdf(
        self, paper: PaperMetadata, extractor: PageExtractorPort, pdf_url: str
    ) -> list[Chunk]:
        result = await extractor.extract(pdf_url)
        if not result.pages:
            raise ExtractionError("PDF extraction returned no pages")
        chunks = chunk_pdf_pages(result.pages, paper.paper_id, self.chunking)
        if not chunks:
            raise ExtractionError("No chunks created from PDF")
        return chunks

    def _chunks_from_abstract(self, paper: PaperMetadata) -> list[Chunk]:
        chunks = chunk_text(paper.abstract or "", self.chunking, paper_id=paper.paper_id)
        if not chunks:
            raise NoContentError("Failed to create chunks from abstract.")
        return chunks

    # ---------- embeddings + generation ----------

    async def _ensure_embeddings(
        self, paper: PaperMetadata, chunks: Sequence[Chunk]
    ) -> list[Embedding]:
        model = self.embedding.model
        existing = [e for e in await self.store.get_embeddings(paper.paper_id) if e.model == model]
        if existing and {c.chunk_id for c in chunks} <= {e.chunk_id for e in existing}:
            return existing

        vectors = await self.embedding.embed_batch([c.text for c in chunks])
        if len(vectors) != len(chunks):
            raise EmbeddingError(f"expected {len(chunks)} vectors, got {len(vectors)}")
        created_at = self.clock.now_ms()
        embeddings = [
            Embedding(
                paper_id=paper.paper_id,
                chunk_id=c.chunk_id,
                vector=tuple(float(x) for x in vec),
                model=model,
                created_at=created_at,
            )
            for c, vec in zip(chunks, vectors, strict=True)
        ]
        await self.store.save_embeddings(embeddings)
        return embeddings

    async def _analyze(
        self, paper: PaperMetadata, chunks: Sequence[Chunk], options: AnalysisOptions
    ) -> StoredAnalysis:
        if not chunks:
            raise NoContentError("No content chunks available for analysis.")

        self._progress("embedding", paper.paper_id)
        embeddings = await self._ensure_embeddings(paper, chunks)
        centroid = await compute_centroid(chunks, self.embedding)

        # One global query (the centroid) for every task.
        self._progress("retrieval", paper.paper_id)
        by_chunk_id = {e.chunk_id: e for e in embeddings}
        retrieved = retrieve_for_tasks(centroid, chunks, by_chunk_id, self.task_configs)

        self._progress("generation", paper.paper_id)
        analysis = await self.generator.generate_analysis(paper, retrieved, options)
        analysis = _ensure_paper_id(analysis, paper.paper_id)

        stored = StoredAnalysis(
            paper_id=paper.paper_id,
            analysis_version=analysis.analysis_version,
            analysis=analysis,
            created_at=self.clock.now_ms(),
        )
        await self.store.save_analysis(stored)
        await self.store.save_paper(replace(paper, analyzed=True))
        self._progress("complete", paper.paper_id)
        return stored


def _ensure_paper_id(analysis: Analysis, paper_id: str) -> Analysis:
    """Models sometimes invent their own paper id; the stored one always wins."""
    if analysis.paper.id == paper_id:
        return analysis
    logger.warning("Model returned paper id %r, overwriting with %r", analysis.paper.id, paper_id)
    paper_ref = analysis.paper.model_copy(update={"id": paper_id})
    return analysis.model_copy(update={"paper": paper_ref})
