from __future__ import annotations

from dataclasses import dataclass

from paperlens.application.ports.record_store_port import RecordStorePort
from paperlens.domain.errors import ExtractionError
from paperlens.domain.models import Chunk, ExtractionResult, PaperMetadata
from paperlens.domain.paper_ids import paper_id_for_url
from paperlens.domain.services.chunking import ChunkingParams, chunk_pdf_pages


@dataclass
class RegisterPdf:
    """Register a raw PDF (no hosting-site metadata) from already extracted pages.

    The paper id is the ``urlhash:`` of the PDF url; an existing record for
    the same url is kept.
    """

    store: RecordStorePort
    chunking: ChunkingParams | None = None

    async def execute(
        self, url: str, extraction: ExtractionResult
    ) -> tuple[PaperMetadata, list[Chunk]]:
        if not extraction.pages:
            raise ExtractionError(f"No pages extracted from {url}")

        paper_id = paper_id_for_url(url)
        paper = await self.store.get_paper(paper_id)
        if paper is None:
            title = str(extraction.metadata.get("title") or "").strip() or "PDF Document"
            author = str(extraction.metadata.get("author") or "").strip()
            paper = PaperMetadata(
                paper_id=paper_id,
                title=title,
                authors=(author,) if author else (),
                source="pdf",
                pdf_url=url,
                source_url=url,
            )
            await self.store.save_paper(paper)

        chunks = chunk_pdf_pages(extraction.pages, paper_id, self.chunking)
        await self.store.save_chunks(chunks)
        return paper, chunks
