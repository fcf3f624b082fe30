# paperlens/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from .types import Score, Vector

Tone = Literal["critical", "balanced", "experimental"]
PrivacyMode = Literal["abstract-only", "snippets", "full-text"]
PaperSource = Literal["arxiv", "openreview", "pdf", "manual"]


@dataclass(frozen=True)
class Chunk:
    """
    Immutable span of a paper's text, the unit of retrieval and citation.

    - chunk_id:    "{paper_id}-chunk-{index}", unique within a paper
    - section:     heuristic section label, None when nothing was detected
    - page_start/page_end: 1-based page numbers when chunked per page
    - token_count: estimator sum over the chunk's words (overlap included)
    """

    paper_id: str
    chunk_id: str
    text: str
    section: str | None = None
    page_start: int | None = None
    page_end: int | None = None
    token_count: int | None = None


@dataclass(frozen=True)
class Embedding:
    """One vector per (paper_id, chunk_id) and embedding model."""

    paper_id: str
    chunk_id: str
    vector: Vector
    model: str
    created_at: int  # epoch milliseconds


@dataclass(frozen=True)
class RetrievalResult:
    """Ephemeral ranking result; score is cosine similarity in [-1, 1]."""

    chunk: Chunk
    embedding: Embedding
    score: Score


@dataclass(frozen=True)
class PageText:
    page_number: int
    text: str


@dataclass(frozen=True)
class ExtractionResult:
    pages: tuple[PageText, ...]
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class PaperMetadata:
    paper_id: str
    title: str
    authors: tuple[str, ...] = ()
    abstract: str | None = None
    source: PaperSource = "pdf"
    pdf_url: str | None = None
    source_url: str | None = None
    analyzed: bool = False


@dataclass(frozen=True)
class AnalysisOptions:
    """Prompt-construction settings only; retrieval ignores them."""

    tone: Tone = "balanced"
    privacy_mode: PrivacyMode = "snippets"
