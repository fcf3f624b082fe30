from __future__ import annotations

import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..errors import ValidationError
from ..models import Chunk, PageText

TokenEstimator = Callable[[str], int]

# A word together with the index of the source line it came from.
_Word = tuple[str, int]


def default_token_estimate(text: str) -> int:
    """Rough token estimation: ~4 UTF-8 bytes per token."""
    return math.ceil(len(text.encode("utf-8")) / 4)


@dataclass(frozen=True)
class ChunkingParams:
    chunk_size: int = 1000  # token units
    overlap: int = 150  # token units; half of it seeds the next chunk
    token_estimate: TokenEstimator = default_token_estimate

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValidationError("chunk_size must be > 0")
        if self.overlap < 0:
            raise ValidationError("overlap must be >= 0")
        if self.overlap // 2 >= self.chunk_size:
            raise ValidationError("overlap // 2 must be < chunk_size")


# ---------- Section heuristics ----------

_SECTION_KEYWORDS = (
    r"abstract|introduction|related work|background|methodology|methods?|approach"
    r"|experimental setup|experiments?|evaluation|results?|ablations?|discussion"
    r"|limitations?|future work|conclusions?|references|bibliography|appendix|appendices"
    r"|acknowledge?ments?"
)

_SECTION_PATTERNS = [
    # Known keywords, optionally numbered ("3 Methods", "IV. EXPERIMENTS")
    re.compile(rf"^(?:[0-9IVX]+(?:\.\d+)*\.?\s+)?({_SECTION_KEYWORDS})\b", re.IGNORECASE),
    # Numbered headings ("1. Introduction", "3.2 Training Details")
    re.compile(r"^\d+(?:\.\d+)*\.?\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)"),
    # ALL CAPS short lines
    re.compile(r"^([A-Z][A-Z0-9&\- ]{2,40})$"),
    # Colon-terminated capitalized phrases ("Training details:")
    re.compile(r"^([A-Z][A-Za-z]+(?: [A-Za-z]+){0,4}):"),
]

_CANONICAL_SECTIONS = [
    (re.compile(r"^(methodology|methods?|approach|proposed method)\b"), "methods"),
    (re.compile(r"^(experimental setup|experiments?|experimental)\b"), "experiments"),
    (re.compile(r"^results?\b"), "results"),
    (re.compile(r"^ablations?\b"), "ablations"),
    (re.compile(r"^(conclusions?|concluding remarks)\b"), "conclusion"),
    (re.compile(r"^acknowledge?ments?\b"), "acknowledgments"),
    (re.compile(r"^(references|bibliography)\b"), "references"),
    (re.compile(r"^(appendix|appendices|supplementary)\b"), "appendix"),
    (re.compile(r"^(related work|prior work)\b"), "related work"),
    (re.compile(r"^limitations?\b"), "limitations"),
]

_LEADING_NUMBER = re.compile(r"^(?:\d+(?:\.\d+)*|[ivx]+)\.?\s+")


def _normalize_section(label: str) -> str:
    cleaned = " ".join(label.lower().split())
    cleaned = _LEADING_NUMBER.sub("", cleaned)
    for pattern, canonical in _CANONICAL_SECTIONS:
        if pattern.match(cleaned):
            return canonical
    return cleaned[:50]


def detect_section(text: str, max_lines: int = 10) -> str | None:
    """Best-effort section label from the first lines of a chunk.

    Lines are checked in order and, per line, patterns in order; the first
    match wins. Returns None when nothing looks like a heading.
    """
    for line in text.splitlines()[:max_lines]:
        stripped = line.strip()
        if not stripped:
            continue
        for pattern in _SECTION_PATTERNS:
            m = pattern.match(stripped)
            if m:
                return _normalize_section(m.group(1))
    return None


# ---------- Chunk packer ----------


def _tokenize(text: str) -> list[_Word]:
    return [
        (word, line_no) for line_no, line in enumerate(text.splitlines()) for word in line.split()
    ]


def _join(words: Sequence[_Word]) -> str:
    parts: list[str] = []
    prev_line: int | None = None
    for word, line_no in words:
        if prev_line is not None:
            parts.append("\n" if line_no != prev_line else " ")
        parts.append(word)
        prev_line = line_no
    return "".join(parts)


def _overlap_seed(
    sealed: Sequence[_Word], budget: int, estimate: TokenEstimator
) -> tuple[list[_Word], int]:
    """Walk backward through the last sealed chunk, prepending words until budget is reached.

    Earlier chunks are never read: the last one already starts with its own
    copy of their tail.
    """
    seed: list[_Word] = []
    used = 0
    for word in reversed(sealed):
        if used >= budget:
            break
        seed.insert(0, word)
        used += estimate(word[0])
    return seed, used


def _make_chunk(
    words: Sequence[_Word],
    token_count: int,
    index: int,
    paper_id: str,
    page_start: int | None,
    page_end: int | None,
) -> Chunk:
    text = _join(words)
    return Chunk(
        paper_id=paper_id,
        chunk_id=f"{paper_id or 'paper'}-chunk-{index}",
        text=text,
        section=detect_section(text),
        page_start=page_start,
        page_end=page_end,
        token_count=token_count,
    )


def chunk_text(
    text: str,
    params: ChunkingParams | None = None,
    *,
    paper_id: str = "",
    page_start: int | None = None,
    page_end: int | None = None,
    start_index: int = 0,
) -> list[Chunk]:
    """Split text into token-bounded, overlapping chunks.

    Words are accumulated until the next one would push the chunk past
    ``chunk_size``; the sealed chunk's tail (``overlap // 2`` token units)
    then seeds the next chunk. Chunk ids are numbered from ``start_index``.
    """
    p = params or ChunkingParams()
    estimate = p.token_estimate
    overlap_budget = p.overlap // 2

    chunks: list[Chunk] = []
    current: list[_Word] = []
    current_tokens = 0

    for word in _tokenize(text):
        cost = estimate(word[0])
        if current and current_tokens + cost > p.chunk_size:
            chunks.append(
                _make_chunk(
                    current,
                    current_tokens,
                    start_index + len(chunks),
                    paper_id,
                    page_start,
                    page_end,
                )
            )
            current, current_tokens = _overlap_seed(current, overlap_budget, estimate)
        current.append(word)
        current_tokens += cost

    if current:
        chunks.append(
            _make_chunk(
                current, current_tokens, start_index + len(chunks), paper_id, page_start, page_end
            )
        )
    return chunks


def chunk_pdf_pages(
    pages: Sequence[PageText],
    paper_id: str,
    params: ChunkingParams | None = None,
) -> list[Chunk]:
    """Chunk each page separately, stamping its page number, ids running across pages."""
    result: list[Chunk] = []
    for page in pages:
        result.extend(
            chunk_text(
                page.text,
                params,
                paper_id=paper_id,
                page_start=page.page_number,
                page_end=page.page_number,
                start_index=len(result),
            )
        )
    return result
