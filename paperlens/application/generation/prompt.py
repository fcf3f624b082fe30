"""Prompt construction for evidence-bound paper critiques."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence

from paperlens.application.schemas import CardinalityBounds
from paperlens.domain.models import AnalysisOptions, Chunk, PaperMetadata, PrivacyMode
from paperlens.domain.paper_ids import source_for_paper_id

SYSTEM_PROMPT = (
    "You are an expert research paper reviewer. Generate structured, evidence-based "
    "critiques. Always output valid JSON only, no markdown."
)

EXCERPT_CHARS = 500

_TONE_INSTRUCTIONS = {
    "critical": "Be more critical and skeptical. Focus on potential weaknesses.",
    "balanced": "Provide balanced, constructive feedback.",
    "experimental": "Focus on experimental rigor and reproducibility.",
}


def _location_prefix(chunk: Chunk) -> str:
    parts: list[str] = []
    if chunk.section:
        parts.append(f"Section: {chunk.section}")
    if chunk.page_start is not None:
        pages = str(chunk.page_start)
        if chunk.page_end is not None and chunk.page_end != chunk.page_start:
            pages += f"-{chunk.page_end}"
        parts.append(f"Page: {pages}")
    return f"[{', '.join(parts)}] " if parts else ""


def _render_chunk(chunk: Chunk, privacy_mode: PrivacyMode) -> str:
    head = f"[{chunk.chunk_id}] {_location_prefix(chunk)}"
    if privacy_mode == "abstract-only":
        return head + "(text withheld)"
    if privacy_mode == "full-text":
        return head + chunk.text
    return f"{head}{chunk.text[:EXCERPT_CHARS]}..."


def _render_chunks(
    retrieved_chunks_by_task: Mapping[str, Sequence[Chunk]], privacy_mode: PrivacyMode
) -> str:
    sections = []
    for task, chunks in retrieved_chunks_by_task.items():
        listing = "\n\n".join(_render_chunk(c, privacy_mode) for c in chunks)
        sections.append(f"## {task}\n{listing}")
    return "\n\n".join(sections)


def _schema_description(
    paper: PaperMetadata, provider: str, model: str, timestamp_ms: int, hint: str
) -> str:
    evidence = (
        '[{"chunkId": "...", "quote": "...", '
        '"location": {"section": "...", "pageStart": 1, "pageEnd": 1}}]'
    )
    return f"""{{
  "paper": {{
    "title": {json.dumps(paper.title)},
    "authors": {json.dumps(list(paper.authors))},
    "source": "{source_for_paper_id(paper.paper_id)}",
    "id": {json.dumps(paper.paper_id)}
  }},
  "summaryBullets": ["bullet 1", "bullet 2", ...], // {hint} bullets
  "keyClaims": [
    {{
      "claim": "claim text",
      "evidence": {evidence}
    }}
  ], // {hint} claims
  "questions": [
    {{
      "question": "question text",
      "evidence": {evidence}
    }}
  ], // {hint} questions
  "missingAblations": [
    {{
      "description": "description",
      "suggestedExperiment": "experiment",
      "evidence": {evidence}
    }}
  ], // {hint} items
  "potentialIssues": [
    {{
      "issue": "issue description",
      "severity": "Low|Med|High",
      "confidence": 0.0-1.0,
      "evidence": {evidence},
      "suggestedCheck": "what to check"
    }}
  ], // {hint} items
  "replicationChecklist": ["item 1", "item 2", ...], // {hint} items
  "nextWeekTests": ["test 1", "test 2", ...], // {hint} items
  "modelMeta": {{
    "provider": {json.dumps(provider)},
    "model": {json.dumps(model)},
    "timestamp": {timestamp_ms}
  }}
}}"""


def build_analysis_prompt(
    paper: PaperMetadata,
    retrieved_chunks_by_task: Mapping[str, Sequence[Chunk]],
    options: AnalysisOptions | None = None,
    *,
    provider: str = "openai",
    model: str = "",
    timestamp_ms: int = 0,
    bounds: CardinalityBounds | None = None,
) -> str:
    """Render paper metadata, retrieved evidence and the target JSON schema."""
    opts = options or AnalysisOptions()
    b = bounds or CardinalityBounds()
    hint = f"{b.min_items}-{b.max_items}"

    lines = [
        "Analyze this research paper and generate a structured critique.",
        "",
        "Paper:",
        f"Title: {paper.title}",
        f"Authors: {', '.join(paper.authors)}",
    ]
    if paper.abstract:
        lines.append(f"Abstract: {paper.abstract}")
    lines += [
        "",
        "Retrieved Evidence Chunks:",
        _render_chunks(retrieved_chunks_by_task, opts.privacy_mode),
        "",
        "Instructions:",
        _TONE_INSTRUCTIONS.get(opts.tone, _TONE_INSTRUCTIONS["balanced"]),
    ]
    if opts.privacy_mode == "abstract-only":
        lines.append(
            "Chunk text is withheld: quote only from the abstract and cite the listed chunk ids."
        )
    lines += [
        "Focus on quality over quantity. Generate only the most important and impactful "
        f"items ({hint} per section). Be selective and prioritize the most significant insights.",
        "",
        "Generate a JSON object with the following structure:",
        _schema_description(paper, provider, model, timestamp_ms, hint),
        "",
        "IMPORTANT: Every critique item (keyClaims, questions, missingAblations, "
        "potentialIssues) MUST include at least one evidence span with chunkId, quote, "
        "and location.",
    ]
    return "\n".join(lines)
