# paperlens/domain/services/retrieval.py
# Pure domain services: no I/O, deterministic, no external libraries.
from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from paperlens.domain.models import Chunk, Embedding, RetrievalResult
from paperlens.domain.similarity import cosine_similarity


@dataclass(frozen=True)
class TaskRetrievalConfig:
    """How many chunks a critique task gets, and from which sections."""

    k: int
    sections: tuple[str, ...] = ()
    min_score: float | None = None


DEFAULT_TASK_CONFIGS: Mapping[str, TaskRetrievalConfig] = {
    "missingAblations": TaskRetrievalConfig(
        k=12, sections=("experiments", "ablations", "results", "appendix")
    ),
    "potentialIssues": TaskRetrievalConfig(
        k=14, sections=("evaluation", "data", "metrics", "limitations")
    ),
    "questions": TaskRetrievalConfig(k=10, sections=("limitations", "discussion", "future work")),
    "keyClaims": TaskRetrievalConfig(k=8, sections=("abstract", "introduction", "conclusion")),
}


def retrieve_top_k(
    query: Sequence[float],
    chunks: Sequence[Chunk],
    embeddings_by_chunk_id: Mapping[str, Embedding],
    k: int,
) -> list[RetrievalResult]:
    """
    Rank chunks by cosine similarity to the query.

    - Chunks without an embedding are skipped.
    - Sort is stable: ties keep the input chunk order.
    - Returns at most k results; k <= 0 yields [].
    """
    if k <= 0:
        return []
    results: list[RetrievalResult] = []
    for chunk in chunks:
        embedding = embeddings_by_chunk_id.get(chunk.chunk_id)
        if embedding is None:
            continue
        score = cosine_similarity(query, embedding.vector)
        results.append(RetrievalResult(chunk=chunk, embedding=embedding, score=score))
    results.sort(key=lambda r: r.score, reverse=True)
    return results[:k]


def _matches_sections(chunk: Chunk, sections: Sequence[str]) -> bool:
    if not chunk.section:
        return False
    label = chunk.section.lower()
    return any(s.lower() in label for s in sections)


def retrieve_for_task(
    query: Sequence[float],
    chunks: Sequence[Chunk],
    embeddings_by_chunk_id: Mapping[str, Embedding],
    k: int,
    sections: Sequence[str] | None = None,
    min_score: float | None = None,
) -> list[RetrievalResult]:
    """
    Task-specific retrieval: section filter -> top-k -> min_score trim.

    NOTE:
    - Chunks without a section never pass a non-empty section filter.
    - min_score only trims the already selected top-k; it never pulls in
      lower-ranked candidates, so results can come back under-filled.
    """
    candidates: Sequence[Chunk] = chunks
    if sections:
        candidates = [c for c in chunks if _matches_sections(c, sections)]

    results = retrieve_top_k(query, candidates, embeddings_by_chunk_id, k)

    if min_score is not None:
        return [r for r in results if r.score >= min_score]
    return results


def retrieve_for_tasks(
    query: Sequence[float],
    chunks: Sequence[Chunk],
    embeddings_by_chunk_id: Mapping[str, Embedding],
    task_configs: Mapping[str, TaskRetrievalConfig] = DEFAULT_TASK_CONFIGS,
) -> dict[str, list[Chunk]]:
    """Run retrieve_for_task once per configured task with the same query vector."""
    retrieved: dict[str, list[Chunk]] = {}
    for task, cfg in task_configs.items():
        results = retrieve_for_task(
            query,
            chunks,
            embeddings_by_chunk_id,
            cfg.k,
            sections=cfg.sections,
            min_score=cfg.min_score,
        )
        retrieved[task] = [r.chunk for r in results]
    return retrieved
