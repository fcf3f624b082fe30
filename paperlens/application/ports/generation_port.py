from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from paperlens.domain.models import AnalysisOptions, Chunk, PaperMetadata

if TYPE_CHECKING:  # pragma: no cover
    from paperlens.application.schemas import Analysis


@runtime_checkable
class GenerationPort(Protocol):
    async def generate_analysis(
        self,
        paper: PaperMetadata,
        retrieved_chunks_by_task: Mapping[str, Sequence[Chunk]],
        options: AnalysisOptions | None = None,
    ) -> Analysis: ...
