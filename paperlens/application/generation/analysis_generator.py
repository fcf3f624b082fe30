from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from paperlens.application.generation.prompt import SYSTEM_PROMPT, build_analysis_prompt
from paperlens.application.generation.response import parse_analysis_response
from paperlens.application.ports.clock_port import ClockPort
from paperlens.application.ports.generation_port import GenerationPort
from paperlens.application.ports.llm_port import ChatMessage, LLMPort
from paperlens.application.schemas import Analysis, CardinalityBounds
from paperlens.domain.errors import EmptyResponseError
from paperlens.domain.models import AnalysisOptions, Chunk, PaperMetadata

logger = logging.getLogger(__name__)


@dataclass
class AnalysisGenerator(GenerationPort):
    """Generation provider over any chat backend.

    Builds the prompt, asks the backend for a JSON object and validates it.
    Errors are not retried here; retry policy belongs to the caller.
    """

    llm: LLMPort
    clock: ClockPort
    bounds: CardinalityBounds = field(default_factory=CardinalityBounds)
    temperature: float = 0.7
    max_tokens: int = 4096

    async def generate_analysis(
        self,
        paper: PaperMetadata,
        retrieved_chunks_by_task: Mapping[str, Sequence[Chunk]],
        options: AnalysisOptions | None = None,
    ) -> Analysis:
        prompt = build_analysis_prompt(
            paper,
            retrieved_chunks_by_task,
            options,
            provider=self.llm.provider,
            model=self.llm.model,
            timestamp_ms=self.clock.now_ms(),
            bounds=self.bounds,
        )
        messages = [
            ChatMessage(role="system", content=SYSTEM_PROMPT),
            ChatMessage(role="user", content=prompt),
        ]
        logger.info(
            "Requesting analysis for %s from %s/%s (%d prompt chars)",
            paper.paper_id,
            self.llm.provider,
            self.llm.model,
            len(prompt),
        )
        response = await self.llm.chat(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            json_mode=True,
        )
        if not response.text.strip():
            raise EmptyResponseError(f"Empty response from {self.llm.provider}")
        return parse_analysis_response(response.text, self.bounds)
