"""Tests for AnalysisGenerator over a fake chat backend."""

import asyncio
import json
from collections.abc import Sequence

import pytest

from paperlens.application.generation.analysis_generator import AnalysisGenerator
from paperlens.application.generation.prompt import SYSTEM_PROMPT
from paperlens.application.ports.generation_port import GenerationPort
from paperlens.application.ports.llm_port import ChatMessage, LLMResponse
from paperlens.application.schemas import CardinalityBounds
from paperlens.domain.errors import EmptyResponseError, InvalidResponseError, SchemaValidationError
from paperlens.domain.models import AnalysisOptions, Chunk, PaperMetadata

PAPER = PaperMetadata(paper_id="arxiv:2401.12345", title="Sparse Mixtures at Scale")
RETRIEVED = {
    "keyClaims": [Chunk(paper_id=PAPER.paper_id, chunk_id="arxiv:2401.12345-chunk-0", text="t")]
}


class FakeLLM:
    """Records chat calls and replies with canned text."""

    provider = "fake"
    model = "fake-model"

    def __init__(self, text: str) -> None:
        self.text = text
        self.calls: list[dict] = []

    async def chat(
        self,
        messages: Sequence[ChatMessage],
        temperature: float = 0.7,
        max_tokens: int = 4096,
        json_mode: bool = False,
    ) -> LLMResponse:
        self.calls.append(
            {
                "messages": list(messages),
                "temperature": temperature,
                "max_tokens": max_tokens,
                "json_mode": json_mode,
            }
        )
        return LLMResponse(text=self.text)


def test_generator_is_generation_port(clock):
    assert isinstance(AnalysisGenerator(llm=FakeLLM("{}"), clock=clock), GenerationPort)


def test_generates_validated_analysis(clock, analysis_payload):
    llm = FakeLLM(json.dumps(analysis_payload))
    gen = AnalysisGenerator(llm=llm, clock=clock, temperature=0.2)

    analysis = asyncio.run(gen.generate_analysis(PAPER, RETRIEVED, AnalysisOptions()))

    assert analysis.paper.id == PAPER.paper_id
    assert len(llm.calls) == 1
    call = llm.calls[0]
    assert call["json_mode"] is True
    assert call["temperature"] == 0.2
    assert [m.role for m in call["messages"]] == ["system", "user"]
    assert call["messages"][0].content == SYSTEM_PROMPT


def test_prompt_carries_backend_identity_and_clock(clock, analysis_payload):
    llm = FakeLLM(json.dumps(analysis_payload))
    gen = AnalysisGenerator(llm=llm, clock=clock)

    asyncio.run(gen.generate_analysis(PAPER, RETRIEVED))

    prompt = llm.calls[0]["messages"][1].content
    assert '"provider": "fake"' in prompt
    assert '"model": "fake-model"' in prompt
    assert '"timestamp": 1704164645000' in prompt
    assert "[arxiv:2401.12345-chunk-0]" in prompt


def test_blank_response_raises_empty_response(clock):
    gen = AnalysisGenerator(llm=FakeLLM("  "), clock=clock)

    with pytest.raises(EmptyResponseError):
        asyncio.run(gen.generate_analysis(PAPER, RETRIEVED))


def test_non_json_response_raises(clock):
    gen = AnalysisGenerator(llm=FakeLLM("Sorry, I cannot help."), clock=clock)

    with pytest.raises(InvalidResponseError):
        asyncio.run(gen.generate_analysis(PAPER, RETRIEVED))


def test_bounds_are_enforced(clock, analysis_payload):
    gen = AnalysisGenerator(
        llm=FakeLLM(json.dumps(analysis_payload)),
        clock=clock,
        bounds=CardinalityBounds(min_items=3, max_items=3),
    )

    with pytest.raises(SchemaValidationError):
        asyncio.run(gen.generate_analysis(PAPER, RETRIEVED))
