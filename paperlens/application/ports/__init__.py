"""Application ports package."""

from paperlens.application.ports.clock_port import ClockPort
from paperlens.application.ports.embedding_port import EmbeddingPort, ProviderConfig, ProviderKind
from paperlens.application.ports.generation_port import GenerationPort
from paperlens.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from paperlens.application.ports.page_extractor_port import PageExtractorPort
from paperlens.application.ports.record_store_port import RecordStorePort

__all__ = [
    "ClockPort",
    "EmbeddingPort",
    "ProviderConfig",
    "ProviderKind",
    "GenerationPort",
    "ChatMessage",
    "LLMPort",
    "LLMResponse",
    "PageExtractorPort",
    "RecordStorePort",
]
