from __future__ import annotations

from functools import lru_cache
from typing import Any

from paperlens.application.generation.analysis_generator import AnalysisGenerator
from paperlens.application.ports.clock_port import ClockPort
from paperlens.application.ports.embedding_port import EmbeddingPort, ProviderConfig
from paperlens.application.ports.generation_port import GenerationPort
from paperlens.application.ports.llm_port import LLMPort
from paperlens.application.ports.page_extractor_port import PageExtractorPort
from paperlens.application.ports.record_store_port import RecordStorePort
from paperlens.application.schemas import CardinalityBounds
from paperlens.application.use_cases.analyze_paper import AnalyzePaper, ProgressCallback
from paperlens.config.settings import AppSettings
from paperlens.domain.errors import UnsupportedProviderError
from paperlens.domain.services.chunking import ChunkingParams
from paperlens.infrastructure.embeddings.ollama_embedding_adapter import OllamaEmbeddingAdapter
from paperlens.infrastructure.embeddings.openai_embedding_adapter import OpenAIEmbeddingAdapter
from paperlens.infrastructure.embeddings.sentence_transformers_adapter import (
    SentenceTransformersEmbeddingAdapter,
)
from paperlens.infrastructure.llm.anthropic_chat_adapter import AnthropicChatAdapter
from paperlens.infrastructure.llm.ollama_chat_adapter import OllamaChatAdapter
from paperlens.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter
from paperlens.infrastructure.parsing.pdf_page_extractor import PdfEngine, PdfPageExtractor
from paperlens.infrastructure.storage.in_memory_record_store import InMemoryRecordStore
from paperlens.infrastructure.time.system_clock import SystemClock


def _overrides(config: ProviderConfig) -> dict[str, Any]:
    """Only pass what was configured so adapters keep their own defaults."""
    kwargs: dict[str, Any] = {}
    if config.model:
        kwargs["model"] = config.model
    if config.base_url:
        kwargs["base_url"] = config.base_url
    return kwargs


def create_embedding_provider(config: ProviderConfig, device: str = "cpu") -> EmbeddingPort:
    """Select an embedding backend by name.

    Raises:
        ConfigError: If the selected backend needs an api key and none is set
        UnsupportedProviderError: For anthropic (no embeddings API) and unknown names
    """
    provider = config.provider.lower()
    if provider == "openai":
        return OpenAIEmbeddingAdapter(api_key=config.api_key, **_overrides(config))
    if provider == "ollama":
        return OllamaEmbeddingAdapter(**_overrides(config))
    if provider == "sentence-transformers":
        kwargs = {"model": config.model} if config.model else {}
        return SentenceTransformersEmbeddingAdapter(device=device, **kwargs)
    if provider == "anthropic":
        raise UnsupportedProviderError("Anthropic embeddings not supported. Use OpenAI or Ollama.")
    raise UnsupportedProviderError(f"Unknown embedding provider: {config.provider}")


def create_chat_backend(config: ProviderConfig) -> LLMPort:
    provider = config.provider.lower()
    if provider == "openai":
        return OpenAIChatAdapter(api_key=config.api_key, **_overrides(config))
    if provider == "ollama":
        return OllamaChatAdapter(**_overrides(config))
    if provider == "anthropic":
        return AnthropicChatAdapter(api_key=config.api_key, **_overrides(config))
    raise UnsupportedProviderError(f"Unknown LLM provider: {config.provider}")


def create_generation_provider(
    config: ProviderConfig,
    clock: ClockPort,
    bounds: CardinalityBounds | None = None,
    temperature: float = 0.7,
) -> GenerationPort:
    return AnalysisGenerator(
        llm=create_chat_backend(config),
        clock=clock,
        bounds=bounds or CardinalityBounds(),
        temperature=temperature,
    )


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    return create_embedding_provider(
        ProviderConfig(
            provider=settings.embedding_provider,
            api_key=settings.embedding_api_key or None,
            model=settings.embedding_model or None,
            base_url=settings.embedding_base_url or None,
        ),
        device=settings.embedding_device,
    )


def build_bounds(settings: AppSettings) -> CardinalityBounds:
    return CardinalityBounds(
        min_items=settings.analysis_min_items, max_items=settings.analysis_max_items
    )


def build_generation(settings: AppSettings, clock: ClockPort) -> GenerationPort:
    return create_generation_provider(
        ProviderConfig(
            provider=settings.llm_provider,
            api_key=settings.llm_api_key or None,
            model=settings.llm_model or None,
            base_url=settings.llm_base_url or None,
        ),
        clock=clock,
        bounds=build_bounds(settings),
        temperature=settings.llm_temperature,
    )


def build_chunking(settings: AppSettings) -> ChunkingParams:
    return ChunkingParams(chunk_size=settings.chunk_size, overlap=settings.chunk_overlap)


def build_clock() -> ClockPort:
    return SystemClock()


@lru_cache(maxsize=1)
def build_pdf_engine() -> PdfEngine:
    """One initialized pypdf engine per process."""
    return PdfEngine().init()


def build_page_extractor() -> PageExtractorPort:
    return PdfPageExtractor(engine=build_pdf_engine())


def build_record_store() -> RecordStorePort:
    return InMemoryRecordStore()


def build_analyze_use_case(
    settings: AppSettings | None = None,
    store: RecordStorePort | None = None,
    on_progress: ProgressCallback | None = None,
) -> AnalyzePaper:
    settings = settings or AppSettings()
    clock = build_clock()
    return AnalyzePaper(
        store=store or build_record_store(),
        embedding=build_embedding(settings),
        generator=build_generation(settings, clock),
        clock=clock,
        extractor=build_page_extractor(),
        chunking=build_chunking(settings),
        on_progress=on_progress,
    )
