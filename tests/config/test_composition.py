"""Tests for the composition root: provider selection and use-case wiring."""

import sys

import pytest

from paperlens.application.generation.analysis_generator import AnalysisGenerator
from paperlens.application.ports.embedding_port import EmbeddingPort, ProviderConfig
from paperlens.application.ports.llm_port import LLMPort
from paperlens.application.schemas import CardinalityBounds
from paperlens.application.use_cases.analyze_paper import AnalyzePaper
from paperlens.config import composition
from paperlens.config.composition import (
    build_analyze_use_case,
    build_bounds,
    build_chunking,
    build_embedding,
    build_generation,
    create_chat_backend,
    create_embedding_provider,
    create_generation_provider,
)
from paperlens.config.settings import AppSettings
from paperlens.domain.errors import ConfigError, UnsupportedProviderError
from paperlens.infrastructure.embeddings.ollama_embedding_adapter import OllamaEmbeddingAdapter
from paperlens.infrastructure.embeddings.openai_embedding_adapter import OpenAIEmbeddingAdapter
from paperlens.infrastructure.embeddings.sentence_transformers_adapter import (
    SentenceTransformersEmbeddingAdapter,
)
from paperlens.infrastructure.llm.anthropic_chat_adapter import AnthropicChatAdapter
from paperlens.infrastructure.llm.ollama_chat_adapter import OllamaChatAdapter
from paperlens.infrastructure.llm.openai_chat_adapter import OpenAIChatAdapter
from paperlens.infrastructure.parsing.pdf_page_extractor import PdfPageExtractor
from paperlens.infrastructure.storage.in_memory_record_store import InMemoryRecordStore


class _FakePdfReader:
    def __init__(self, stream) -> None:
        self.pages = []
        self.metadata = None


@pytest.fixture
def fake_pypdf(monkeypatch):
    module = type(sys)("pypdf")
    module.PdfReader = _FakePdfReader
    monkeypatch.setitem(sys.modules, "pypdf", module)
    composition.build_pdf_engine.cache_clear()
    yield module
    composition.build_pdf_engine.cache_clear()


def _settings(**overrides) -> AppSettings:
    base = {
        "embedding_provider": "openai",
        "embedding_model": "",
        "embedding_api_key": "sk-test",
        "embedding_base_url": "",
        "embedding_device": "cpu",
        "llm_provider": "openai",
        "llm_model": "",
        "llm_api_key": "sk-test",
        "llm_base_url": "",
        "llm_temperature": 0.7,
        "chunk_size": 1000,
        "chunk_overlap": 150,
        "analysis_min_items": 2,
        "analysis_max_items": 3,
        "log_level": "INFO",
    }
    base.update(overrides)
    return AppSettings(**base)


class TestEmbeddingSelection:
    def test_openai(self) -> None:
        adapter = create_embedding_provider(ProviderConfig(provider="openai", api_key="sk-test"))
        assert isinstance(adapter, OpenAIEmbeddingAdapter)
        assert adapter.model == "text-embedding-3-small"

    def test_openai_without_key_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            create_embedding_provider(ProviderConfig(provider="openai"))

    def test_ollama_with_overrides(self) -> None:
        adapter = create_embedding_provider(
            ProviderConfig(
                provider="Ollama", model="mxbai-embed-large", base_url="http://gpu:11434"
            )
        )
        assert isinstance(adapter, OllamaEmbeddingAdapter)
        assert adapter.model == "mxbai-embed-large"
        assert adapter.base_url == "http://gpu:11434"

    def test_sentence_transformers_device(self) -> None:
        adapter = create_embedding_provider(
            ProviderConfig(provider="sentence-transformers"), device="cuda"
        )
        assert isinstance(adapter, SentenceTransformersEmbeddingAdapter)
        assert adapter.device == "cuda"

    def test_anthropic_embeddings_unsupported(self) -> None:
        with pytest.raises(UnsupportedProviderError) as exc:
            create_embedding_provider(ProviderConfig(provider="anthropic", api_key="ak"))
        assert "Anthropic embeddings not supported" in str(exc.value)

    def test_unknown_provider(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            create_embedding_provider(ProviderConfig(provider="cohere"))


class TestChatSelection:
    @pytest.mark.parametrize(
        "provider,api_key,expected",
        [
            ("openai", "sk-test", OpenAIChatAdapter),
            ("ollama", None, OllamaChatAdapter),
            ("anthropic", "ak-test", AnthropicChatAdapter),
        ],
    )
    def test_backend_types(self, provider, api_key, expected) -> None:
        backend = create_chat_backend(ProviderConfig(provider=provider, api_key=api_key))
        assert isinstance(backend, expected)
        assert isinstance(backend, LLMPort)
        assert backend.provider == provider

    def test_anthropic_without_key_is_config_error(self) -> None:
        with pytest.raises(ConfigError):
            create_chat_backend(ProviderConfig(provider="anthropic"))

    def test_unknown_provider(self) -> None:
        with pytest.raises(UnsupportedProviderError):
            create_chat_backend(ProviderConfig(provider="mistral"))

    def test_generation_provider_wraps_backend(self, clock) -> None:
        gen = create_generation_provider(
            ProviderConfig(provider="ollama", model="llama3.1"),
            clock=clock,
            bounds=CardinalityBounds(1, 4),
            temperature=0.2,
        )
        assert isinstance(gen, AnalysisGenerator)
        assert isinstance(gen.llm, OllamaChatAdapter)
        assert gen.bounds == CardinalityBounds(1, 4)
        assert gen.temperature == 0.2


class TestSettingsBuilders:
    def test_build_embedding_passes_settings(self) -> None:
        adapter = build_embedding(
            _settings(embedding_provider="ollama", embedding_model="nomic-embed-text")
        )
        assert isinstance(adapter, EmbeddingPort)
        assert isinstance(adapter, OllamaEmbeddingAdapter)

    def test_build_generation_uses_llm_settings(self, clock) -> None:
        gen = build_generation(
            _settings(llm_provider="anthropic", llm_api_key="ak", llm_temperature=0.1), clock
        )
        assert isinstance(gen.llm, AnthropicChatAdapter)
        assert gen.temperature == 0.1

    def test_build_bounds_and_chunking(self) -> None:
        settings = _settings(
            analysis_min_items=1, analysis_max_items=5, chunk_size=500, chunk_overlap=50
        )
        assert build_bounds(settings) == CardinalityBounds(min_items=1, max_items=5)
        params = build_chunking(settings)
        assert (params.chunk_size, params.overlap) == (500, 50)

    def test_build_analyze_use_case_wires_dependencies(self, fake_pypdf) -> None:
        store = InMemoryRecordStore()
        use_case = build_analyze_use_case(_settings(), store=store)

        assert isinstance(use_case, AnalyzePaper)
        assert use_case.store is store
        assert isinstance(use_case.embedding, OpenAIEmbeddingAdapter)
        assert isinstance(use_case.generator, AnalysisGenerator)
        assert isinstance(use_case.extractor, PdfPageExtractor)

    def test_missing_llm_key_fails_at_wiring(self, fake_pypdf) -> None:
        with pytest.raises(ConfigError):
            build_analyze_use_case(_settings(llm_api_key=""))


class TestAppSettings:
    def test_reads_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("EMBEDDING_PROVIDER", "Ollama")
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        monkeypatch.setenv("LLM_TEMPERATURE", "0.25")
        monkeypatch.setenv("CHUNK_SIZE", "800")
        monkeypatch.setenv("ANALYSIS_MAX_ITEMS", "4")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = AppSettings()

        assert settings.embedding_provider == "ollama"
        assert settings.llm_provider == "anthropic"
        assert settings.llm_temperature == 0.25
        assert settings.chunk_size == 800
        assert settings.analysis_max_items == 4
        assert settings.log_level == "DEBUG"

    def test_api_keys_fall_back_to_openai_key(self, monkeypatch) -> None:
        monkeypatch.delenv("EMBEDDING_API_KEY", raising=False)
        monkeypatch.delenv("LLM_API_KEY", raising=False)
        monkeypatch.setenv("OPENAI_API_KEY", "sk-shared")

        settings = AppSettings()

        assert settings.embedding_api_key == "sk-shared"
        assert settings.llm_api_key == "sk-shared"

    def test_defaults(self, monkeypatch) -> None:
        for name in ("EMBEDDING_PROVIDER", "LLM_PROVIDER", "CHUNK_SIZE", "CHUNK_OVERLAP"):
            monkeypatch.delenv(name, raising=False)

        settings = AppSettings()

        assert settings.embedding_provider == "openai"
        assert settings.llm_provider == "openai"
        assert (settings.chunk_size, settings.chunk_overlap) == (1000, 150)
