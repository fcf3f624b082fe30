"""Application settings with environment-driven configuration.

Why: Single place that reads the environment; everything else receives
settings via dependency injection.
"""

import os
from dataclasses import dataclass, field


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    """

    # ===== Embedding Configuration =====
    embedding_provider: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_PROVIDER", "openai").lower()
    )
    # Supported: "openai" | "ollama" | "sentence-transformers"

    embedding_model: str = field(default_factory=lambda: os.getenv("EMBEDDING_MODEL", ""))
    # Empty = provider default (text-embedding-3-small / nomic-embed-text / all-MiniLM-L6-v2)

    embedding_api_key: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_API_KEY") or os.getenv("OPENAI_API_KEY", "")
    )
    embedding_base_url: str = field(default_factory=lambda: os.getenv("EMBEDDING_BASE_URL", ""))
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps" (sentence-transformers only)

    # ===== LLM Configuration =====
    llm_provider: str = field(default_factory=lambda: os.getenv("LLM_PROVIDER", "openai").lower())
    # Supported: "openai" | "ollama" | "anthropic"

    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", ""))
    llm_api_key: str = field(
        default_factory=lambda: os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY", "")
    )
    llm_base_url: str = field(default_factory=lambda: os.getenv("LLM_BASE_URL", ""))
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.7"))
    )

    # ===== Chunking Configuration =====
    chunk_size: int = field(default_factory=lambda: int(os.getenv("CHUNK_SIZE", "1000")))
    chunk_overlap: int = field(default_factory=lambda: int(os.getenv("CHUNK_OVERLAP", "150")))

    # ===== Analysis Schema =====
    analysis_min_items: int = field(
        default_factory=lambda: int(os.getenv("ANALYSIS_MIN_ITEMS", "2"))
    )
    analysis_max_items: int = field(
        default_factory=lambda: int(os.getenv("ANALYSIS_MAX_ITEMS", "3"))
    )

    # ===== Logging =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
