"""Domain errors (typed) for the critique pipeline.

Why: One error family for the application layer, without infra leaks.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any


class DomainError(Exception):
    """Base class for domain-specific errors."""


class ConfigError(DomainError):
    """Missing or invalid configuration (credentials, provider name)."""


class UnsupportedProviderError(ConfigError):
    """Provider selection is not supported for this capability."""


class ValidationError(DomainError):
    """Invalid input/domain state."""


class EmptyInputError(ValidationError):
    """Operation needs at least one input item."""


@dataclass(frozen=True)
class DimensionMismatchError(DomainError):
    """Vectors compared together must share dimensionality."""

    left: int
    right: int

    def __str__(self) -> str:
        return f"vector dimensions differ: {self.left} != {self.right}"


class PaperNotFoundError(DomainError):
    """No paper record for the requested id."""


class ExtractionError(DomainError):
    """Page extraction failed or produced no pages."""


class NoContentError(DomainError):
    """Neither extracted pages nor an abstract are available to analyze."""


# Infrastructure-mapped errors
class EmbeddingError(DomainError):
    """Embedding backend failed or is misconfigured."""


class LLMError(DomainError):
    """LLM backend failed or is misconfigured."""


class GenerationError(DomainError):
    """Generation backend produced unusable output."""


class EmptyResponseError(GenerationError):
    """Backend returned no content."""


class InvalidResponseError(GenerationError):
    """Backend content is not parseable as a JSON object."""


@dataclass(frozen=True)
class SchemaValidationError(GenerationError):
    """Parsed content does not satisfy the Analysis schema."""

    message: str
    errors: Sequence[dict[str, Any]] = field(default_factory=tuple)

    def __str__(self) -> str:
        return self.message
