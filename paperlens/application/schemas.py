"""Analysis schema: the structured critique a generation backend must return.

Wire format is camelCase JSON (``chunkId``, ``summaryBullets``, ...); Python
attributes are snake_case. Numeric fields are strict so that "0.5" or "3"
strings are rejected instead of coerced.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, model_validator
from pydantic.alias_generators import to_camel

Severity = Literal["Low", "Med", "High"]

ANALYSIS_VERSION = "1.0.0"

LIST_FIELDS = (
    "summary_bullets",
    "key_claims",
    "questions",
    "missing_ablations",
    "potential_issues",
    "replication_checklist",
    "next_week_tests",
)


@dataclass(frozen=True)
class CardinalityBounds:
    """Allowed item count for every Analysis list."""

    min_items: int = 2
    max_items: int = 3

    def __post_init__(self) -> None:
        if self.min_items < 0 or self.max_items < self.min_items:
            raise ValueError(f"invalid bounds {self.min_items}..{self.max_items}")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, protected_namespaces=()
    )


class PaperRef(_WireModel):
    title: str
    authors: list[str]
    source: str
    id: str


class Location(_WireModel):
    section: str | None = None
    page_start: int | None = Field(default=None, strict=True)
    page_end: int | None = Field(default=None, strict=True)


class EvidenceSpan(_WireModel):
    chunk_id: str
    quote: str
    location: Location


class KeyClaim(_WireModel):
    claim: str
    evidence: list[EvidenceSpan] = Field(min_length=1)


class Question(_WireModel):
    question: str
    evidence: list[EvidenceSpan] = Field(min_length=1)


class MissingAblation(_WireModel):
    description: str
    suggested_experiment: str
    evidence: list[EvidenceSpan] = Field(min_length=1)


class PotentialIssue(_WireModel):
    issue: str
    severity: Severity
    confidence: float = Field(ge=0.0, le=1.0, strict=True)
    evidence: list[EvidenceSpan] = Field(min_length=1)
    suggested_check: str | None = None


class ModelMeta(_WireModel):
    provider: str
    model: str
    timestamp: float = Field(strict=True)


class Analysis(_WireModel):
    paper: PaperRef
    summary_bullets: list[str]
    key_claims: list[KeyClaim]
    questions: list[Question]
    missing_ablations: list[MissingAblation]
    potential_issues: list[PotentialIssue]
    replication_checklist: list[str]
    next_week_tests: list[str]
    model_meta: ModelMeta
    analysis_version: str = ANALYSIS_VERSION

    @model_validator(mode="after")
    def _check_cardinality(self, info: ValidationInfo) -> Analysis:
        bounds = (info.context or {}).get("bounds") or CardinalityBounds()
        for name in LIST_FIELDS:
            count = len(getattr(self, name))
            if not bounds.min_items <= count <= bounds.max_items:
                raise ValueError(
                    f"{to_camel(name)} has {count} items, "
                    f"expected {bounds.min_items}-{bounds.max_items}"
                )
        return self


@dataclass(frozen=True)
class StoredAnalysis:
    """Persisted analysis, keyed by (paper_id, analysis_version)."""

    paper_id: str
    analysis_version: str
    analysis: Analysis
    created_at: int  # epoch milliseconds
