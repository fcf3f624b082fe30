from __future__ import annotations

from typing import Protocol, runtime_checkable

from paperlens.domain.models import ExtractionResult


@runtime_checkable
class PageExtractorPort(Protocol):
    async def extract(self, url: str) -> ExtractionResult:
        """Return per-page text; raise ExtractionError when unreachable or empty."""
        ...
