from __future__ import annotations

import asyncio
import io
import logging
from dataclasses import dataclass
from importlib import import_module
from pathlib import Path
from typing import Any

import httpx

from paperlens.application.ports.page_extractor_port import PageExtractorPort
from paperlens.domain.errors import ConfigError, ExtractionError
from paperlens.domain.models import ExtractionResult, PageText

logger = logging.getLogger(__name__)


class PdfEngine:
    """Process-scoped pypdf handle.

    init() loads the library once; is_ready() reports whether it did.
    Extractors receive an initialized engine instead of checking a global.
    """

    def __init__(self) -> None:
        self._reader_cls: Any | None = None

    def init(self) -> PdfEngine:
        if self._reader_cls is None:
            try:
                module = import_module("pypdf")
            except ImportError as ex:
                raise ConfigError("pypdf is not installed") from ex
            self._reader_cls = module.PdfReader
        return self

    def is_ready(self) -> bool:
        return self._reader_cls is not None

    def read(self, data: bytes) -> ExtractionResult:
        if self._reader_cls is None:
            raise ConfigError("PdfEngine.init() must be called before reading")
        try:
            reader = self._reader_cls(io.BytesIO(data))
            pages = tuple(
                PageText(page_number=i, text=text)
                for i, page in enumerate(reader.pages, start=1)
                if (text := (page.extract_text() or "")).strip()
            )
            meta = getattr(reader, "metadata", None)
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"PDF parse failed: {ex}") from ex
        metadata: dict[str, Any] = {}
        if meta is not None:
            if meta.title:
                metadata["title"] = str(meta.title)
            if meta.author:
                metadata["author"] = str(meta.author)
        return ExtractionResult(pages=pages, metadata=metadata)


@dataclass
class PdfPageExtractor(PageExtractorPort):
    """Per-page text from a local path or an http(s) URL."""

    engine: PdfEngine
    timeout_s: float = 60.0
    http_client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if not self.engine.is_ready():
            raise ConfigError("PdfPageExtractor needs an initialized PdfEngine")

    async def _download(self, url: str) -> bytes:
        try:
            if self.http_client is not None:
                r = await self.http_client.get(url, timeout=self.timeout_s, follow_redirects=True)
            else:
                async with httpx.AsyncClient() as client:
                    r = await client.get(url, timeout=self.timeout_s, follow_redirects=True)
            r.raise_for_status()
        except httpx.HTTPError as ex:
            raise ExtractionError(f"PDF download failed: {ex}") from ex
        return r.content

    async def _read_file(self, location: str) -> bytes:
        path = Path(location.removeprefix("file://"))
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as ex:
            raise ExtractionError(f"PDF read failed: {ex}") from ex

    async def extract(self, url: str) -> ExtractionResult:
        if url.startswith(("http://", "https://")):
            data = await self._download(url)
        else:
            data = await self._read_file(url)
        result = await asyncio.to_thread(self.engine.read, data)
        if not result.pages:
            raise ExtractionError(f"PDF extraction returned no pages: {url}")
        logger.info("Extracted %d pages from %s", len(result.pages), url)
        return result
