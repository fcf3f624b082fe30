"""Paper identifier formats.

Supported ids:
- ``arxiv:2401.12345`` (optionally with ``v2``)
- ``openreview:<forum id>``
- ``urlhash:<sha256 hex of the source url>`` for raw PDFs
"""

from __future__ import annotations

import hashlib
import re

from .models import PaperSource

_PAPER_ID_PATTERNS = (
    re.compile(r"^arxiv:[0-9]{4}\.[0-9]{4,5}(v[0-9]+)?$"),
    re.compile(r"^openreview:[a-zA-Z0-9_-]+$"),
    re.compile(r"^urlhash:[a-f0-9]{64}$"),
)


def is_valid_paper_id(paper_id: str) -> bool:
    return any(p.match(paper_id) for p in _PAPER_ID_PATTERNS)


def paper_id_for_url(url: str) -> str:
    digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
    return f"urlhash:{digest}"


def source_for_paper_id(paper_id: str | None) -> PaperSource:
    if paper_id and paper_id.startswith("arxiv:"):
        return "arxiv"
    if paper_id and paper_id.startswith("openreview:"):
        return "openreview"
    return "pdf"
