# paperlens/application/dto/analysis_dto.py
from __future__ import annotations

from dataclasses import dataclass, field

from paperlens.domain.models import AnalysisOptions


@dataclass(frozen=True)
class AnalyzePaperRequest:
    """
    DTO for analyzing a stored paper.

    - paper_id: id of a paper already saved in the record store
    - options:  tone / privacy mode, consumed by prompt construction only
    """

    paper_id: str
    options: AnalysisOptions = field(default_factory=AnalysisOptions)
