from datetime import UTC, datetime

import pytest

from paperlens.application.ports.clock_port import ClockPort

PAPER_ID = "arxiv:2401.12345"


class FixedClock(ClockPort):
    def __init__(self, at: datetime | None = None) -> None:
        self.at = at or datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)

    def now(self) -> datetime:
        return self.at


def _evidence(chunk_id: str = f"{PAPER_ID}-chunk-0") -> list[dict]:
    return [
        {
            "chunkId": chunk_id,
            "quote": "we observe a 3% gain",
            "location": {"section": "results", "pageStart": 4, "pageEnd": 4},
        }
    ]


def make_analysis_payload(paper_id: str = PAPER_ID) -> dict:
    return {
        "paper": {
            "title": "Sparse Mixtures at Scale",
            "authors": ["A. Author", "B. Author"],
            "source": "arxiv",
            "id": paper_id,
        },
        "summaryBullets": ["Proposes sparse routing.", "Reports gains on GLUE."],
        "keyClaims": [
            {"claim": "Routing improves accuracy.", "evidence": _evidence()},
            {"claim": "Compute drops by half.", "evidence": _evidence()},
        ],
        "questions": [
            {"question": "How sensitive is the gain to seed?", "evidence": _evidence()},
            {"question": "Does it transfer to other tasks?", "evidence": _evidence()},
        ],
        "missingAblations": [
            {
                "description": "No router-free baseline.",
                "suggestedExperiment": "Train with uniform routing.",
                "evidence": _evidence(),
            },
            {
                "description": "Expert count not varied.",
                "suggestedExperiment": "Sweep 4/8/16 experts.",
                "evidence": _evidence(),
            },
        ],
        "potentialIssues": [
            {
                "issue": "Single seed.",
                "severity": "High",
                "confidence": 0.8,
                "evidence": _evidence(),
                "suggestedCheck": "Rerun with 5 seeds.",
            },
            {
                "issue": "Test set used for tuning.",
                "severity": "Med",
                "confidence": 0.4,
                "evidence": _evidence(),
            },
        ],
        "replicationChecklist": ["Release code.", "Report hyperparameters."],
        "nextWeekTests": ["Seed sweep.", "Uniform-routing baseline."],
        "modelMeta": {"provider": "openai", "model": "gpt-4o-mini", "timestamp": 1704164645000},
    }


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def analysis_payload() -> dict:
    return make_analysis_payload()
