import asyncio
import json

import pytest

from paperlens.application.schemas import Analysis, StoredAnalysis
from paperlens.domain.errors import ConfigError, NoContentError
from paperlens.domain.paper_ids import paper_id_for_url
from paperlens.domain.types import Result
from paperlens.interface.cli import main as cli


class FakeUseCase:
    def __init__(self, result: Result, store, on_progress) -> None:
        self.result = result
        self.store = store
        self.on_progress = on_progress
        self.requests: list = []

    async def execute(self, req):  # type: ignore[no-untyped-def]
        self.requests.append(req)
        self.on_progress("generation", req.paper_id)
        return self.result


def _install(monkeypatch, result: Result) -> dict:
    captured: dict = {}

    def fake_build(settings=None, store=None, on_progress=None):  # type: ignore[no-untyped-def]
        uc = FakeUseCase(result, store, on_progress)
        captured["uc"] = uc
        return uc

    monkeypatch.setattr(cli, "build_analyze_use_case", fake_build)
    return captured


def _stored(payload: dict) -> StoredAnalysis:
    analysis = Analysis.model_validate(payload)
    return StoredAnalysis(
        paper_id=analysis.paper.id, analysis_version="1.0.0", analysis=analysis, created_at=0
    )


def test_analyze_prints_camel_case_json(monkeypatch, capsys, analysis_payload):
    captured = _install(monkeypatch, Result.success(_stored(analysis_payload)))

    code = cli.main(
        [
            "analyze",
            "--pdf",
            "./paper.pdf",
            "--paper-id",
            "arxiv:2401.12345",
            "--title",
            "Sparse Mixtures at Scale",
            "--authors",
            "A. Author, B. Author,",
            "--tone",
            "critical",
            "--privacy-mode",
            "full-text",
        ]
    )

    assert code == 0
    out = capsys.readouterr().out
    assert "[generation]" in out
    body = json.loads(out[out.index("{") :])
    assert body["paper"]["id"] == "arxiv:2401.12345"
    assert "keyClaims" in body

    uc = captured["uc"]
    req = uc.requests[0]
    assert req.paper_id == "arxiv:2401.12345"
    assert req.options.tone == "critical"
    assert req.options.privacy_mode == "full-text"
    paper = asyncio.run(uc.store.get_paper("arxiv:2401.12345"))
    assert paper.authors == ("A. Author", "B. Author")
    assert paper.source == "arxiv"
    assert paper.pdf_url == "./paper.pdf"


def test_paper_id_defaults_to_url_hash(monkeypatch, capsys, analysis_payload):
    captured = _install(monkeypatch, Result.success(_stored(analysis_payload)))
    url = "https://example.org/paper.pdf"

    assert cli.main(["analyze", "--pdf", url]) == 0

    uc = captured["uc"]
    assert uc.requests[0].paper_id == paper_id_for_url(url)
    paper = asyncio.run(uc.store.get_paper(paper_id_for_url(url)))
    assert paper.title == "PDF Document"
    assert paper.source == "pdf"
    assert paper.authors == ()


def test_failure_prints_error_and_returns_1(monkeypatch, capsys):
    _install(monkeypatch, Result.failure(NoContentError("No content available to analyze.")))

    code = cli.main(["analyze", "--pdf", "./missing.pdf"])

    assert code == 1
    out = capsys.readouterr().out
    assert "[ERROR] NoContentError: No content available to analyze." in out


def test_wiring_errors_are_reported(monkeypatch, capsys):
    def fake_build(settings=None, store=None, on_progress=None):  # type: ignore[no-untyped-def]
        raise ConfigError("OpenAI API key required")

    monkeypatch.setattr(cli, "build_analyze_use_case", fake_build)

    assert cli.main(["analyze", "--pdf", "./paper.pdf"]) == 1
    assert "[ERROR] ConfigError: OpenAI API key required" in capsys.readouterr().out


def test_invalid_tone_is_rejected():
    with pytest.raises(SystemExit):
        cli.main(["analyze", "--pdf", "./paper.pdf", "--tone", "harsh"])


def test_subcommand_is_required():
    with pytest.raises(SystemExit):
        cli.main([])
