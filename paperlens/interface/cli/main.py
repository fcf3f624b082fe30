"""CLI for paperlens: analyze one PDF (local path or URL) and print the critique."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Sequence

from paperlens.application.dto.analysis_dto import AnalyzePaperRequest
from paperlens.config.composition import build_analyze_use_case, build_record_store
from paperlens.config.settings import AppSettings
from paperlens.domain.errors import DomainError
from paperlens.domain.models import AnalysisOptions, PaperMetadata
from paperlens.domain.paper_ids import paper_id_for_url, source_for_paper_id


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="paperlens")
    sub = parser.add_subparsers(dest="command", required=True)

    analyze = sub.add_parser("analyze", help="Generate an evidence-grounded critique")
    analyze.add_argument("--pdf", required=True, help="PDF path or http(s) URL")
    analyze.add_argument("--paper-id", help="Defaults to urlhash:<sha256 of --pdf>")
    analyze.add_argument("--title", default="PDF Document")
    analyze.add_argument("--authors", default="", help="Comma-separated author names")
    analyze.add_argument("--abstract", help="Used as fallback content if extraction fails")
    analyze.add_argument(
        "--tone", choices=["critical", "balanced", "experimental"], default="balanced"
    )
    analyze.add_argument(
        "--privacy-mode", choices=["abstract-only", "snippets", "full-text"], default="snippets"
    )
    return parser


def _paper_from_args(args: argparse.Namespace) -> PaperMetadata:
    paper_id = args.paper_id or paper_id_for_url(args.pdf)
    authors = tuple(a.strip() for a in args.authors.split(",") if a.strip())
    return PaperMetadata(
        paper_id=paper_id,
        title=args.title,
        authors=authors,
        abstract=args.abstract,
        source=source_for_paper_id(paper_id),
        pdf_url=args.pdf,
        source_url=args.pdf,
    )


async def _analyze(args: argparse.Namespace, settings: AppSettings) -> int:
    store = build_record_store()
    paper = _paper_from_args(args)
    await store.save_paper(paper)

    uc = build_analyze_use_case(
        settings,
        store=store,
        on_progress=lambda stage, _pid: print(f"[{stage}]", flush=True),
    )
    req = AnalyzePaperRequest(
        paper_id=paper.paper_id,
        options=AnalysisOptions(tone=args.tone, privacy_mode=args.privacy_mode),
    )
    result = await uc.execute(req)

    if result.ok and result.value is not None:
        print(json.dumps(result.value.analysis.model_dump(by_alias=True), indent=2))
        return 0
    err = result.error
    print(f"\n[ERROR] {type(err).__name__}: {err}")
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = AppSettings()
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    try:
        return asyncio.run(_analyze(args, settings))
    except DomainError as ex:
        # Configuration problems surface before the use case runs
        print(f"\n[ERROR] {type(ex).__name__}: {ex}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
