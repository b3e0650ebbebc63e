"""Command-line entry point: enrich one URL (optionally scoring a company profile) or serve the API."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

import uvicorn
from pydantic import ValidationError

from app.config import settings
from app.models.company import CompanyProfile
from app.services.enrichment.errors import InvalidInput
from app.services.enrichment.pipeline import EnrichmentPipeline, build_pipeline
from app.services.scoring.engine import score_company
from app.services.scoring.insight import generate_insight

logger = logging.getLogger("app.cli")


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Enrich a company website and score it against the thesis.")
    subcommands = parser.add_subparsers(dest="command", required=True)

    enrich_cmd = subcommands.add_parser("enrich", help="Fetch and extract a single company URL.")
    enrich_cmd.add_argument("url", help="Company website URL (http or https).")
    enrich_cmd.add_argument(
        "--company-json",
        type=Path,
        help="Path to a company profile JSON document; when given the result is also scored.",
    )

    serve_cmd = subcommands.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve_cmd.add_argument("--host", default=settings.host)
    serve_cmd.add_argument("--port", type=int, default=settings.port)
    return parser.parse_args(argv)


def run_enrich(url: str, *, company_path: Path | None, pipeline: EnrichmentPipeline) -> dict[str, object]:
    envelope = pipeline.enrich(url)
    output: dict[str, object] = {"enrichment": envelope.model_dump(mode="json", by_alias=True)}
    if company_path is not None:
        company = CompanyProfile.model_validate_json(company_path.read_text(encoding="utf-8"))
        result = score_company(company, envelope.data)
        output["score"] = result.model_dump(mode="json", by_alias=True)
        output["insight"] = generate_insight(envelope.data.signals)
    return output


def main(argv: Sequence[str] | None = None, *, pipeline: EnrichmentPipeline | None = None) -> int:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    args = parse_args(argv)
    if args.command == "serve":
        uvicorn.run("app.main:app", host=args.host, port=args.port, log_level=settings.log_level.lower())
        return 0

    pipeline = pipeline or build_pipeline(settings)
    try:
        output = run_enrich(args.url, company_path=args.company_json, pipeline=pipeline)
    except InvalidInput as exc:
        logger.error("Enrichment rejected: %s", exc)
        return 2
    except (OSError, ValidationError) as exc:
        logger.error("Company profile could not be loaded: %s", exc)
        return 1
    sys.stdout.write(json.dumps(output, indent=2) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
