import json

import httpx
import pytest

from app.cli import main, parse_args
from tests.helpers.factories import StubProvider, extraction_text, make_pipeline, ok_handler


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError("network should not be used")


def test_parse_args_reads_enrich_subcommand(tmp_path):
    args = parse_args(["enrich", "https://acme.example", "--company-json", str(tmp_path / "c.json")])
    assert args.command == "enrich"
    assert args.url == "https://acme.example"
    assert args.company_json.name == "c.json"


def test_enrich_prints_demo_envelope(capsys):
    exit_code = main(["enrich", "https://acme.example"], pipeline=make_pipeline(_unreachable, primary=None))

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["enrichment"]["demo"] is True
    assert "score" not in output


def test_enrich_with_company_profile_scores_result(tmp_path, capsys):
    company_path = tmp_path / "company.json"
    company_path.write_text(
        json.dumps(
            {
                "id": "acme",
                "name": "Acme Energy",
                "sector": "ClimateTech",
                "stage": "Seed",
                "location": "India",
                "website": "https://acme.example",
            }
        ),
        encoding="utf-8",
    )
    pipeline = make_pipeline(ok_handler(), primary=StubProvider("openai", [extraction_text()]))

    exit_code = main(["enrich", "https://acme.example", "--company-json", str(company_path)], pipeline=pipeline)

    assert exit_code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["enrichment"]["demo"] is False
    assert output["score"]["score"] == 100
    assert output["score"]["breakdown"]["tractionSignals"] == 30
    assert output["insight"].startswith("Active hiring")


def test_invalid_url_exits_with_usage_error():
    assert main(["enrich", "ftp://acme.example"], pipeline=make_pipeline(_unreachable, primary=None)) == 2


def test_missing_company_file_exits_with_error(tmp_path):
    pipeline = make_pipeline(_unreachable, primary=None)
    assert main(["enrich", "https://acme.example", "--company-json", str(tmp_path / "missing.json")], pipeline=pipeline) == 1


def test_enrich_requires_url():
    with pytest.raises(SystemExit):
        parse_args(["enrich"])


def test_serve_runs_uvicorn(monkeypatch):
    calls = []
    monkeypatch.setattr("app.cli.uvicorn.run", lambda app, **kwargs: calls.append((app, kwargs)))

    assert main(["serve", "--port", "9001"]) == 0
    assert calls[0][0] == "app.main:app"
    assert calls[0][1]["port"] == 9001
