"""Tests for the command-line entry point."""

import json
from unittest.mock import patch

import pytest

from company_research.cli import build_parser, load_config, main, run
from company_research.core.config import ResearchConfig
from company_research.core.errors import TransportFailure
from company_research.core.fields import FIELD_KEYS

from test_researcher import FakeLLM


class ClosableFakeLLM(FakeLLM):
    closed = False

    async def aclose(self):
        self.closed = True


@pytest.fixture()
def fake_llm(monkeypatch):
    """Replace the OpenAI client the CLI builds with a FakeLLM."""
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    llm = ClosableFakeLLM()
    with patch("company_research.cli.OpenAIResearchClient.from_config", return_value=llm):
        yield llm


def _write_companies(tmp_path, companies, name="companies.json"):
    path = tmp_path / name
    path.write_text(json.dumps(companies))
    return path


# ── Arguments ────────────────────────────────────────────────────────


def test_parser_defaults():
    args = build_parser().parse_args(["ACME"])
    assert args.input == ["ACME"]
    assert args.name_key is None
    assert args.concurrency is None
    assert not args.tables


def test_parser_rejects_unknown_tier():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["ACME", "--service-tier", "economy"])


def test_load_config_overrides():
    args = build_parser().parse_args([
        "x.json", "--name-key", "Company Name", "--concurrency", "5", "--model", "gpt-5.2",
    ])
    config = load_config(args)
    assert config.key_mapping.name_key == "Company Name"
    assert config.key_mapping.domain_key == "domain"
    assert config.concurrency == 5
    assert config.model == "gpt-5.2"
    assert config.service_tier == "flex"


def test_load_config_from_file(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("model: gpt-5.2\nconcurrency: 3\n")
    args = build_parser().parse_args(["ACME", "--config", str(path), "--concurrency", "1"])
    config = load_config(args)
    assert config.model == "gpt-5.2"
    assert config.concurrency == 1


# ── Runs ─────────────────────────────────────────────────────────────


def test_no_input_prints_help(capsys):
    main([])
    assert "usage:" in capsys.readouterr().out


def test_single_company(fake_llm):
    main(["Siemens", "Energy"])
    assert len(fake_llm.calls) == len(FIELD_KEYS)
    assert all("Siemens Energy" in prompt for prompt, _, _ in fake_llm.calls)
    assert fake_llm.closed


def test_single_company_all_fields_fail(fake_llm):
    fake_llm.failures = {key: TransportFailure("HTTP 500: boom") for key in FIELD_KEYS}
    with pytest.raises(SystemExit) as excinfo:
        main(["ACME"])
    assert excinfo.value.code == 1
    assert fake_llm.closed


def test_batch_file(tmp_path, fake_llm):
    path = _write_companies(tmp_path, [
        {"name": "Company A", "domain": "a.com", "crm_id": 1},
        {"name": "Company B"},
    ])

    main([str(path)])

    out = tmp_path / "companies-researched.json"
    results = json.loads(out.read_text())
    assert [r["name"] for r in results] == ["Company A", "Company B"]
    assert results[0]["crm_id"] == 1
    assert results[0]["domain"] == "a.com"
    assert results[1]["sam_tool"]["sam_tool"] == "Flexera"
    assert len(fake_llm.calls) == 2 * len(FIELD_KEYS)


def test_batch_with_custom_keys_and_tables(tmp_path, fake_llm):
    path = _write_companies(tmp_path, [{"Company Name": "ACME", "Website": "acme.com"}])

    main([str(path), "--name-key", "Company Name", "--domain-key", "Website", "--tables"])

    results = json.loads((tmp_path / "companies-researched.json").read_text())
    assert results[0]["Company Name"] == "ACME"
    assert results[0]["domain"] == "acme.com"
    assert (tmp_path / "companies-researched.csv").exists()
    assert (tmp_path / "companies-researched.xlsx").exists()


def test_batch_keeps_going_after_company_failure(tmp_path, fake_llm):
    fake_llm.failures = {key: TransportFailure("HTTP 500: boom") for key in FIELD_KEYS}
    path = _write_companies(tmp_path, [{"name": "ACME"}])

    main([str(path)])

    results = json.loads((tmp_path / "companies-researched.json").read_text())
    assert "All 8 fields failed" in results[0]["_researchError"]


def test_invalid_json_file_exits(tmp_path, fake_llm):
    path = tmp_path / "companies.json"
    path.write_text("{broken")
    with pytest.raises(SystemExit) as excinfo:
        main([str(path)])
    assert excinfo.value.code == 1
    assert fake_llm.calls == []
    assert not (tmp_path / "companies-researched.json").exists()


def test_zero_concurrency_exits(tmp_path, fake_llm):
    path = _write_companies(tmp_path, [{"name": "ACME"}])
    with pytest.raises(SystemExit) as excinfo:
        main([str(path), "--concurrency", "0"])
    assert excinfo.value.code == 1
    assert fake_llm.calls == []


def test_missing_api_key_exits(monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    with pytest.raises(SystemExit) as excinfo:
        main(["ACME"])
    assert excinfo.value.code == 1


def test_missing_json_file_is_a_company_name(fake_llm):
    main(["does-not-exist.json"])
    assert "does-not-exist.json" in fake_llm.calls[0][0]


@pytest.mark.asyncio
async def test_run_with_injected_llm():
    llm = ClosableFakeLLM()
    result = await run("ACME", ResearchConfig(), llm=llm)
    assert result["name"] == "ACME"
    assert set(FIELD_KEYS) <= set(result)
    assert not llm.closed
