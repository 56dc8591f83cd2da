"""Tests for batch research with chunked concurrency."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from company_research.core.config import create_key_mapping
from company_research.core.errors import ConfigurationError, ResearchError
from company_research.core.fields import FIELD_KEYS
from company_research.core.usage import UsageTracker
from company_research.pipeline.batch import (
    RESEARCH_ERROR_KEY,
    BatchProcessor,
    process_company_array,
)

from test_researcher import FakeLLM

RESEARCH = "company_research.pipeline.batch.research_company"


async def _fake_research(name, domain=None, *, llm, tracker):
    result = {"name": name}
    if domain is not None:
        result["domain"] = domain
    result["research_summary"] = f"Summary for {name}"
    return result


# ── Setup ────────────────────────────────────────────────────────────


@pytest.mark.parametrize("concurrency", [0, -1, 1.5, "2", True])
def test_invalid_concurrency(concurrency):
    with pytest.raises(ConfigurationError):
        BatchProcessor(llm=FakeLLM(), tracker=UsageTracker(), concurrency=concurrency)


@pytest.mark.asyncio
async def test_invalid_concurrency_before_any_call():
    llm = FakeLLM()
    with pytest.raises(ConfigurationError):
        await process_company_array(
            [{"name": "ACME"}], llm=llm, tracker=UsageTracker(), concurrency=0
        )
    assert llm.calls == []


@pytest.mark.asyncio
async def test_empty_batch():
    with patch(RESEARCH, new=AsyncMock(side_effect=_fake_research)) as mock:
        results = await process_company_array([], llm=FakeLLM(), tracker=UsageTracker())
    assert results == []
    mock.assert_not_called()


# ── Results ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_results_keep_input_order_and_extra_keys():
    companies = [
        {"name": "A", "domain": "a.com", "crm_id": 1},
        {"name": "B", "crm_id": 2},
        {"name": "C", "tags": ["x"]},
    ]
    with patch(RESEARCH, new=AsyncMock(side_effect=_fake_research)):
        results = await process_company_array(
            companies, llm=FakeLLM(), tracker=UsageTracker(), concurrency=2
        )

    assert [r["name"] for r in results] == ["A", "B", "C"]
    assert results[0]["crm_id"] == 1
    assert results[0]["domain"] == "a.com"
    assert results[1]["crm_id"] == 2
    assert results[2]["tags"] == ["x"]
    assert all(r["research_summary"] == f"Summary for {r['name']}" for r in results)


@pytest.mark.asyncio
async def test_order_kept_when_later_companies_finish_first():
    async def slow_first(name, domain=None, *, llm, tracker):
        await asyncio.sleep(0.03 if name == "A" else 0)
        return await _fake_research(name, domain, llm=llm, tracker=tracker)

    companies = [{"name": n} for n in "ABCD"]
    with patch(RESEARCH, new=AsyncMock(side_effect=slow_first)):
        results = await process_company_array(
            companies, llm=FakeLLM(), tracker=UsageTracker(), concurrency=4
        )
    assert [r["name"] for r in results] == list("ABCD")


@pytest.mark.asyncio
async def test_research_failure_is_recorded_per_company():
    async def fail_b(name, domain=None, *, llm, tracker):
        if name == "B":
            raise ResearchError("All 8 fields failed for B")
        return await _fake_research(name, domain, llm=llm, tracker=tracker)

    companies = [{"name": "A"}, {"name": "B", "crm_id": 9}, {"name": "C"}]
    with patch(RESEARCH, new=AsyncMock(side_effect=fail_b)):
        results = await process_company_array(
            companies, llm=FakeLLM(), tracker=UsageTracker(), concurrency=2
        )

    assert len(results) == 3
    assert results[1] == {"name": "B", "crm_id": 9, RESEARCH_ERROR_KEY: "All 8 fields failed for B"}
    assert RESEARCH_ERROR_KEY not in results[0]
    assert RESEARCH_ERROR_KEY not in results[2]


@pytest.mark.asyncio
async def test_normalization_failure_is_recorded():
    companies = [{"name": "   "}, {"name": "OK"}]
    with patch(RESEARCH, new=AsyncMock(side_effect=_fake_research)) as mock:
        results = await process_company_array(companies, llm=FakeLLM(), tracker=UsageTracker())

    assert "cannot be empty" in results[0][RESEARCH_ERROR_KEY]
    assert results[1]["research_summary"] == "Summary for OK"
    assert mock.await_count == 1


@pytest.mark.asyncio
async def test_custom_key_mapping():
    mapping = create_key_mapping("Company Name", "Website")
    companies = [{"Company Name": "Siemens Energy", "Website": " siemens-energy.com "}]
    with patch(RESEARCH, new=AsyncMock(side_effect=_fake_research)) as mock:
        results = await process_company_array(
            companies, llm=FakeLLM(), tracker=UsageTracker(), key_mapping=mapping
        )

    args = mock.await_args
    assert args.args == ("Siemens Energy", "siemens-energy.com")
    assert results[0]["Company Name"] == "Siemens Energy"
    assert results[0]["name"] == "Siemens Energy"
    assert results[0]["Website"] == " siemens-energy.com "


# ── Chunking ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_chunks_run_sequentially():
    events = []
    active = {"now": 0, "peak": 0}

    async def tracked(name, domain=None, *, llm, tracker):
        active["now"] += 1
        active["peak"] = max(active["peak"], active["now"])
        events.append(("start", name))
        await asyncio.sleep(0.02 if name in ("A", "C") else 0)
        events.append(("end", name))
        active["now"] -= 1
        return {"name": name, "research_summary": ""}

    companies = [{"name": n} for n in "ABCDE"]
    with patch(RESEARCH, new=AsyncMock(side_effect=tracked)):
        await process_company_array(
            companies, llm=FakeLLM(), tracker=UsageTracker(), concurrency=2
        )

    assert active["peak"] == 2
    # C only starts after both A and B of the first chunk have finished
    assert events.index(("start", "C")) > events.index(("end", "A"))
    assert events.index(("start", "C")) > events.index(("end", "B"))
    assert events.index(("start", "E")) > events.index(("end", "C"))


@pytest.mark.asyncio
async def test_concurrency_one_is_sequential():
    order = []

    async def tracked(name, domain=None, *, llm, tracker):
        order.append(name)
        return {"name": name}

    with patch(RESEARCH, new=AsyncMock(side_effect=tracked)):
        await process_company_array(
            [{"name": n} for n in "XYZ"], llm=FakeLLM(), tracker=UsageTracker(), concurrency=1
        )
    assert order == ["X", "Y", "Z"]


# ── End to End ───────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_two_companies_with_fake_llm():
    llm, tracker = FakeLLM(), UsageTracker()
    companies = [
        {"name": "Company A", "domain": "a.com"},
        {"name": "Company B", "domain": "b.com"},
    ]

    results = await process_company_array(companies, llm=llm, tracker=tracker, concurrency=2)

    assert len(llm.calls) == 2 * len(FIELD_KEYS)
    assert tracker.get_summary().total_calls == 2 * len(FIELD_KEYS)
    for company, result in zip(companies, results):
        assert result["name"] == company["name"]
        assert result["domain"] == company["domain"]
        assert result["employees"]["employees"] == 5000
        assert result["research_summary"].startswith("Employees: 5,000")
