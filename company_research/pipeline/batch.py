"""Batch research over many companies with chunked concurrency."""

import asyncio
import logging
import time
from typing import Any

from company_research.agents.researcher import research_company
from company_research.core.config import DEFAULT_KEY_MAPPING, KeyMapping
from company_research.core.errors import ConfigurationError
from company_research.core.usage import UsageTracker
from company_research.pipeline.transform import normalize_company_input

logger = logging.getLogger(__name__)

RESEARCH_ERROR_KEY = "_researchError"


class BatchProcessor:
    """Researches companies in sequential chunks of ``concurrency`` items.

    Every company in a chunk is researched concurrently; the next chunk
    starts once the whole chunk has settled. Peak outbound requests are
    ``concurrency * number of fields``.
    """

    def __init__(
        self,
        llm,
        tracker: UsageTracker,
        key_mapping: KeyMapping | None = None,
        concurrency: int = 2,
    ):
        if isinstance(concurrency, bool) or not isinstance(concurrency, int) or concurrency < 1:
            raise ConfigurationError(f"concurrency must be at least 1, got {concurrency!r}")
        self.llm = llm
        self.tracker = tracker
        self.key_mapping = key_mapping or DEFAULT_KEY_MAPPING
        self.concurrency = concurrency

    async def _process_one(self, raw: dict[str, Any]) -> dict[str, Any]:
        name = None
        try:
            name, domain = normalize_company_input(raw, self.key_mapping)
            research = await research_company(
                name, domain, llm=self.llm, tracker=self.tracker
            )
            return {**raw, **research}
        except Exception as exc:
            logger.warning("Failed to research company %s: %s", name or raw, exc)
            base = raw if isinstance(raw, dict) else {"input": raw}
            return {**base, RESEARCH_ERROR_KEY: str(exc)}

    async def run(self, companies: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Research every company; the output matches the input's order."""
        total = len(companies)
        n_chunks = -(-total // self.concurrency)
        logger.info(
            "Starting batch of %d companies (%d chunks of up to %d)",
            total, n_chunks, self.concurrency,
        )
        t = time.time()

        results: list[dict[str, Any]] = [None] * total  # type: ignore[list-item]
        for start in range(0, total, self.concurrency):
            chunk = companies[start : start + self.concurrency]
            chunk_results = await asyncio.gather(*(self._process_one(c) for c in chunk))
            for offset, result in enumerate(chunk_results):
                results[start + offset] = result
            logger.info("Processed %d/%d companies", min(start + len(chunk), total), total)

        failed = sum(1 for r in results if RESEARCH_ERROR_KEY in r)
        logger.info(
            "Batch complete in %.1fs: %d researched, %d failed",
            time.time() - t, total - failed, failed,
        )
        return results


async def process_company_array(
    companies: list[dict[str, Any]],
    *,
    llm,
    tracker: UsageTracker,
    key_mapping: KeyMapping | None = None,
    concurrency: int = 2,
) -> list[dict[str, Any]]:
    """Research a list of company objects (see BatchProcessor)."""
    processor = BatchProcessor(llm, tracker, key_mapping=key_mapping, concurrency=concurrency)
    return await processor.run(companies)
