"""Command-line entry point: research one company or a JSON file of companies."""

import argparse
import asyncio
import json
import logging
import sys
import time

from company_research.agents.llm import OpenAIResearchClient
from company_research.agents.researcher import research_company
from company_research.core.config import (
    DEFAULT_CONFIG_PATH,
    ResearchConfig,
    create_key_mapping,
    load_api_key,
    load_research_config,
)
from company_research.core.pricing import SERVICE_TIERS
from company_research.core.usage import UsageTracker
from company_research.exporters import export_all
from company_research.exporters.json_results import is_json_file, read_json_file
from company_research.pipeline.batch import process_company_array

logger = logging.getLogger("company_research")

# ── Runs ─────────────────────────────────────────────────────────────


async def research_single(name: str, llm, tracker: UsageTracker) -> dict:
    logger.info("=" * 60)
    logger.info("RESEARCH: %s", name)

    result = await research_company(name, llm=llm, tracker=tracker)

    logger.info("Research results:\n%s", json.dumps(result, indent=2, ensure_ascii=False))
    logger.info("Summary:\n%s", result["research_summary"])
    return result


async def research_batch(
    input_path: str,
    config: ResearchConfig,
    llm,
    tracker: UsageTracker,
    tables: bool = False,
) -> dict:
    logger.info("=" * 60)
    logger.info("BATCH: %s", input_path)

    companies = read_json_file(input_path, config.key_mapping)
    results = await process_company_array(
        companies,
        llm=llm,
        tracker=tracker,
        key_mapping=config.key_mapping,
        concurrency=config.concurrency,
    )
    return export_all(input_path, results, tables=tables)


async def run(input_text: str, config: ResearchConfig, tables: bool = False, llm=None):
    """Research ``input_text`` as a JSON batch file or a company name."""
    t_start = time.time()
    tracker = UsageTracker()
    tracker.set_model(config.model)
    tracker.set_service_tier(config.service_tier)

    owns_llm = llm is None
    if owns_llm:
        llm = OpenAIResearchClient.from_config(config, load_api_key())

    try:
        if is_json_file(input_text):
            outcome = await research_batch(input_text, config, llm, tracker, tables=tables)
        else:
            outcome = await research_single(input_text, llm, tracker)
    finally:
        if owns_llm:
            await llm.aclose()
        tracker.log_summary()
        logger.info("Finished in %.1fs", time.time() - t_start)
    return outcome


# ── CLI ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="company-research",
        description="Research companies field by field with a web-search LLM",
        epilog=(
            'examples:\n'
            '  company-research "Siemens Energy"\n'
            '  company-research companies.json --name-key "Company Name" --domain-key Website'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input", nargs="*", help="Company name, or path to a JSON array of companies"
    )
    parser.add_argument("--name-key", default=None, help="JSON key holding the company name")
    parser.add_argument("--domain-key", default=None, help="JSON key holding the company domain")
    parser.add_argument(
        "--concurrency", type=int, default=None, help="Companies researched at once"
    )
    parser.add_argument("--model", default=None, help="OpenAI model name")
    parser.add_argument(
        "--service-tier", choices=SERVICE_TIERS, default=None, help="OpenAI service tier"
    )
    parser.add_argument("--config", default=None, help="Path to a run config YAML file")
    parser.add_argument(
        "--tables", action="store_true", help="Also export CSV and Excel result tables"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def load_config(args: argparse.Namespace) -> ResearchConfig:
    """Config file (if any) with command-line overrides applied."""
    if args.config or DEFAULT_CONFIG_PATH.exists():
        config = load_research_config(args.config)
    else:
        config = ResearchConfig()

    key_mapping = config.key_mapping
    if args.name_key is not None or args.domain_key is not None:
        key_mapping = create_key_mapping(
            args.name_key if args.name_key is not None else key_mapping.name_key,
            args.domain_key if args.domain_key is not None else key_mapping.domain_key,
        )

    return config.with_overrides(
        model=args.model,
        service_tier=args.service_tier,
        concurrency=args.concurrency,
        key_mapping=key_mapping,
    )


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    input_text = " ".join(args.input).strip()
    if not input_text:
        parser.print_help()
        return

    try:
        config = load_config(args)
        logger.debug("Run config: %s", config.model_dump())
        asyncio.run(run(input_text, config, tables=args.tables))
    except Exception as exc:
        logger.error("Research failed: %s", exc, exc_info=args.verbose)
        sys.exit(1)


if __name__ == "__main__":
    main()
