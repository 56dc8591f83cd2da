#!/usr/bin/env python3
"""Create a random sample of companies from a CSV export as batch input JSON.

Usage:
    python scripts/create_sample.py data/export.csv
    python scripts/create_sample.py data/export.csv --size 20 --seed 7 -o sample.json
"""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from company_research.core.errors import ResearchError
from company_research.pipeline.sample import (
    DEFAULT_SAMPLE_SIZE,
    create_sample,
    default_sample_path,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("create_sample")


def main():
    parser = argparse.ArgumentParser(description="Sample companies from a CSV export")
    parser.add_argument("csv_path", help="CSV file with a header row")
    parser.add_argument("--size", type=int, default=DEFAULT_SAMPLE_SIZE, help="Companies to pick")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--output", "-o", default=None, help="Output JSON path")
    args = parser.parse_args()

    output = args.output or default_sample_path(Path(args.csv_path).parent, args.size)
    logger.info("Creating %d-company sample from %s", args.size, args.csv_path)
    try:
        create_sample(args.csv_path, output, size=args.size, seed=args.seed)
    except (ResearchError, ValueError) as exc:
        logger.error("Failed to create sample: %s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
