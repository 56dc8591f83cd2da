"""Random company samples from a CSV export, written as batch input JSON."""

import csv
import json
import logging
import random
from datetime import date
from pathlib import Path
from typing import Any

from company_research.core.errors import InputFileError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_SIZE = 100


def read_csv_records(path: str | Path) -> list[dict[str, Any]]:
    """Read a CSV file with a header row; empty cells become None."""
    try:
        with open(path, newline="", encoding="utf-8") as f:
            reader = csv.DictReader(f)
            if reader.fieldnames is None:
                raise InputFileError(f"CSV file {path} is empty")
            records = [
                {key: (value if value else None) for key, value in row.items() if key is not None}
                for row in reader
                if any(v and v.strip() for v in row.values() if isinstance(v, str))
            ]
    except (OSError, UnicodeDecodeError) as exc:
        raise InputFileError(f"Cannot read {path}: {exc}") from exc

    logger.info("Found %d companies in %s", len(records), path)
    return records


def sample_records(
    records: list[dict[str, Any]],
    size: int = DEFAULT_SAMPLE_SIZE,
    seed: int | None = None,
) -> list[dict[str, Any]]:
    """Pick ``size`` records at random (all of them, shuffled, if fewer)."""
    if size < 1:
        raise ValueError("Sample size must be at least 1")
    if len(records) < size:
        logger.warning("Only %d companies available (less than %d)", len(records), size)
    return random.Random(seed).sample(records, min(size, len(records)))


def default_sample_path(directory: str | Path, size: int = DEFAULT_SAMPLE_SIZE) -> Path:
    """``<directory>/companies-sample-<size>-<YYYY-MM-DD>.json``."""
    return Path(directory) / f"companies-sample-{size}-{date.today().isoformat()}.json"


def create_sample(
    csv_path: str | Path,
    output_path: str | Path,
    size: int = DEFAULT_SAMPLE_SIZE,
    seed: int | None = None,
) -> list[dict[str, Any]]:
    """Write a random sample of the CSV's rows to ``output_path`` as JSON."""
    sample = sample_records(read_csv_records(csv_path), size=size, seed=seed)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(json.dumps(sample, indent=2, ensure_ascii=False))
    logger.info("Wrote %d companies to %s", len(sample), output_path)
    return sample
