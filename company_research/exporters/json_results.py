"""Batch input reading and researched-output writing (JSON)."""

import json
import logging
import re
from pathlib import Path
from typing import Any

from company_research.core.config import DEFAULT_KEY_MAPPING, KeyMapping
from company_research.core.errors import InputFileError

logger = logging.getLogger(__name__)

_JSON_SUFFIX_RE = re.compile(r"\.json$")


def is_json_file(path: Any) -> bool:
    """True if ``path`` is a non-empty string naming an existing .json file."""
    if not isinstance(path, str) or not path.strip():
        return False
    if not path.endswith(".json"):
        return False
    return Path(path).exists()


def read_json_file(
    path: str | Path, key_mapping: KeyMapping = DEFAULT_KEY_MAPPING
) -> list[dict[str, Any]]:
    """Read a JSON array of company objects.

    Every object must carry the configured name key as a non-empty string;
    other keys are returned untouched. Raises InputFileError otherwise.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as exc:
        raise InputFileError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InputFileError(f"{path} is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise InputFileError(f"{path} must contain a JSON array of companies")

    for i, item in enumerate(data):
        if not isinstance(item, dict):
            raise InputFileError(f"{path}: item {i} is not an object")
        name = item.get(key_mapping.name_key)
        if not isinstance(name, str) or not name.strip():
            raise InputFileError(
                f"{path}: item {i} needs a non-empty string '{key_mapping.name_key}'"
            )

    logger.info("Loaded %d companies from %s", len(data), path)
    return data


def results_path(input_path: str | Path) -> str:
    """``companies.json`` -> ``companies-researched.json``."""
    return _JSON_SUFFIX_RE.sub("-researched.json", str(input_path))


def write_results(input_path: str | Path, results: list[dict[str, Any]]) -> str:
    """Write results next to the input file and return the output path."""
    output_path = results_path(input_path)
    with open(output_path, "w", encoding="utf-8") as f:
        f.write(json.dumps(results, indent=2, ensure_ascii=False))
    logger.info("Results written to %s (%d companies)", output_path, len(results))
    return output_path
