"""Export convenience function."""

import logging
import re
from typing import Any

from company_research.exporters.json_results import write_results
from company_research.exporters.results_table import export_results_csv, export_results_excel

logger = logging.getLogger(__name__)


def export_all(
    input_path: str,
    results: list[dict[str, Any]],
    tables: bool = False,
) -> dict:
    """Write the researched JSON (and optionally CSV/Excel tables).

    Returns dict of file paths created.
    """
    paths = {"json": write_results(input_path, results)}

    if tables:
        stem = re.sub(r"\.json$", "", paths["json"])
        csv_path = f"{stem}.csv"
        export_results_csv(results, csv_path)
        paths["csv"] = csv_path

        xlsx_path = f"{stem}.xlsx"
        export_results_excel(results, xlsx_path)
        paths["xlsx"] = xlsx_path

    logger.info("Exported %s", ", ".join(paths.values()))
    return paths
