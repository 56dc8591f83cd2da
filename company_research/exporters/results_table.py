"""Research results table exports: CSV and Excel."""

import csv
import json
import logging
from typing import Any, Iterable

import openpyxl
from openpyxl.styles import Font

from company_research.core.fields import FIELDS, FieldDefinition
from company_research.pipeline.batch import RESEARCH_ERROR_KEY

logger = logging.getLogger(__name__)

_RESEARCH_KEYS = {"research_summary", "_fieldErrors", RESEARCH_ERROR_KEY}

# ── Helpers ──────────────────────────────────────────────────────────


def _cell(value: Any) -> Any:
    """Flatten nested values so they fit in a single cell."""
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return value


def build_result_rows(
    results: list[dict[str, Any]],
    fields: Iterable[FieldDefinition] = FIELDS,
) -> tuple[list[str], list[list]]:
    """Build header and data rows, one row per company.

    Input columns come first (in first-seen order), then value, certainty
    and sources per field, then the summary and any errors.
    """
    field_keys = [f.key for f in fields]
    skip = set(field_keys) | _RESEARCH_KEYS

    input_columns: list[str] = []
    for result in results:
        for key in result:
            if key not in skip and key not in input_columns:
                input_columns.append(key)

    headers = list(input_columns)
    for key in field_keys:
        headers.extend([key, f"{key}_certainty", f"{key}_sources"])
    headers.extend(["research_summary", "field_errors", "research_error"])

    rows = []
    for result in results:
        row = [_cell(result.get(col)) for col in input_columns]
        for key in field_keys:
            envelope = result.get(key)
            if isinstance(envelope, dict):
                row.extend([
                    _cell(envelope.get(key)),
                    envelope.get("certainty_score"),
                    "\n".join(envelope.get("sources") or []),
                ])
            else:
                row.extend(["", "", ""])
        field_errors = result.get("_fieldErrors") or {}
        row.extend([
            result.get("research_summary", ""),
            "\n".join(f"{k}: {v}" for k, v in field_errors.items()),
            result.get(RESEARCH_ERROR_KEY, ""),
        ])
        rows.append(row)

    return headers, rows


# ── CSV Export ───────────────────────────────────────────────────────


def export_results_csv(results: list[dict[str, Any]], output_path: str) -> None:
    """Export the results table as CSV."""
    headers, rows = build_result_rows(results)

    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(headers)
        writer.writerows(rows)

    logger.info("Results CSV exported to %s (%d rows)", output_path, len(rows))


# ── Excel Export ─────────────────────────────────────────────────────


def export_results_excel(results: list[dict[str, Any]], output_path: str) -> None:
    """Export the results table as Excel with a results and an errors sheet."""
    wb = openpyxl.Workbook()

    ws1 = wb.active
    ws1.title = "Research Results"
    headers, rows = build_result_rows(results)
    ws1.append(headers)
    for row in rows:
        ws1.append(row)
    _style_header(ws1)

    ws2 = wb.create_sheet("Errors")
    ws2.append(["row", "field", "error"])
    for i, result in enumerate(results, 1):
        if RESEARCH_ERROR_KEY in result:
            ws2.append([i, "", result[RESEARCH_ERROR_KEY]])
        for key, message in (result.get("_fieldErrors") or {}).items():
            ws2.append([i, key, message])
    _style_header(ws2)

    wb.save(output_path)
    logger.info("Results Excel exported to %s", output_path)


def _style_header(ws) -> None:
    """Bold the header row."""
    for cell in ws[1]:
        cell.font = Font(bold=True)
