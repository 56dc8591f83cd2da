"""Human-readable summary of a company's research results."""

from typing import Any, Iterable

from company_research.core.fields import FIELDS, FieldDefinition

NO_RESULTS = "No known research results available."


def format_value(definition: FieldDefinition, value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{definition.currency or ''}{value:,}"
    return str(value)


def format_certainty(score: Any) -> str:
    """Whole-number scores print without a decimal part (``1.0`` -> ``1``)."""
    if isinstance(score, float) and score.is_integer():
        return str(int(score))
    return str(score)


def build_research_summary(
    results: dict, fields: Iterable[FieldDefinition] = FIELDS
) -> str:
    """Summarize every known field with its certainty and sources.

    Fields that are missing or answered "unknown" are left out. Pure
    function of ``results``.
    """
    lines: list[str] = []
    for definition in fields:
        envelope = results.get(definition.key)
        if not isinstance(envelope, dict):
            continue
        value = envelope.get(definition.key)
        if value == "unknown":
            continue

        lines.append(f"{definition.label}: {format_value(definition, value)}")
        lines.append(f"Certainty: {format_certainty(envelope.get('certainty_score'))}")
        sources = envelope.get("sources") or []
        if sources:
            lines.append("Sources:")
            lines.extend(f"  - {source}" for source in sources)
        lines.append("")

    if not lines:
        return NO_RESULTS
    return "\n".join(lines).rstrip()
