"""Per-field company research: one web-search LLM call per registered field."""

import asyncio
import logging
from typing import Iterable

from company_research.agents.envelope import envelope_json_schema, parse_envelope
from company_research.agents.models import ResponseEnvelope
from company_research.agents.summary import build_research_summary
from company_research.core.errors import MalformedResponse, ResearchError
from company_research.core.fields import FIELDS, FieldDefinition, get_field
from company_research.core.usage import UsageTracker

logger = logging.getLogger(__name__)

# ── Field Research ───────────────────────────────────────────────────


async def research_field(
    company_name: str,
    field_key: str,
    *,
    llm,
    tracker: UsageTracker,
) -> ResponseEnvelope:
    """Ask the LLM one field's question about a company and validate the reply.

    ``llm`` is any object with an async ``call(prompt, schema_name, schema)``
    returning an ``LLMReply``. Usage is recorded as soon as the reply
    arrives, so rejected replies are still counted.

    Raises SchemaViolation, MalformedResponse, or whatever the LLM client
    raises (TransportFailure for the OpenAI client).
    """
    definition = get_field(field_key)
    prompt = definition.build_prompt(company_name)

    try:
        reply = await llm.call(prompt, field_key, envelope_json_schema(field_key))
    except MalformedResponse as exc:
        # The call completed and was billed even though it carried no answer
        if exc.usage is not None:
            tracker.add_usage(exc.usage)
        raise
    tracker.add_usage(reply.usage)
    logger.debug("%s / %s raw reply: %s", company_name, field_key, reply.raw_text)

    return parse_envelope(field_key, reply.raw_text)


# ── Company Research ─────────────────────────────────────────────────


async def research_all_fields(
    company_name: str,
    *,
    llm,
    tracker: UsageTracker,
    fields: Iterable[FieldDefinition] = FIELDS,
) -> tuple[dict[str, ResponseEnvelope], dict[str, str]]:
    """Research every field concurrently.

    Returns (envelopes, errors): successful envelopes by field key and a
    ``"<ErrorType>: <message>"`` string for each failed field.
    """
    keys = [f.key for f in fields]
    outcomes = await asyncio.gather(
        *(research_field(company_name, key, llm=llm, tracker=tracker) for key in keys),
        return_exceptions=True,
    )

    envelopes: dict[str, ResponseEnvelope] = {}
    errors: dict[str, str] = {}
    for key, outcome in zip(keys, outcomes):
        if isinstance(outcome, Exception):
            logger.warning("%s: field '%s' failed: %s", company_name, key, outcome)
            errors[key] = f"{type(outcome).__name__}: {outcome}"
        elif isinstance(outcome, BaseException):
            raise outcome
        else:
            envelopes[key] = outcome
    return envelopes, errors


async def research_company(
    name: str,
    domain: str | None = None,
    *,
    llm,
    tracker: UsageTracker,
    fields: Iterable[FieldDefinition] = FIELDS,
) -> dict:
    """Research all fields for one company and merge them into one record.

    Best-effort: a failed field is left out and its reason recorded under
    ``_fieldErrors``. Raises ResearchError only when every field failed.
    """
    fields = tuple(fields)
    logger.info("Researching %s (domain: %s)", name, domain or "-")

    envelopes, errors = await research_all_fields(
        name, llm=llm, tracker=tracker, fields=fields
    )
    if fields and not envelopes:
        first_key = next(iter(errors))
        raise ResearchError(
            f"All {len(fields)} fields failed for {name}; "
            f"{first_key}: {errors[first_key]}"
        )

    result: dict = {"name": name}
    if domain is not None:
        result["domain"] = domain
    for definition in fields:
        if definition.key in envelopes:
            result[definition.key] = envelopes[definition.key].model_dump()

    result["research_summary"] = build_research_summary(result, fields)
    if errors:
        result["_fieldErrors"] = errors

    logger.info(
        "Researched %s: %d/%d fields, %d known",
        name,
        len(envelopes),
        len(fields),
        sum(1 for e in envelopes.values() if e.is_known),
    )
    return result
