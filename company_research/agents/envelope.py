"""Validation of raw LLM replies into typed response envelopes."""

import json
from typing import Any

from pydantic import ValidationError

from company_research.agents.models import ResponseEnvelope, envelope_model
from company_research.core.errors import MalformedResponse, SchemaViolation

# ── Validation ───────────────────────────────────────────────────────


def envelope_json_schema(field_key: str) -> dict:
    """JSON schema the model must follow when answering ``field_key``."""
    return envelope_model(field_key).model_json_schema()


def validate_envelope(field_key: str, data: Any) -> ResponseEnvelope:
    """Validate parsed JSON against the field's envelope without coercion.

    Raises SchemaViolation for missing, mistyped or out-of-range attributes,
    for values outside the field's closed set and for unexpected keys.
    """
    model = envelope_model(field_key)
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in exc.errors()
        )
        raise SchemaViolation(field_key, problems) from exc


# ── Parsing ──────────────────────────────────────────────────────────


def parse_envelope(field_key: str, raw_text: str) -> ResponseEnvelope:
    """Parse raw reply text as JSON and validate it for ``field_key``."""
    try:
        data = json.loads(raw_text)
    except (TypeError, json.JSONDecodeError) as exc:
        raise MalformedResponse(
            f"Reply for '{field_key}' is not valid JSON: {exc}"
        ) from exc

    if not isinstance(data, dict):
        raise MalformedResponse(
            f"Reply for '{field_key}' is a JSON {type(data).__name__}, expected an object"
        )

    return validate_envelope(field_key, data)
