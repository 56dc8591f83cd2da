"""Shared data models for field research replies."""

from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, create_model

from company_research.core.fields import get_field


class ResponseEnvelope(BaseModel):
    """Validated answer to one research field.

    Subclasses generated by :func:`envelope_model` add exactly one extra
    attribute named after the field, holding the typed value.
    """

    model_config = ConfigDict(extra="forbid", strict=True)

    explanation: str
    certainty_score: float = Field(ge=0.0, le=1.0)
    sources: list[str]

    @property
    def field_key(self) -> str:
        return next(k for k in type(self).model_fields if k not in _BASE_KEYS)

    @property
    def value(self) -> Any:
        return getattr(self, self.field_key)

    @property
    def is_known(self) -> bool:
        return self.value != "unknown"


_BASE_KEYS = frozenset(ResponseEnvelope.model_fields)


@lru_cache(maxsize=None)
def envelope_model(field_key: str) -> type[ResponseEnvelope]:
    """Build (once) the envelope model for a registered field."""
    definition = get_field(field_key)
    return create_model(
        f"{field_key}_envelope",
        __base__=ResponseEnvelope,
        **{field_key: (definition.value_type, ...)},
    )
