"""Normalization of raw batch input objects to a company name and domain."""

from typing import Any

from company_research.core.config import DEFAULT_KEY_MAPPING, KeyMapping
from company_research.core.errors import NormalizationError


def normalize_company_input(
    raw: dict[str, Any], key_mapping: KeyMapping = DEFAULT_KEY_MAPPING
) -> tuple[str, str | None]:
    """Read (name, domain) from ``raw`` using the configured keys.

    The name is converted to ``str`` but not trimmed; a missing, null or
    blank name raises NormalizationError. The domain is optional, trimmed,
    and an empty domain becomes None.
    """
    if not isinstance(raw, dict):
        raise NormalizationError(
            f"Company input must be an object, got {type(raw).__name__}"
        )

    name_value = raw.get(key_mapping.name_key)
    if name_value is None:
        raise NormalizationError(
            f"Missing required field '{key_mapping.name_key}' in company input"
        )

    name = str(name_value)
    if not name.strip():
        raise NormalizationError(
            f"Field '{key_mapping.name_key}' cannot be empty in company input"
        )

    domain_value = raw.get(key_mapping.domain_key)
    domain = str(domain_value).strip() if domain_value is not None else ""
    return name, domain or None
