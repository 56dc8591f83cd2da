"""Run configuration: YAML parser, Pydantic models, and key mapping."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from company_research.core.errors import ConfigurationError
from company_research.core.pricing import ServiceTier

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "configs" / "default.yaml"

# ── Key Mapping ──────────────────────────────────────────────────────


class KeyMapping(BaseModel):
    """Which keys of a batch input object hold the company name and domain."""

    model_config = ConfigDict(frozen=True)

    name_key: str = "name"
    domain_key: str = "domain"

    @field_validator("name_key", "domain_key")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Key names cannot be empty")
        return v


DEFAULT_KEY_MAPPING = KeyMapping()


def create_key_mapping(
    name_key: str | None = None, domain_key: str | None = None
) -> KeyMapping:
    """Build a KeyMapping, falling back to the defaults for missing keys."""
    return KeyMapping(
        name_key=name_key if name_key is not None else DEFAULT_KEY_MAPPING.name_key,
        domain_key=domain_key if domain_key is not None else DEFAULT_KEY_MAPPING.domain_key,
    )


# ── Run Config ───────────────────────────────────────────────────────


class ResearchConfig(BaseModel):
    """Settings for one research run."""

    model: str = "gpt-5-mini"
    service_tier: ServiceTier = "flex"
    concurrency: int = Field(default=2, ge=1, description="Companies researched at once")
    key_mapping: KeyMapping = Field(default_factory=KeyMapping)
    request_timeout: float = Field(default=600.0, gt=0, description="Seconds per LLM call")
    max_retries: int = Field(default=3, ge=0)
    retry_delay_base: float = Field(default=1.0, ge=0)
    requests_per_minute: Optional[int] = Field(default=None, ge=1)
    web_search: bool = True

    def with_overrides(self, **overrides) -> "ResearchConfig":
        """Return a validated copy with every non-None override applied."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        try:
            return ResearchConfig.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc


# ── Loading ──────────────────────────────────────────────────────────


def load_research_config(path: str | Path | None = None) -> ResearchConfig:
    """Load a YAML run config from disk and return a validated model."""
    path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    try:
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read config file {path}: {exc}") from exc

    try:
        return ResearchConfig.model_validate(raw)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc


# ── Credentials ──────────────────────────────────────────────────────


def load_api_key(env_var: str = "OPENAI_API_KEY") -> str:
    """Read the OpenAI API key from the environment."""
    key = os.getenv(env_var, "").strip()
    if not key:
        raise ConfigurationError(f"{env_var} is not set")
    return key
