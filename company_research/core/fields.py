"""Research field registry: one prompt and one value shape per question."""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Annotated, Any, Callable, Literal

from pydantic import Field

# ── Value Shapes ─────────────────────────────────────────────────────

Count = Annotated[int, Field(ge=0)] | Literal["unknown"]

Practice = Literal["established", "emerging", "none", "unknown"]

EamTool = Literal[
    "LeanIX",
    "Ardoq",
    "Alfabet",
    "ADOIT",
    "LUY",
    "Bee360",
    "MEGA HOPEX",
    "BiZZdesign",
    "Sparx Enterprise Architect",
    "Avolution ABACUS",
    "other",
    "none",
    "unknown",
]

ItsmTool = Literal[
    "ServiceNow ITSM",
    "Jira Service Management",
    "BMC Helix ITSM",
    "Ivanti Neurons for ITSM",
    "TOPdesk",
    "Freshservice",
    "Matrix42",
    "OTRS",
    "Zendesk",
    "other",
    "none",
    "unknown",
]

SamTool = Literal[
    "Flexera",
    "Snow Software",
    "ServiceNow SAM Pro",
    "USU",
    "Matrix42",
    "Ivanti",
    "Aspera",
    "Certero",
    "other",
    "none",
    "unknown",
]


# ── Prompts ──────────────────────────────────────────────────────────

_ANSWER_RULES = (
    "Use web search to find current, verifiable information. "
    'Put your answer under the "{key}" key. If no reliable information can be '
    'found, answer "unknown" instead of guessing. Also give a short '
    "explanation, a certainty_score between 0 and 1, and the URLs of the "
    "sources you used."
)


def _ask(key: str, question: str) -> Callable[[str], str]:
    """Return a prompt builder for ``question`` (``{company}`` placeholder)."""
    rules = _ANSWER_RULES.format(key=key)

    def build(company: str) -> str:
        return f"{question.format(company=company)}\n\n{rules}"

    return build


# ── Field Definitions ────────────────────────────────────────────────

_WORD_START_RE = re.compile(r"\b\w")


@dataclass(frozen=True)
class FieldDefinition:
    """A single research question about a company."""

    key: str
    prompt: Callable[[str], str]
    value_type: Any
    currency: str | None = None

    @property
    def label(self) -> str:
        """``eam_tool`` -> ``Eam Tool``."""
        return _WORD_START_RE.sub(lambda m: m.group(0).upper(), self.key.replace("_", " "))

    def build_prompt(self, company: str) -> str:
        return self.prompt(company)


FIELDS: tuple[FieldDefinition, ...] = (
    FieldDefinition(
        key="employees",
        prompt=_ask(
            "employees",
            "What is the most recent figure of the employees of {company}?",
        ),
        value_type=Count,
    ),
    FieldDefinition(
        key="revenue",
        prompt=_ask(
            "revenue",
            "What is the most recent figure of the annual revenue of {company} in euros?",
        ),
        value_type=Count,
        currency="€",
    ),
    FieldDefinition(
        key="eam_tool",
        prompt=_ask(
            "eam_tool",
            "Which, if any, Enterprise Architecture Management (EAM) tool does "
            "the company {company} use?",
        ),
        value_type=EamTool,
    ),
    FieldDefinition(
        key="eam_practice",
        prompt=_ask(
            "eam_practice",
            "Does {company} have an enterprise architecture (EA) department? "
            "It is often also called Business Architecture, IT Enterprise "
            "Architecture or Unternehmensarchitektur.",
        ),
        value_type=Practice,
    ),
    FieldDefinition(
        key="itBp_practice",
        prompt=_ask(
            "itBp_practice",
            "Does {company} have the role of IT Business Partner or IT Demand "
            "Manager? It is sometimes also referred to as IT Business "
            "Relationship Manager or Requirements Engineer.",
        ),
        value_type=Practice,
    ),
    FieldDefinition(
        key="itsm_tool",
        prompt=_ask(
            "itsm_tool",
            "Which, if any, IT Service Management (ITSM) tool does the company "
            "{company} use?",
        ),
        value_type=ItsmTool,
    ),
    FieldDefinition(
        key="sam_practice",
        prompt=_ask(
            "sam_practice",
            "Does {company} have a Software Asset Management (SAM) department? "
            "It is often also called IT License Management.",
        ),
        value_type=Practice,
    ),
    FieldDefinition(
        key="sam_tool",
        prompt=_ask(
            "sam_tool",
            "Which, if any, Software Asset Management (SAM) tool does the "
            "company {company} use?",
        ),
        value_type=SamTool,
    ),
)


# ── Registry ─────────────────────────────────────────────────────────

FIELD_REGISTRY: MappingProxyType[str, FieldDefinition] = MappingProxyType(
    {f.key: f for f in FIELDS}
)
FIELD_KEYS: tuple[str, ...] = tuple(FIELD_REGISTRY)


def get_field(key: str) -> FieldDefinition:
    """Look up a registered field, raising ``KeyError`` for unknown keys."""
    try:
        return FIELD_REGISTRY[key]
    except KeyError:
        raise KeyError(f"Unknown research field: {key}") from None
