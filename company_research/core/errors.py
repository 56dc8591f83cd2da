"""Exception hierarchy for field, company and batch research."""


class ResearchError(Exception):
    """Base class for every error raised by the research engine."""


class SchemaViolation(ResearchError):
    """An LLM reply parsed as JSON but failed envelope validation."""

    def __init__(self, field_key: str, message: str):
        self.field_key = field_key
        super().__init__(f"Invalid '{field_key}' response: {message}")


class MalformedResponse(ResearchError):
    """An LLM reply could not be parsed as a JSON object.

    ``usage`` carries the token counts of a completed call whose reply held
    no usable text (incomplete or refused), so they can still be billed.
    """

    def __init__(self, message: str, usage=None):
        self.usage = usage
        super().__init__(message)


class TransportFailure(ResearchError):
    """The LLM service could not be reached or answered with an error."""


class NormalizationError(ResearchError):
    """A batch input item lacks a usable company name."""


class ConfigurationError(ResearchError, ValueError):
    """Invalid settings; raised before any research starts."""


class InputFileError(ResearchError):
    """A batch input file is not a JSON array of company objects."""
