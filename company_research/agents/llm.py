"""OpenAI Responses API client with web search and strict JSON output."""

import logging
from typing import Optional

import httpx
from pydantic import BaseModel

from company_research.core.config import ResearchConfig
from company_research.core.errors import ConfigurationError, MalformedResponse, TransportFailure
from company_research.core.rate_limiter import AsyncRateLimiter
from company_research.core.retry import async_retry
from company_research.core.usage import TokenUsage

logger = logging.getLogger(__name__)

RESPONSES_URL = "https://api.openai.com/v1/responses"

# Pricing tier name -> value of the API's ``service_tier`` parameter.
# The batch tier only exists for the asynchronous Batch API.
API_SERVICE_TIERS = {
    "standard": "default",
    "flex": "flex",
    "priority": "priority",
}


class LLMReply(BaseModel):
    """Raw reply text plus the usage counters of one call."""

    raw_text: str
    usage: TokenUsage


# ── Response Parsing ─────────────────────────────────────────────────


def extract_output_text(data: dict) -> str:
    """Concatenate the ``output_text`` parts of all message items."""
    parts: list[str] = []
    refusals: list[str] = []
    for item in data.get("output") or []:
        if item.get("type") != "message":
            continue
        for content in item.get("content") or []:
            if content.get("type") == "output_text":
                parts.append(content.get("text", ""))
            elif content.get("type") == "refusal":
                refusals.append(content.get("refusal", ""))

    if not parts:
        if refusals:
            raise MalformedResponse(f"Model refused to answer: {refusals[0]}")
        raise MalformedResponse(
            f"Response contains no output text (status: {data.get('status')})"
        )
    return "".join(parts)


def extract_usage(data: dict) -> TokenUsage:
    """Map the Responses API usage block onto TokenUsage."""
    usage = data.get("usage") or {}
    return TokenUsage(
        input_tokens=usage.get("input_tokens") or 0,
        cached_tokens=(usage.get("input_tokens_details") or {}).get("cached_tokens") or 0,
        output_tokens=usage.get("output_tokens") or 0,
        reasoning_tokens=(usage.get("output_tokens_details") or {}).get("reasoning_tokens") or 0,
        total_tokens=usage.get("total_tokens") or 0,
    )


# ── Client ───────────────────────────────────────────────────────────


class OpenAIResearchClient:
    """Calls the Responses API once per research question.

    Use as an async context manager; an injected ``client`` is left open.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-5-mini",
        service_tier: str = "flex",
        *,
        web_search: bool = True,
        timeout: float = 600.0,
        max_retries: int = 3,
        retry_delay_base: float = 1.0,
        requests_per_minute: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ConfigurationError("An OpenAI API key is required")
        if service_tier not in API_SERVICE_TIERS:
            raise ConfigurationError(
                f"Service tier '{service_tier}' cannot be used for live requests "
                f"(choose one of: {', '.join(API_SERVICE_TIERS)})"
            )
        self.api_key = api_key
        self.model = model
        self.service_tier = service_tier
        self.web_search = web_search
        self.max_retries = max_retries
        self.retry_delay_base = retry_delay_base
        self._limiter = (
            AsyncRateLimiter(requests_per_minute, name="openai")
            if requests_per_minute
            else None
        )
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_config(
        cls, config: ResearchConfig, api_key: str, client: Optional[httpx.AsyncClient] = None
    ) -> "OpenAIResearchClient":
        return cls(
            api_key,
            model=config.model,
            service_tier=config.service_tier,
            web_search=config.web_search,
            timeout=config.request_timeout,
            max_retries=config.max_retries,
            retry_delay_base=config.retry_delay_base,
            requests_per_minute=config.requests_per_minute,
            client=client,
        )

    async def __aenter__(self) -> "OpenAIResearchClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def build_payload(self, prompt: str, schema_name: str, schema: dict) -> dict:
        payload = {
            "model": self.model,
            "input": prompt,
            "service_tier": API_SERVICE_TIERS[self.service_tier],
            "text": {
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "strict": True,
                    "schema": schema,
                }
            },
        }
        if self.web_search:
            payload["tools"] = [{"type": "web_search"}]
        return payload

    async def _post(self, payload: dict) -> dict:
        if self._limiter is not None:
            await self._limiter.acquire()
        response = await self._client.post(
            RESPONSES_URL,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            json=payload,
        )
        response.raise_for_status()
        return response.json()

    async def call(self, prompt: str, schema_name: str, schema: dict) -> LLMReply:
        """Ask ``prompt`` and return the reply text with its token usage.

        Raises TransportFailure for HTTP and network errors (after retries)
        and MalformedResponse when the response carries no output text.
        """
        payload = self.build_payload(prompt, schema_name, schema)
        try:
            data = await async_retry(
                self._post,
                payload,
                max_retries=self.max_retries,
                delay_base=self.retry_delay_base,
                operation_name=f"openai({schema_name})",
            )
        except httpx.HTTPStatusError as exc:
            raise TransportFailure(
                f"HTTP {exc.response.status_code}: {exc.response.text[:200]}"
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            raise MalformedResponse(f"Response body is not JSON: {exc}") from exc

        usage = extract_usage(data)
        try:
            raw_text = extract_output_text(data)
        except MalformedResponse as exc:
            exc.usage = usage
            raise
        logger.debug("OpenAI reply for %s: %s", schema_name, raw_text)
        return LLMReply(raw_text=raw_text, usage=usage)
