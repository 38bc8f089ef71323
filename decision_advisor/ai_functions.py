import logging
from datetime import datetime, timezone
from typing import Optional

import openai
from openai import AsyncOpenAI
from openinference.semconv.trace import SpanAttributes
from opentelemetry import trace

from decision_advisor.config import (
    MAX_OUTPUT_TOKENS,
    TEMPERATURE,
    TOP_K,
    TOP_P,
    Settings,
)
from decision_advisor.errors import (
    MalformedModelOutput,
    ModelErrorKind,
    ModelInvocationError,
)
from decision_advisor.models import DecisionAnalysis, DecisionRequest
from decision_advisor.normalizer import analysis_from_model_text, build_fallback_analysis
from decision_advisor.prompts import ANALYSIS_PROMPT, build_analysis_prompt

logger = logging.getLogger(__name__)


def utc_timestamp() -> str:
    """Current time as ISO-8601 UTC with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def classify_model_error(error: Exception) -> ModelErrorKind:
    """
    Decide what kind of failure an SDK exception represents.

    Typed SDK errors are checked first. Anything else is classified by its
    message, since OpenAI-compatible providers don't all use the same status
    codes for quota and credential problems.
    """
    if isinstance(error, openai.APITimeoutError):
        return ModelErrorKind.TIMEOUT
    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError)):
        return ModelErrorKind.UNAUTHORIZED
    if isinstance(error, openai.RateLimitError):
        return ModelErrorKind.RATE_LIMITED

    message = str(error).lower()
    if "api key" in message:
        return ModelErrorKind.UNAUTHORIZED
    if "quota" in message or "limit" in message:
        return ModelErrorKind.RATE_LIMITED
    if "timeout" in message or "timed out" in message:
        return ModelErrorKind.TIMEOUT
    return ModelErrorKind.OTHER


class GenerativeModelClient:
    """
    Sends a prompt to an OpenAI-compatible chat completions endpoint and
    returns the generated text. SDK failures are re-raised as
    ModelInvocationError with the original message.
    """

    def __init__(self, client: AsyncOpenAI, model: str):
        self.client = client
        self.model = model

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["GenerativeModelClient"]:
        """Build a client from settings, or return None when no API key is configured."""
        if not settings.ai_configured:
            return None
        client_kwargs: dict = {
            "base_url": settings.base_url,
            "api_key": settings.api_key,
            "max_retries": 0,
        }
        if settings.model_timeout:
            client_kwargs["timeout"] = settings.model_timeout
        return cls(AsyncOpenAI(**client_kwargs), settings.model)

    async def generate(self, prompt: str) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                temperature=TEMPERATURE,
                top_p=TOP_P,
                max_tokens=MAX_OUTPUT_TOKENS,
                extra_body={"top_k": TOP_K},
            )
        except openai.OpenAIError as e:
            raise ModelInvocationError(classify_model_error(e), str(e)) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""


async def analyze_decision(
    request: DecisionRequest, model_client: GenerativeModelClient
) -> DecisionAnalysis:
    """
    Run one scenario through the model and normalize the answer.

    ModelInvocationError propagates to the caller. Unparseable model text is
    replaced with the fallback analysis.
    """
    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("analyze_decision") as span:
        prompt = build_analysis_prompt(request)
        span.set_attribute(SpanAttributes.OPENINFERENCE_SPAN_KIND, "LLM")
        span.set_attribute(SpanAttributes.LLM_PROMPT_TEMPLATE, ANALYSIS_PROMPT)
        span.set_attribute(SpanAttributes.INPUT_VALUE, prompt)

        text = await model_client.generate(prompt)
        span.set_attribute(SpanAttributes.OUTPUT_VALUE, text)

    timestamp = utc_timestamp()
    try:
        return analysis_from_model_text(text, request, timestamp)
    except MalformedModelOutput as e:
        logger.error("Failed to parse model response: %s", e)
        logger.info("Raw response: %s", e.raw_response)
        return build_fallback_analysis(request, timestamp)
