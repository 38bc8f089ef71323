import asyncio
import json
import re
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from decision_advisor.ai_functions import (
    GenerativeModelClient,
    analyze_decision,
    classify_model_error,
    utc_timestamp,
)
from decision_advisor.config import Settings
from decision_advisor.errors import ModelErrorKind, ModelInvocationError

REQUEST = httpx.Request("POST", "https://openrouter.ai/api/v1/chat/completions")


def status_error(cls, status_code, message):
    return cls(message, response=httpx.Response(status_code, request=REQUEST), body=None)


@pytest.fixture
def mock_completion():
    """Create a mock chat completion response."""
    mock_response = MagicMock()
    mock_response.choices = [MagicMock()]
    mock_response.choices[0].message.content = '{"quickRecommendation": "Go."}'
    return mock_response


@pytest.mark.parametrize(
    "error, kind",
    [
        (openai.APITimeoutError(request=REQUEST), ModelErrorKind.TIMEOUT),
        (status_error(openai.AuthenticationError, 401, "Invalid key"), ModelErrorKind.UNAUTHORIZED),
        (status_error(openai.RateLimitError, 429, "Slow down"), ModelErrorKind.RATE_LIMITED),
        (Exception("API key not valid. Please pass a valid API key."), ModelErrorKind.UNAUTHORIZED),
        (Exception("You exceeded your current quota"), ModelErrorKind.RATE_LIMITED),
        (Exception("Rate limit reached"), ModelErrorKind.RATE_LIMITED),
        (Exception("Upstream timeout"), ModelErrorKind.TIMEOUT),
        (Exception("Internal error"), ModelErrorKind.OTHER),
    ],
)
def test_classify_model_error(error, kind):
    assert classify_model_error(error) == kind


def test_from_settings_without_key_returns_none():
    assert GenerativeModelClient.from_settings(Settings(api_key=None)) is None


def test_from_settings_disables_retries():
    model_client = GenerativeModelClient.from_settings(
        Settings(api_key="test-key", model="google/gemini-2.0-flash-001")
    )
    assert model_client.model == "google/gemini-2.0-flash-001"
    assert model_client.client.max_retries == 0


def test_generate_sends_fixed_generation_parameters(mock_completion):
    sdk_client = MagicMock()
    sdk_client.chat.completions.create = AsyncMock(return_value=mock_completion)
    model_client = GenerativeModelClient(sdk_client, "test-model")

    text = asyncio.run(model_client.generate("Prompt text"))

    assert text == '{"quickRecommendation": "Go."}'
    kwargs = sdk_client.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"] == [{"role": "user", "content": "Prompt text"}]
    assert kwargs["temperature"] == 0.7
    assert kwargs["top_p"] == 0.95
    assert kwargs["max_tokens"] == 2048
    assert kwargs["extra_body"] == {"top_k": 40}


def test_generate_returns_empty_text_for_empty_content(mock_completion):
    mock_completion.choices[0].message.content = None
    sdk_client = MagicMock()
    sdk_client.chat.completions.create = AsyncMock(return_value=mock_completion)

    assert asyncio.run(GenerativeModelClient(sdk_client, "m").generate("p")) == ""


def test_generate_wraps_sdk_errors():
    sdk_client = MagicMock()
    sdk_client.chat.completions.create = AsyncMock(
        side_effect=status_error(openai.RateLimitError, 429, "quota exceeded")
    )

    with pytest.raises(ModelInvocationError) as exc_info:
        asyncio.run(GenerativeModelClient(sdk_client, "m").generate("p"))

    assert exc_info.value.kind == ModelErrorKind.RATE_LIMITED
    assert "quota exceeded" in exc_info.value.message
    assert sdk_client.chat.completions.create.await_count == 1


def test_analyze_decision_normalizes_answer(decision_request, fake_model):
    model_client = fake_model(text=json.dumps({"confidence": 120}))

    analysis = asyncio.run(analyze_decision(decision_request, model_client))

    assert analysis.confidence == 95
    assert analysis.category == "career"
    assert "Should I accept a remote job offer or stay local?" in model_client.prompts[0]


def test_analyze_decision_falls_back_on_malformed_text(decision_request, fake_model):
    model_client = fake_model(text="not json")

    analysis = asyncio.run(analyze_decision(decision_request, model_client))

    assert analysis.pros_and_cons[0].option == "Systematic Decision Analysis"
    assert len(model_client.prompts) == 1


def test_analyze_decision_propagates_model_errors(decision_request, fake_model):
    model_client = fake_model(
        error=ModelInvocationError(ModelErrorKind.TIMEOUT, "Request timed out.")
    )

    with pytest.raises(ModelInvocationError):
        asyncio.run(analyze_decision(decision_request, model_client))
    assert len(model_client.prompts) == 1


def test_utc_timestamp_format():
    assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\d\.\d{3}Z", utc_timestamp())
