"""Checks an inbound decision scenario before anything is sent to the model."""

from typing import Any, Collection

from decision_advisor.config import DEFAULT_MAX_QUESTION_LENGTH
from decision_advisor.errors import ValidationError
from decision_advisor.models import DecisionRequest, utf8_safe
from decision_advisor.prompts import CATEGORY_CONTEXT, PRIORITY_CONTEXT

MAX_OPTIONS = 5


def _clean_options(options: Any) -> list[str]:
    if not isinstance(options, list):
        return []
    cleaned = [
        utf8_safe(o.strip()) for o in options if isinstance(o, str) and o.strip()
    ]
    return cleaned[:MAX_OPTIONS]


def _tag_or_default(value: Any, default: str, known: Collection[str]) -> str:
    """Known tags are matched case-insensitively; anything else is echoed as sent."""
    if not isinstance(value, str) or not value.strip():
        return default
    value = utf8_safe(value.strip())
    return value.lower() if value.lower() in known else value


def validate_decision_request(
    payload: Any, max_question_length: int = DEFAULT_MAX_QUESTION_LENGTH
) -> DecisionRequest:
    """
    Validate a raw JSON payload and return a normalized DecisionRequest.

    Raises ValidationError when the question is missing, blank, or longer than
    max_question_length characters. Options, category, priority and context
    fall back to [], "general", "medium" and "" when absent. Context is kept
    verbatim.
    """
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")

    question = payload.get("question")
    if not isinstance(question, str) or not question.strip():
        raise ValidationError("Question is required")

    if len(question) > max_question_length:
        raise ValidationError(
            f"Question too long. Please keep it under {max_question_length} characters."
        )

    context = payload.get("context")
    return DecisionRequest(
        question=utf8_safe(question.strip()),
        options=_clean_options(payload.get("options")),
        category=_tag_or_default(payload.get("category"), "general", CATEGORY_CONTEXT),
        priority=_tag_or_default(payload.get("priority"), "medium", PRIORITY_CONTEXT),
        context=utf8_safe(context) if isinstance(context, str) else "",
    )
