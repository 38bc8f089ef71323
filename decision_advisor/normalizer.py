"""Turns raw model text into a DecisionAnalysis.

The model is asked for JSON but nothing about its answer is guaranteed: it
may wrap the JSON in Markdown fences, omit fields, send the wrong types or
send far too many list entries. Parsing is permissive (see
RawDecisionAnalysis) and normalization is total, so every field of the
returned DecisionAnalysis is always present and within bounds.
"""

import json
import logging
import math
import re
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from decision_advisor.errors import MalformedModelOutput
from decision_advisor.models import (
    DecisionAnalysis,
    DecisionRequest,
    OptionAnalysis,
    RawDecisionAnalysis,
    RawOptionAnalysis,
    utf8_safe,
)

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 65
MAX_CONFIDENCE = 95
DEFAULT_CONFIDENCE = 75

MAX_PROS = 3
MAX_CONS = 3
MAX_CONSIDERATIONS = 5
MAX_NEXT_STEPS = 3

DEFAULT_RECOMMENDATION = (
    "I recommend taking time to carefully analyze all factors before deciding."
)
DEFAULT_REASONING = "This decision requires careful consideration of multiple factors."
DEFAULT_OPTION_LABEL = "Recommended Approach"
DEFAULT_RISK_LEVEL = "Medium"
DEFAULT_TIME_TO_RESULTS = "Medium term"
DEFAULT_DIFFICULTY = "Moderate"

_RISK_LEVELS = {"low": "Low", "medium": "Medium", "high": "High"}
_FENCE = re.compile(r"```[\w+-]*[ \t]*\r?\n?")


def strip_code_fences(text: str) -> str:
    """Remove Markdown code fence markers (```json, ``` ...) and surrounding whitespace."""
    return _FENCE.sub("", text).strip()


def parse_model_output(text: Optional[str]) -> RawDecisionAnalysis:
    """Parse model text into the permissive intermediate structure.

    Raises:
        MalformedModelOutput: the text is not JSON, or its top level is not an object.
    """
    cleaned = strip_code_fences(text or "")
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise MalformedModelOutput(
            stage="json_parse", errors=[str(exc)], raw_response=text
        ) from exc

    if not isinstance(data, dict):
        raise MalformedModelOutput(
            stage="schema",
            errors=["top-level JSON must be an object"],
            raw_response=text,
        )

    try:
        return RawDecisionAnalysis.model_validate(data)
    except PydanticValidationError as exc:
        raise MalformedModelOutput(
            stage="schema", errors=[str(exc)], raw_response=text
        ) from exc


def _text(value: Any, default: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return utf8_safe(value.strip())
    return default


def _text_list(value: Any, limit: int) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [
        utf8_safe(item.strip())
        for item in value
        if isinstance(item, str) and item.strip()
    ]
    return items[:limit]


def clamp_confidence(value: Any) -> int:
    """Coerce a raw confidence to an int in [65, 95], using 75 when it is not a number."""
    number: Any = None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            number = None

    if number is None or (isinstance(number, float) and not math.isfinite(number)):
        number = DEFAULT_CONFIDENCE
    return int(min(max(round(number), MIN_CONFIDENCE), MAX_CONFIDENCE))


def _risk_level(value: Any) -> str:
    if isinstance(value, str):
        return _RISK_LEVELS.get(value.strip().lower(), DEFAULT_RISK_LEVEL)
    return DEFAULT_RISK_LEVEL


def normalize_option(raw: RawOptionAnalysis) -> OptionAnalysis:
    return OptionAnalysis(
        option=_text(raw.option, DEFAULT_OPTION_LABEL),
        is_recommended=raw.is_recommended is True,
        pros=_text_list(raw.pros, MAX_PROS),
        cons=_text_list(raw.cons, MAX_CONS),
        risk_level=_risk_level(raw.risk_level),
        time_to_results=_text(raw.time_to_results, DEFAULT_TIME_TO_RESULTS),
        implementation_difficulty=_text(
            raw.implementation_difficulty, DEFAULT_DIFFICULTY
        ),
    )


def normalize_analysis(
    raw: RawDecisionAnalysis, request: DecisionRequest, timestamp: str
) -> DecisionAnalysis:
    """Map the raw model answer onto the total DecisionAnalysis shape.

    Output depends only on the arguments; the timestamp is supplied by the
    caller so the same input always normalizes to the same record.
    """
    entries = raw.detailed_analysis if isinstance(raw.detailed_analysis, list) else []
    options = [
        normalize_option(RawOptionAnalysis.model_validate(entry))
        for entry in entries
        if isinstance(entry, dict)
    ]

    recommended = sum(1 for option in options if option.is_recommended)
    if options and recommended != 1:
        # Left as-is; callers render whatever the model marked.
        logger.warning(
            "Model marked %d of %d options as recommended", recommended, len(options)
        )

    return DecisionAnalysis(
        recommendation=_text(raw.quick_recommendation, DEFAULT_RECOMMENDATION),
        confidence=clamp_confidence(raw.confidence),
        reasoning=_text(raw.reasoning, DEFAULT_REASONING),
        pros_and_cons=options,
        additional_considerations=_text_list(
            raw.additional_considerations, MAX_CONSIDERATIONS
        ),
        alternative_approach=_text(raw.alternative_approach, None),
        next_steps=_text_list(raw.next_steps, MAX_NEXT_STEPS),
        timestamp=timestamp,
        category=request.category,
        priority=request.priority,
    )


def analysis_from_model_text(
    text: Optional[str], request: DecisionRequest, timestamp: str
) -> DecisionAnalysis:
    """Parse and normalize model text. Raises MalformedModelOutput if it is not a JSON object."""
    return normalize_analysis(parse_model_output(text), request, timestamp)


def _fallback_time_to_results(priority: str) -> str:
    if priority == "critical":
        return "Short term"
    if priority == "low":
        return "Long term"
    return "Medium term"


def build_fallback_analysis(request: DecisionRequest, timestamp: str) -> DecisionAnalysis:
    """The static analysis returned when the model's answer cannot be parsed."""
    priority = request.priority
    category = request.category
    return DecisionAnalysis(
        recommendation=(
            f"For this {priority} priority {category} decision, I recommend taking "
            "a structured approach to evaluate your options."
        ),
        confidence=DEFAULT_CONFIDENCE,
        reasoning=(
            "A systematic evaluation approach reduces decision-making errors and "
            f"increases satisfaction with outcomes, especially for {category} "
            f"decisions at {priority} priority."
        ),
        pros_and_cons=[
            OptionAnalysis(
                option="Systematic Decision Analysis",
                is_recommended=True,
                pros=[
                    "Reduces emotional bias in decision-making",
                    "Ensures all important factors are considered",
                    "Provides a clear framework for evaluation",
                ],
                cons=[
                    "May take more time than intuitive decisions",
                    "Could lead to analysis paralysis if overthought",
                    "May not account for gut feelings and intuition",
                ],
                risk_level="Low",
                time_to_results=_fallback_time_to_results(priority),
                implementation_difficulty="Easy",
            )
        ],
        additional_considerations=[
            "Consider seeking input from trusted advisors",
            f"Evaluate alignment with your long-term {category} goals",
            "Assess the reversibility of the decision",
        ],
        alternative_approach=(
            "Consider using a decision matrix to score each option against your "
            "key criteria."
        ),
        next_steps=[
            "List the criteria that matter most for this decision",
            "Score each option against those criteria",
            f"Set a deadline that fits the {priority} priority of this decision",
        ],
        timestamp=timestamp,
        category=category,
        priority=priority,
    )
