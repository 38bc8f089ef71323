"""Pydantic models for request/response validation."""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

RiskLevel = Literal["Low", "Medium", "High"]


def utf8_safe(text: str) -> str:
    """Replace code points that cannot be encoded as UTF-8 (lone surrogates) with '?'."""
    return text.encode("utf-8", "replace").decode("utf-8")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DecisionRequest(BaseModel):
    """A validated decision scenario."""

    question: str
    options: List[str] = []
    category: str = "general"
    priority: str = "medium"
    context: str = ""


class OptionAnalysis(CamelModel):
    option: str = "Recommended Approach"
    is_recommended: bool = False
    pros: List[str] = Field(default=[], max_length=3)
    cons: List[str] = Field(default=[], max_length=3)
    risk_level: RiskLevel = "Medium"
    time_to_results: str = "Medium term"
    implementation_difficulty: str = "Moderate"


class DecisionAnalysis(CamelModel):
    """The normalized analysis returned to callers. Every field is always present."""

    recommendation: str = Field(min_length=1)
    confidence: int = Field(ge=65, le=95)
    reasoning: str
    pros_and_cons: List[OptionAnalysis] = []
    additional_considerations: List[str] = Field(default=[], max_length=5)
    alternative_approach: Optional[str] = None
    next_steps: List[str] = Field(default=[], max_length=3)
    timestamp: str
    category: str
    priority: str


class RawOptionAnalysis(CamelModel):
    """One entry of `detailedAnalysis` exactly as the model sent it."""

    option: Any = None
    is_recommended: Any = None
    pros: Any = None
    cons: Any = None
    risk_level: Any = None
    time_to_results: Any = None
    implementation_difficulty: Any = None


class RawDecisionAnalysis(CamelModel):
    """The model's JSON answer before normalization. Nothing here is guaranteed."""

    quick_recommendation: Any = None
    confidence: Any = None
    reasoning: Any = None
    detailed_analysis: Any = None
    additional_considerations: Any = None
    alternative_approach: Any = None
    next_steps: Any = None


class AnalyzeDecisionResponse(BaseModel):
    success: bool = True
    data: DecisionAnalysis


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None


class HealthResponse(CamelModel):
    status: str = "OK"
    timestamp: str
    service: str
    ai_configured: bool
    model: str
