"""
AI Decision Maker - structured analysis of a single decision scenario
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from decision_advisor.ai_functions import (
    GenerativeModelClient,
    analyze_decision,
    utc_timestamp,
)
from decision_advisor.config import Settings, load_settings
from decision_advisor.errors import ModelErrorKind, ModelInvocationError, ValidationError
from decision_advisor.instrumentor import initiate_tracing
from decision_advisor.models import AnalyzeDecisionResponse, ErrorResponse, HealthResponse
from decision_advisor.validation import validate_decision_request

logger = logging.getLogger(__name__)

SERVICE_NAME = "AI Decision Maker"

# status code, error, user-facing message
MODEL_ERROR_RESPONSES = {
    ModelErrorKind.UNAUTHORIZED: (
        500,
        "AI service configuration error",
        "Please check API configuration",
    ),
    ModelErrorKind.RATE_LIMITED: (
        429,
        "Service temporarily unavailable",
        "Please try again in a few moments",
    ),
    ModelErrorKind.TIMEOUT: (
        408,
        "Request timeout",
        "The analysis took too long. Please try again.",
    ),
    ModelErrorKind.OTHER: (
        500,
        "Failed to analyze decision",
        "Please try again or contact support if the problem persists",
    ),
}

router = APIRouter()


def error_response(status_code: int, error: str, message: Optional[str] = None):
    body = ErrorResponse(error=error, message=message).model_dump(exclude_none=True)
    return JSONResponse(content=body, status_code=status_code)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_model_client(request: Request) -> Optional[GenerativeModelClient]:
    return request.app.state.model_client


@router.get("/api/health")
def health(
    settings: Settings = Depends(get_settings),
    model_client: Optional[GenerativeModelClient] = Depends(get_model_client),
):
    response = HealthResponse(
        timestamp=utc_timestamp(),
        service=SERVICE_NAME,
        ai_configured=model_client is not None,
        model=settings.model,
    )
    return response.model_dump(by_alias=True)


@router.post("/api/analyze-decision")
async def analyze(
    request: Request,
    settings: Settings = Depends(get_settings),
    model_client: Optional[GenerativeModelClient] = Depends(get_model_client),
):
    """Validate a scenario, run it through the model and return the normalized analysis."""
    try:
        data = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return error_response(400, "Request body must be valid JSON")

    try:
        decision = validate_decision_request(data, settings.max_question_length)
    except ValidationError as e:
        return error_response(400, str(e))

    if model_client is None:
        logger.error("Decision analysis requested but no model API key is configured")
        return error_response(
            500, "AI service configuration error", "AI service API key is not configured"
        )

    logger.info(
        "Processing decision analysis... category=%s priority=%s has_options=%s",
        decision.category,
        decision.priority,
        bool(decision.options),
    )

    try:
        analysis = await analyze_decision(decision, model_client)
    except ModelInvocationError as e:
        logger.error("Error analyzing decision (%s): %s", e.kind.value, e.message)
        status_code, error, message = MODEL_ERROR_RESPONSES[e.kind]
        return error_response(status_code, error, message)

    return JSONResponse(
        content=AnalyzeDecisionResponse(data=analysis).model_dump(by_alias=True)
    )


async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Server error: %s", exc)
    return error_response(
        500,
        "Internal server error",
        "Something went wrong on our end. Please try again.",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Tracing starts with the server, not on import
    initiate_tracing(app.state.settings)
    yield


def create_app(
    settings: Optional[Settings] = None,
    model_client: Optional[GenerativeModelClient] = None,
) -> FastAPI:
    """
    Build the FastAPI app.

    The model client is created once here and shared by every request; pass
    one in to override the client built from settings.
    """
    settings = settings or load_settings()
    if model_client is None:
        model_client = GenerativeModelClient.from_settings(settings)

    app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.model_client = model_client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )
    app.add_exception_handler(Exception, unhandled_error)
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    settings = load_settings()
    logger.info("%s starting on port %s", SERVICE_NAME, settings.port)
    logger.info("Model API configured: %s", "Yes" if settings.ai_configured else "No")
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
