import logging
import os

import sentry_sdk
from phoenix.otel import register

from decision_advisor.config import Settings

logger = logging.getLogger(__name__)

tracing_initialized = False


def set_hosted_phoenix_instrumentation(api_key: str):
    """Set tracing instrumentation for Phoenix and Arize"""
    os.environ["OTEL_EXPORTER_OTLP_HEADERS"] = f"api_key={api_key}"
    os.environ["PHOENIX_CLIENT_HEADERS"] = f"api_key={api_key}"
    os.environ.setdefault("PHOENIX_COLLECTOR_ENDPOINT", "https://app.phoenix.arize.com")
    # register() picks the endpoint and headers up from the environment
    register(project_name="ai-decision-maker", batch=True, auto_instrument=True)
    logger.info("Phoenix tracing instrumentation set")


def initiate_sentry(dsn: str):
    sentry_sdk.init(
        dsn=dsn,
        traces_sample_rate=1.0,
    )
    logger.info("Sentry initialized")


def initiate_tracing(settings: Settings):
    """Turn on whichever of Sentry and Phoenix are configured. Runs once per process."""
    global tracing_initialized
    if tracing_initialized:
        return
    if settings.sentry_dsn:
        initiate_sentry(settings.sentry_dsn)
    if settings.phoenix_api_key:
        set_hosted_phoenix_instrumentation(settings.phoenix_api_key)
    tracing_initialized = True
