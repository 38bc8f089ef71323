import dataclasses

import pytest
from fastapi.testclient import TestClient

from decision_advisor.config import Settings
from decision_advisor.main import create_app
from decision_advisor.models import DecisionRequest


class FakeModelClient:
    """Stands in for GenerativeModelClient; returns canned text or raises."""

    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.text


@pytest.fixture
def settings():
    return Settings(api_key="test-key", max_question_length=2000)


@pytest.fixture
def decision_request():
    return DecisionRequest(
        question="Should I accept a remote job offer or stay local?",
        options=["Accept remote offer", "Stay local"],
        category="career",
        priority="high",
        context="",
    )


@pytest.fixture
def make_client(settings):
    """Build a TestClient around an app wired to the given fake model client."""

    def _make(model_client=None, **overrides):
        app_settings = dataclasses.replace(settings, **overrides)
        app = create_app(settings=app_settings, model_client=model_client)
        return TestClient(app)

    return _make


@pytest.fixture
def fake_model():
    return FakeModelClient
