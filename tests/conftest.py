import json

import httpx
import pytest
from fastapi.testclient import TestClient

from mealman.app.api.deps import get_pipeline
from mealman.app.core.config import Settings
from mealman.app.main import create_app


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        LLM_BASE_URL="http://llm.test/v1",
        LLM_API_KEY="test-key",
        LLM_MODEL_NAME="test-model",
        YOUTUBE_API_KEY="yt-key",
        FETCH_TIMEOUT_SECONDS=5,
    )


def chat_completion(payload) -> httpx.Response:
    """Wrap a JSON payload the way an OpenAI-compatible endpoint returns it."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": content}}]})


class FakeBrowser:
    """Stands in for HeadlessBrowser; returns canned DOM evaluation results."""

    def __init__(self, result=None, error=None):
        self.result = result or {}
        self.error = error
        self.calls = []

    async def render(self, url, evaluate, media_type="webpage"):
        self.calls.append((url, media_type))
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def fake_browser():
    return FakeBrowser()


@pytest.fixture
def pipeline_override():
    holder = {}

    def override():
        return holder["pipeline"]

    return holder, override


@pytest.fixture
def app(pipeline_override):
    app = create_app()
    _, override = pipeline_override
    app.dependency_overrides[get_pipeline] = override
    return app


@pytest.fixture
def client(app):
    return TestClient(app)
