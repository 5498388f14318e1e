import json
from unittest.mock import Mock

import pytest

from ai_providers.gemini_provider import GeminiProvider
from app import app as flask_app


@pytest.fixture
def envelope():
    """Wrap generated text the way the upstream does."""
    def _wrap(text):
        return {"candidates": [{"content": {"parts": [{"text": text}]}}]}
    return _wrap


@pytest.fixture
def make_response():
    def _make(status=200, body=None):
        resp = Mock(status_code=status)
        resp.json.return_value = body
        return resp
    return _make


@pytest.fixture
def http():
    """Stands in for requests.Session; set http.post.side_effect per test."""
    return Mock()


@pytest.fixture
def sleep():
    return Mock()


@pytest.fixture
def provider(http, sleep):
    return GeminiProvider(api_key="test-key", session=http, sleep=sleep)


@pytest.fixture
def client(provider):
    flask_app.config.update(TESTING=True, AI_PROVIDER=provider)
    yield flask_app.test_client()
    flask_app.config["AI_PROVIDER"] = None


@pytest.fixture
def upstream_json(http, make_response, envelope):
    """Make the upstream answer once with `payload` serialized as the generated text."""
    def _reply(payload):
        text = payload if isinstance(payload, str) else json.dumps(payload)
        http.post.side_effect = [make_response(200, envelope(text))]
    return _reply
