# tests/conftest.py
"""
Pytest fixtures and configuration with deterministic mocks
"""
import pytest
import os
import sys
from unittest.mock import MagicMock

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from providers.config import ProviderConfig  # noqa: E402
from schemas.suggestions import Element  # noqa: E402


PROVIDER_ENV_VARS = [
    "USE_REAL_AI",
    "AZURE_AI_PROJECT_ENDPOINT",
    "AZURE_AI_AGENT_ID",
    "AZURE_AI_ACCESS_TOKEN",
    "AZURE_TENANT_ID",
    "AZURE_CLIENT_ID",
    "AZURE_CLIENT_SECRET",
    "AZURE_OPENAI_ENDPOINT",
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
]


@pytest.fixture(autouse=True)
def reset_environment():
    """Strip provider configuration so no test can reach a real service."""
    original_env = os.environ.copy()
    for name in PROVIDER_ENV_VARS:
        os.environ.pop(name, None)

    from api.dependencies import reset_pipeline
    reset_pipeline()

    yield

    reset_pipeline()
    os.environ.clear()
    os.environ.update(original_env)


# ===== Element fixtures =====

@pytest.fixture
def card_payload():
    """Single rectangle used by the end-to-end scenario."""
    return {"id": "1:1", "type": "RECTANGLE", "name": "Card", "width": 100, "height": 50, "fillDescriptor": "#FFFFFF"}


@pytest.fixture
def sample_payloads(card_payload):
    return [
        card_payload,
        {"id": "1:2", "type": "TEXT", "name": "headline", "width": 200, "height": 24, "fill": "#222222",
         "characters": "welcome BACK"},
        {"id": "1:3", "type": "FRAME", "name": "Hero", "width": 0, "height": 0},
    ]


@pytest.fixture
def sample_elements(sample_payloads):
    return [Element.from_payload(raw, i) for i, raw in enumerate(sample_payloads)]


# ===== Provider fixtures =====

@pytest.fixture
def full_config():
    """Every tier configured; tests pair it with a mocked session."""
    return ProviderConfig(
        use_real_ai=True,
        project_endpoint="https://agents.example.test/api/projects/demo",
        agent_id="asst_test",
        access_token="static-token",
        openai_endpoint="https://openai.example.test",
        openai_api_key="test-key",
        openai_deployment="gpt-test",
        poll_interval=0.0,
        max_poll_attempts=3,
    )


def make_response(status_code=200, json_body=None, text=""):
    """Deterministic stand-in for requests.Response."""
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if json_body is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = json_body
    return response


@pytest.fixture
def mock_session():
    """A MagicMock session whose ``request`` is configured per test."""
    session = MagicMock()
    return session


@pytest.fixture
def session_factory(mock_session):
    return lambda: mock_session


@pytest.fixture
def response_factory():
    return make_response
