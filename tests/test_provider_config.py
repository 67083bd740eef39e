"""
Tests for provider configuration and tier availability.
"""
from unittest.mock import patch

from providers.config import ProviderConfig, load_provider_config


AGENT_ENV = {
    "USE_REAL_AI": "true",
    "AZURE_AI_PROJECT_ENDPOINT": "https://agents.example.test/api/projects/demo",
    "AZURE_AI_AGENT_ID": "asst_1",
    "AZURE_AI_ACCESS_TOKEN": "token",
}

OPENAI_ENV = {
    "USE_REAL_AI": "true",
    "AZURE_OPENAI_ENDPOINT": "https://openai.example.test",
    "AZURE_OPENAI_API_KEY": "key",
    "AZURE_OPENAI_DEPLOYMENT_NAME": "gpt-test",
}


def test_defaults_leave_only_mock():
    config = ProviderConfig.from_env({})
    assert config.use_real_ai is False
    assert config.primary_available is False
    assert config.secondary_available is False
    assert config.request_timeout == 30.0
    assert config.poll_interval == 1.0
    assert config.max_poll_attempts == 60
    assert config.request_deadline == 90.0
    assert config.agent_api_version == "v1"
    assert config.openai_api_version == "2024-02-01"


def test_agent_tier_available_with_static_token():
    config = ProviderConfig.from_env(AGENT_ENV)
    assert config.primary_available is True
    assert config.secondary_available is False
    assert config.missing_primary_settings() == []


def test_agent_tier_accepts_client_credentials():
    env = {key: value for key, value in AGENT_ENV.items() if key != "AZURE_AI_ACCESS_TOKEN"}
    env.update({"AZURE_TENANT_ID": "tenant", "AZURE_CLIENT_ID": "client", "AZURE_CLIENT_SECRET": "secret"})
    config = ProviderConfig.from_env(env)
    assert config.has_agent_credential is True
    assert config.primary_available is True


def test_partial_client_credentials_are_not_enough():
    env = {key: value for key, value in AGENT_ENV.items() if key != "AZURE_AI_ACCESS_TOKEN"}
    env.update({"AZURE_TENANT_ID": "tenant", "AZURE_CLIENT_ID": "client"})
    config = ProviderConfig.from_env(env)
    assert config.primary_available is False
    assert len(config.missing_primary_settings()) == 1


def test_secondary_tier_available():
    config = ProviderConfig.from_env(OPENAI_ENV)
    assert config.secondary_available is True
    assert config.primary_available is False
    assert "AZURE_AI_PROJECT_ENDPOINT" in config.missing_primary_settings()


def test_switch_off_disables_configured_tiers():
    env = dict(AGENT_ENV, **OPENAI_ENV)
    env["USE_REAL_AI"] = "false"
    config = ProviderConfig.from_env(env)
    assert config.primary_available is False
    assert config.secondary_available is False
    # settings are complete; only the switch is off
    assert config.missing_primary_settings() == []


def test_blank_values_count_as_missing():
    env = dict(OPENAI_ENV, AZURE_OPENAI_API_KEY="   ")
    config = ProviderConfig.from_env(env)
    assert config.missing_secondary_settings() == ["AZURE_OPENAI_API_KEY"]


def test_invalid_numbers_fall_back_to_defaults():
    config = ProviderConfig.from_env({"AI_REQUEST_TIMEOUT": "soon", "AI_MAX_POLL_ATTEMPTS": "5"})
    assert config.request_timeout == 30.0
    assert config.max_poll_attempts == 5


def test_load_provider_config_reads_environment(monkeypatch):
    for key, value in OPENAI_ENV.items():
        monkeypatch.setenv(key, value)
    with patch("providers.config.load_dotenv") as mock_load_dotenv:
        config = load_provider_config()
    mock_load_dotenv.assert_called_once()
    assert config.secondary_available is True
