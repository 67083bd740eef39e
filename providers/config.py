"""Provider configuration.

All environment lookups happen once, in :func:`load_provider_config`. The
resulting :class:`ProviderConfig` is immutable and handed to the gateway, so
tier availability can be tested by constructing configs directly.

Environment variables
=====================

- USE_REAL_AI                    master switch for both real tiers (default: off)
- AZURE_AI_PROJECT_ENDPOINT      agent service project endpoint
- AZURE_AI_AGENT_ID              agent/assistant identifier
- AZURE_AI_ACCESS_TOKEN          static bearer token (skips the OAuth exchange)
- AZURE_TENANT_ID / AZURE_CLIENT_ID / AZURE_CLIENT_SECRET
                                 client-credentials exchange for the bearer token
- AZURE_AI_API_VERSION           agent REST api-version (default: v1)
- AZURE_OPENAI_ENDPOINT / AZURE_OPENAI_API_KEY / AZURE_OPENAI_DEPLOYMENT_NAME
                                 chat-completions tier
- AZURE_OPENAI_API_VERSION       default: 2024-02-01
- AI_REQUEST_TIMEOUT             per-call timeout in seconds (default: 30)
- AI_POLL_INTERVAL               agent run polling interval (default: 1)
- AI_MAX_POLL_ATTEMPTS           agent run polling cap (default: 60)
- AI_REQUEST_DEADLINE            overall budget per analyze request (default: 90)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Mapping, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_float(environ: Mapping[str, str], name: str, default: float) -> float:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default


def _env_str(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable settings for every provider tier."""

    use_real_ai: bool = False

    # Primary tier: agent service
    project_endpoint: Optional[str] = None
    agent_id: Optional[str] = None
    access_token: Optional[str] = None
    tenant_id: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    agent_api_version: str = "v1"
    token_authority: str = "https://login.microsoftonline.com"
    token_scope: str = "https://ai.azure.com/.default"

    # Secondary tier: chat completions
    openai_endpoint: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_deployment: Optional[str] = None
    openai_api_version: str = "2024-02-01"

    # Time bounds (seconds)
    request_timeout: float = 30.0
    poll_interval: float = 1.0
    max_poll_attempts: int = 60
    request_deadline: float = 90.0

    @property
    def has_agent_credential(self) -> bool:
        return bool(self.access_token) or bool(
            self.tenant_id and self.client_id and self.client_secret
        )

    def missing_primary_settings(self) -> List[str]:
        missing = []
        if not self.project_endpoint:
            missing.append("AZURE_AI_PROJECT_ENDPOINT")
        if not self.agent_id:
            missing.append("AZURE_AI_AGENT_ID")
        if not self.has_agent_credential:
            missing.append("AZURE_AI_ACCESS_TOKEN or AZURE_TENANT_ID/AZURE_CLIENT_ID/AZURE_CLIENT_SECRET")
        return missing

    def missing_secondary_settings(self) -> List[str]:
        missing = []
        if not self.openai_endpoint:
            missing.append("AZURE_OPENAI_ENDPOINT")
        if not self.openai_api_key:
            missing.append("AZURE_OPENAI_API_KEY")
        if not self.openai_deployment:
            missing.append("AZURE_OPENAI_DEPLOYMENT_NAME")
        return missing

    @property
    def primary_available(self) -> bool:
        return self.use_real_ai and not self.missing_primary_settings()

    @property
    def secondary_available(self) -> bool:
        return self.use_real_ai and not self.missing_secondary_settings()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProviderConfig":
        env = os.environ if environ is None else environ
        return cls(
            use_real_ai=_env_bool(env.get("USE_REAL_AI")),
            project_endpoint=_env_str(env, "AZURE_AI_PROJECT_ENDPOINT"),
            agent_id=_env_str(env, "AZURE_AI_AGENT_ID"),
            access_token=_env_str(env, "AZURE_AI_ACCESS_TOKEN"),
            tenant_id=_env_str(env, "AZURE_TENANT_ID"),
            client_id=_env_str(env, "AZURE_CLIENT_ID"),
            client_secret=_env_str(env, "AZURE_CLIENT_SECRET"),
            agent_api_version=_env_str(env, "AZURE_AI_API_VERSION") or "v1",
            openai_endpoint=_env_str(env, "AZURE_OPENAI_ENDPOINT"),
            openai_api_key=_env_str(env, "AZURE_OPENAI_API_KEY"),
            openai_deployment=_env_str(env, "AZURE_OPENAI_DEPLOYMENT_NAME"),
            openai_api_version=_env_str(env, "AZURE_OPENAI_API_VERSION") or "2024-02-01",
            request_timeout=_env_float(env, "AI_REQUEST_TIMEOUT", 30.0),
            poll_interval=_env_float(env, "AI_POLL_INTERVAL", 1.0),
            max_poll_attempts=int(_env_float(env, "AI_MAX_POLL_ATTEMPTS", 60)),
            request_deadline=_env_float(env, "AI_REQUEST_DEADLINE", 90.0),
        )


def load_provider_config() -> ProviderConfig:
    """Load ``.env`` (if present) and build the process-wide config."""
    load_dotenv()
    config = ProviderConfig.from_env()

    if not config.use_real_ai:
        logger.info("Real AI disabled (USE_REAL_AI not set) - mock tier only")
    else:
        logger.info(
            "Provider tiers: agent=%s, completions=%s",
            "configured" if config.primary_available else "missing " + ", ".join(config.missing_primary_settings()),
            "configured" if config.secondary_available else "missing " + ", ".join(config.missing_secondary_settings()),
        )
    return config
