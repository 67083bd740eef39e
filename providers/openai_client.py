"""Secondary tier: single chat-completions call."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

import requests

from agents.prompts import SYSTEM_PROMPT, build_completion_prompt
from agents.response_parser import decode_structured
from providers.config import ProviderConfig
from providers.results import FailureKind, ProviderAttemptResult, ProviderCallError
from providers.transport import Deadline, request_json
from schemas.suggestions import Element

logger = logging.getLogger(__name__)


class AzureOpenAIClient:
    """Client for the chat-completions tier."""

    TIER = "azure-openai"

    def __init__(self, config: ProviderConfig, session: requests.Session, deadline: Deadline):
        self.config = config
        self._session = session
        self._deadline = deadline

    @property
    def url(self) -> str:
        endpoint = (self.config.openai_endpoint or "").rstrip("/")
        return f"{endpoint}/openai/deployments/{self.config.openai_deployment}/chat/completions"

    def attempt(self, elements: Sequence[Element]) -> ProviderAttemptResult:
        try:
            content = self._complete(elements)
        except ProviderCallError as e:
            logger.warning(f"Completions tier failed: {e}")
            return ProviderAttemptResult.failed(self.TIER, e.kind, e.detail)

        payload = decode_structured(content)
        if payload is None:
            logger.warning("Completions tier returned content without a suggestions list")
            return ProviderAttemptResult.failed(
                self.TIER, FailureKind.MALFORMED, "content is not a JSON object with a suggestions list"
            )
        logger.info("Completions tier returned %d suggestions", len(payload.suggestions))
        return ProviderAttemptResult.success(self.TIER, payload)

    def _complete(self, elements: Sequence[Element]) -> str:
        body = request_json(
            self._session,
            "POST",
            self.url,
            self._deadline.timeout(self.config.request_timeout),
            params={"api-version": self.config.openai_api_version},
            headers={"Content-Type": "application/json", "api-key": self.config.openai_api_key},
            json={
                "messages": [
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_completion_prompt(elements)},
                ],
                "max_tokens": 1500,
                "temperature": 0.7,
            },
        )
        content = _first_choice_content(body)
        if content is None:
            raise ProviderCallError(FailureKind.MALFORMED, "invalid response structure: no choices[0].message.content")
        return content


def _first_choice_content(body: Dict[str, Any]) -> Optional[str]:
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return None
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    return content if isinstance(content, str) else None
