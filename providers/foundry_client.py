"""Primary tier: agent service (thread / message / run / poll / read)."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Optional, Sequence

import requests

from agents.prompts import build_agent_message
from agents.response_parser import payload_from_text
from providers.config import ProviderConfig
from providers.results import FailureKind, ProviderAttemptResult, ProviderCallError
from providers.transport import Deadline, request_json
from schemas.suggestions import Element

logger = logging.getLogger(__name__)

PENDING_RUN_STATES = ("queued", "in_progress")


def acquire_access_token(
    config: ProviderConfig,
    session: requests.Session,
    timeout: float,
) -> str:
    """OAuth client-credentials exchange for a bearer token."""
    url = f"{config.token_authority}/{config.tenant_id}/oauth2/v2.0/token"
    try:
        data = request_json(
            session,
            "POST",
            url,
            timeout,
            data={
                "grant_type": "client_credentials",
                "client_id": config.client_id,
                "client_secret": config.client_secret,
                "scope": config.token_scope,
            },
        )
    except ProviderCallError as e:
        if e.kind == FailureKind.HTTP_STATUS:
            raise ProviderCallError(FailureKind.AUTH, f"token request rejected: {e.detail}") from e
        raise

    token = data.get("access_token")
    if not token:
        raise ProviderCallError(FailureKind.AUTH, "token response carried no access_token")
    return token


class FoundryAgentClient:
    """
    Client for the agent tier.

    One instance serves one analyze request: it borrows the caller's session
    and deadline and keeps no state between requests.
    """

    TIER = "foundry-agent"

    def __init__(
        self,
        config: ProviderConfig,
        session: requests.Session,
        deadline: Deadline,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._session = session
        self._deadline = deadline
        self._sleep = sleep
        self._base_url = (config.project_endpoint or "").rstrip("/")

    def attempt(self, elements: Sequence[Element]) -> ProviderAttemptResult:
        """Run the full agent flow; every failure comes back as a result."""
        try:
            text = self._run(elements)
        except ProviderCallError as e:
            logger.warning(f"Agent tier failed: {e}")
            return ProviderAttemptResult.failed(self.TIER, e.kind, e.detail)

        logger.info("Agent tier returned %d characters", len(text))
        return ProviderAttemptResult.success(self.TIER, payload_from_text(text))

    # ------------------------------------------------------------------

    def _timeout(self) -> float:
        return self._deadline.timeout(self.config.request_timeout)

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _call(self, method: str, path: str, token: str, **kwargs: Any) -> Dict[str, Any]:
        params = dict(kwargs.pop("params", None) or {})
        params["api-version"] = self.config.agent_api_version
        return request_json(
            self._session,
            method,
            self._url(path),
            self._timeout(),
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            params=params,
            **kwargs,
        )

    def _bearer_token(self) -> str:
        if self.config.access_token:
            return self.config.access_token
        logger.info("Requesting access token for agent tier")
        return acquire_access_token(self.config, self._session, self._timeout())

    def _run(self, elements: Sequence[Element]) -> str:
        token = self._bearer_token()

        thread = self._call("POST", "/threads", token, json={})
        thread_id = _require_id(thread, "thread")
        logger.info(f"Created thread, ID: {thread_id}")

        self._call(
            "POST",
            f"/threads/{thread_id}/messages",
            token,
            json={"role": "user", "content": build_agent_message(elements)},
        )

        run = self._call(
            "POST",
            f"/threads/{thread_id}/runs",
            token,
            json={"assistant_id": self.config.agent_id},
        )
        run_id = _require_id(run, "run")
        run = self._wait_for_run(thread_id, run_id, run, token)

        status = run.get("status")
        if status != "completed":
            last_error = run.get("last_error") or run.get("lastError")
            raise ProviderCallError(FailureKind.RUN_FAILED, f"run {run_id} ended as {status}: {last_error}")
        logger.info(f"Run completed with status: {status}")

        messages = self._call("GET", f"/threads/{thread_id}/messages", token, params={"order": "asc"})
        text = extract_assistant_text(messages)
        if not text:
            raise ProviderCallError(FailureKind.MALFORMED, "no assistant text in thread messages")
        return text

    def _wait_for_run(self, thread_id: str, run_id: str, run: Dict[str, Any], token: str) -> Dict[str, Any]:
        """Poll at a fixed interval until the run leaves the pending states."""
        polls = 0
        while run.get("status") in PENDING_RUN_STATES:
            if polls >= self.config.max_poll_attempts:
                raise ProviderCallError(
                    FailureKind.TIMEOUT,
                    f"run {run_id} still {run.get('status')} after {polls} polls",
                )
            remaining = self._deadline.remaining()
            if remaining <= 0:
                raise ProviderCallError(FailureKind.DEADLINE, f"request deadline exceeded while polling run {run_id}")
            self._sleep(min(self.config.poll_interval, remaining))
            run = self._call("GET", f"/threads/{thread_id}/runs/{run_id}", token)
            polls += 1
        return run


def _require_id(body: Dict[str, Any], what: str) -> str:
    identifier = body.get("id")
    if not identifier:
        raise ProviderCallError(FailureKind.MALFORMED, f"{what} response has no id")
    return str(identifier)


def extract_assistant_text(messages: Dict[str, Any]) -> Optional[str]:
    """First text content of the first assistant message."""
    for message in messages.get("data") or []:
        if not isinstance(message, dict) or message.get("role") != "assistant":
            continue
        for content in message.get("content") or []:
            if isinstance(content, dict) and content.get("type") == "text":
                text = content.get("text")
                value = text.get("value") if isinstance(text, dict) else text
                if isinstance(value, str) and value.strip():
                    return value
    return None
