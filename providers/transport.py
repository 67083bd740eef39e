"""HTTP plumbing shared by the provider clients."""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, Dict

import requests
from requests.adapters import HTTPAdapter, Retry

from providers.results import FailureKind, ProviderCallError

logger = logging.getLogger(__name__)


def build_session() -> requests.Session:
    """Build a requests session with retry logic.

    Only idempotent GETs are retried: repeating a POST would create a second
    thread or run on the agent service.
    """
    session = requests.Session()
    retries = Retry(
        total=2,
        backoff_factor=0.5,
        status_forcelist=(502, 503, 504),
        allowed_methods=('GET',),
        raise_on_status=False
    )
    adapter = HTTPAdapter(max_retries=retries)
    session.mount('http://', adapter)
    session.mount('https://', adapter)
    return session


class Deadline:
    """Overall time budget for one analyze request."""

    def __init__(self, budget: float, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._expires_at = clock() + budget

    def remaining(self) -> float:
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0

    def timeout(self, per_call: float) -> float:
        """Per-call timeout clamped to the remaining budget."""
        remaining = self.remaining()
        if remaining <= 0:
            raise ProviderCallError(FailureKind.DEADLINE, "request deadline exceeded")
        return min(per_call, remaining)


def request_json(
    session: requests.Session,
    method: str,
    url: str,
    timeout: float,
    **kwargs: Any,
) -> Dict[str, Any]:
    """
    Make an HTTP request and decode a JSON object body.

    Raises:
        ProviderCallError: on timeout, connection failure, non-2xx status or
            a body that is not a JSON object.
    """
    logger.debug(f"Making {method} request to {url}")
    try:
        response = session.request(method, url, timeout=timeout, **kwargs)
    except requests.Timeout as e:
        raise ProviderCallError(FailureKind.TIMEOUT, f"{method} {url} timed out after {timeout:.1f}s") from e
    except requests.RequestException as e:
        raise ProviderCallError(FailureKind.NETWORK, f"{method} {url}: {type(e).__name__}: {e}") from e

    if not 200 <= response.status_code < 300:
        body = (response.text or "")[:200]
        raise ProviderCallError(
            FailureKind.HTTP_STATUS,
            f"{method} {url} returned {response.status_code}: {body}",
        )

    try:
        data = response.json()
    except (json.JSONDecodeError, ValueError) as e:
        raise ProviderCallError(FailureKind.MALFORMED, f"{method} {url} returned a non-JSON body") from e
    if not isinstance(data, dict):
        raise ProviderCallError(FailureKind.MALFORMED, f"{method} {url} returned {type(data).__name__}, expected object")
    return data
