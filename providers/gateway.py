"""Provider Gateway

Tiered invocation of the upstream providers:

    agent  ->  chat completions  ->  mock

A tier whose configuration is incomplete is skipped, not counted as a
failure. A configured tier that fails is logged and the next tier is tried.
The mock tier needs no configuration and always answers, so :meth:`fetch`
always returns a :class:`GatewayResult`.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

import requests

from agents.mock_agent import generate_mock_suggestions
from agents.response_parser import StructuredPayload
from providers.config import ProviderConfig
from providers.foundry_client import FoundryAgentClient
from providers.openai_client import AzureOpenAIClient
from providers.results import FailureKind, GatewayResult, ProviderAttemptResult
from providers.transport import Deadline, build_session
from schemas.suggestions import Element

logger = logging.getLogger(__name__)

MOCK_SOURCE = "mock"


class ProviderGateway:
    """
    Stateless between requests: each :meth:`fetch` opens its own HTTP session
    and closes it before returning.
    """

    def __init__(
        self,
        config: ProviderConfig,
        session_factory: Callable[[], requests.Session] = build_session,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self._session_factory = session_factory
        self._clock = clock
        self._sleep = sleep

    def new_deadline(self) -> Deadline:
        return Deadline(self.config.request_deadline, clock=self._clock)

    def fetch(self, elements: Sequence[Element], deadline: Optional[Deadline] = None) -> GatewayResult:
        deadline = deadline or self.new_deadline()
        diagnostics: List[str] = []

        if self.config.primary_available or self.config.secondary_available:
            session = self._session_factory()
            try:
                for label, available, make_client in self._real_tiers(session, deadline):
                    if not available:
                        logger.info(f"Skipping {label} tier (not configured)")
                        continue
                    if deadline.expired:
                        diagnostics.append(f"{label}: {FailureKind.DEADLINE.value}: request deadline exceeded")
                        logger.warning("Request deadline exceeded before %s tier", label)
                        break

                    result = self._attempt(label, make_client, elements)
                    if result.ok:
                        return GatewayResult(source=label, payload=result.payload, diagnostics=diagnostics)
                    diagnostics.append(result.describe())
            finally:
                session.close()
        else:
            logger.info("No real provider tier configured - using mock tier")

        mock = generate_mock_suggestions(elements)
        return GatewayResult(
            source=MOCK_SOURCE,
            payload=StructuredPayload(tuple(mock["suggestions"])),
            diagnostics=diagnostics,
        )

    def _real_tiers(self, session: requests.Session, deadline: Deadline):
        yield (
            FoundryAgentClient.TIER,
            self.config.primary_available,
            lambda: FoundryAgentClient(self.config, session, deadline, sleep=self._sleep),
        )
        yield (
            AzureOpenAIClient.TIER,
            self.config.secondary_available,
            lambda: AzureOpenAIClient(self.config, session, deadline),
        )

    @staticmethod
    def _attempt(label: str, make_client, elements: Sequence[Element]) -> ProviderAttemptResult:
        logger.info(f"Attempting {label} tier...")
        try:
            return make_client().attempt(elements)
        except Exception as e:
            # clients convert expected failures themselves; this is a bug guard
            logger.error(f"Unexpected error in {label} tier: {e}", exc_info=True)
            return ProviderAttemptResult.failed(label, FailureKind.UNEXPECTED, f"{type(e).__name__}: {e}")
