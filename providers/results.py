"""Outcome types shared by the provider tiers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from agents.response_parser import ProviderPayload


class FailureKind(str, Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    HTTP_STATUS = "http_status"
    MALFORMED = "malformed"
    AUTH = "auth"
    RUN_FAILED = "run_failed"
    DEADLINE = "deadline"
    UNEXPECTED = "unexpected"


class ProviderCallError(Exception):
    """Raised inside a provider client; converted to a result at the tier boundary."""

    def __init__(self, kind: FailureKind, detail: str):
        super().__init__(f"{kind.value}: {detail}")
        self.kind = kind
        self.detail = detail


@dataclass(frozen=True)
class ProviderAttemptResult:
    """Outcome of one tier attempt: a payload or a tagged failure."""

    tier: str
    payload: Optional[ProviderPayload] = None
    failure: Optional[FailureKind] = None
    detail: str = ""

    @property
    def ok(self) -> bool:
        return self.payload is not None and self.failure is None

    @classmethod
    def success(cls, tier: str, payload: ProviderPayload) -> "ProviderAttemptResult":
        return cls(tier=tier, payload=payload)

    @classmethod
    def failed(cls, tier: str, kind: FailureKind, detail: str) -> "ProviderAttemptResult":
        return cls(tier=tier, failure=kind, detail=detail)

    def describe(self) -> str:
        if self.ok:
            return f"{self.tier}: ok"
        return f"{self.tier}: {self.failure.value}: {self.detail}"


@dataclass(frozen=True)
class GatewayResult:
    """What the gateway hands to the parser, plus the failures it absorbed."""

    source: str
    payload: ProviderPayload
    diagnostics: List[str] = field(default_factory=list)
