"""Upstream AI provider tiers and the gateway that chains them."""

from .config import ProviderConfig, load_provider_config
from .gateway import ProviderGateway, MOCK_SOURCE
from .results import FailureKind, GatewayResult, ProviderAttemptResult, ProviderCallError

__all__ = [
    'ProviderConfig',
    'load_provider_config',
    'ProviderGateway',
    'MOCK_SOURCE',
    'FailureKind',
    'GatewayResult',
    'ProviderAttemptResult',
    'ProviderCallError',
]
