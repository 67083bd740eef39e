"""Shared FastAPI dependencies."""
import logging
from typing import Optional

from agents.suggestion_pipeline import SuggestionPipeline
from providers.config import load_provider_config

logger = logging.getLogger(__name__)

_default_pipeline: Optional[SuggestionPipeline] = None


def get_pipeline() -> SuggestionPipeline:
    """Get or create the process-wide pipeline (configuration is read once)."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = SuggestionPipeline(load_provider_config())
    return _default_pipeline


def reset_pipeline() -> None:
    """Forget the cached pipeline so the next request re-reads the environment."""
    global _default_pipeline
    _default_pipeline = None
