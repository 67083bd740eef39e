"""Request/response schemas for the design suggestion API."""

from .suggestions import (
    Element,
    ErrorResponse,
    FILLABLE_TYPES,
    ResponseEnvelope,
    ResponseMetadata,
    RGBColor,
    Suggestion,
    SuggestionKind,
)
from .health import HealthResponse, TierStatus

__all__ = [
    'Element',
    'ErrorResponse',
    'FILLABLE_TYPES',
    'ResponseEnvelope',
    'ResponseMetadata',
    'RGBColor',
    'Suggestion',
    'SuggestionKind',
    'HealthResponse',
    'TierStatus',
]
