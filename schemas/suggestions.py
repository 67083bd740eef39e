"""
Suggestion Data Schemas
Pydantic models for the analyze request/response contract.
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any, List, Union
from datetime import datetime, timezone
from enum import Enum


class SuggestionKind(str, Enum):
    """Valid suggestion kinds."""
    COLOR = "color"
    SIZE = "size"
    TEXT = "text"
    GENERAL = "general"


# Node types that carry a fill the mock tier can recolor
FILLABLE_TYPES = (
    "RECTANGLE",
    "ELLIPSE",
    "POLYGON",
    "SHAPE_WITH_TEXT",
    "FRAME",
    "COMPONENT",
)


# ============================================================================
# Element (caller-supplied snapshot)
# ============================================================================

class Element(BaseModel):
    """One design object supplied by the plugin. Read-only for the request."""
    model_config = ConfigDict(frozen=True)

    id: str
    type: str = "UNKNOWN"
    name: str = ""
    width: float = 0
    height: float = 0
    fill: Optional[Any] = Field(default=None, description="Color-ish value in any textual encoding")
    characters: Optional[str] = None

    @classmethod
    def from_payload(cls, raw: Dict[str, Any], index: int) -> "Element":
        """
        Build an Element from one loosely-shaped request entry.

        The fill descriptor is read from ``fillDescriptor``, ``fill`` or ``color``.
        Missing identity fields get the same placeholders the mock tier uses.
        """
        fill = raw.get("fillDescriptor")
        if fill is None:
            fill = raw.get("fill")
        if fill is None:
            fill = raw.get("color")

        characters = raw.get("characters")
        return cls(
            id=str(raw.get("id") or f"mock-{index}"),
            type=str(raw.get("type") or "UNKNOWN"),
            name=str(raw.get("name") or f"Element {index + 1}"),
            width=_non_negative(raw.get("width")),
            height=_non_negative(raw.get("height")),
            fill=fill,
            characters=characters if isinstance(characters, str) else None,
        )


def _non_negative(value: Any) -> float:
    if isinstance(value, bool):
        return 0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0
    if number != number or number < 0:  # NaN or negative
        return 0
    return number


# ============================================================================
# Suggestion / Envelope
# ============================================================================

class RGBColor(BaseModel):
    """Canonical color, each channel in [0, 1]."""
    model_config = ConfigDict(frozen=True)

    r: float = Field(..., ge=0, le=1)
    g: float = Field(..., ge=0, le=1)
    b: float = Field(..., ge=0, le=1)


SuggestionValue = Union[RGBColor, float, int, str, bool, None]


class Suggestion(BaseModel):
    """One normalized, typed recommendation."""
    model_config = ConfigDict(frozen=True)

    kind: SuggestionKind
    targetElementId: Optional[str] = None
    property: str
    currentValue: SuggestionValue = None
    suggestedValue: SuggestionValue = None
    confidence: float = Field(..., ge=0, le=1)
    reasoning: str = ""


class ResponseMetadata(BaseModel):
    """Request bookkeeping returned alongside suggestions."""
    elementsAnalyzed: int
    analysisType: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"))


class ResponseEnvelope(BaseModel):
    """Response schema for POST /api/analyze"""
    success: bool
    suggestions: List[Suggestion] = Field(default_factory=list)
    sourceLabel: str
    diagnostic: Optional[str] = None
    metadata: Optional[ResponseMetadata] = None


class ErrorResponse(BaseModel):
    """Response schema for a structurally invalid analyze request (HTTP 400)."""
    success: bool = False
    error: str
    received: Dict[str, Any]

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Invalid request: elements array is required",
                "received": {
                    "elementsType": "str",
                    "elementsLength": 12,
                    "bodyKeys": ["elements"],
                },
            }
        }
    )
