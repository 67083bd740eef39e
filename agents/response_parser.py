# agents/response_parser.py
"""
Response Parser
Turns whatever a provider returned into suggestion records.

Provider output is one of two payload variants:
- StructuredPayload: a decoded ``{"suggestions": [...]}`` list
- FreeTextPayload:   prose from the agent, scanned line by line

Records produced here are plain dicts with the keys
``kind, target, property, currentValue, suggestedValue, confidence, reasoning``.
``target`` is the raw reference still to be resolved against the elements.
"""
import json
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple, Union

from agents.mock_agent import generate_mock_suggestions
from schemas.suggestions import Element, SuggestionKind
from utils.value_coercion import HEX_COLOR_PATTERN, RGB_COLOR_PATTERN, coerce_color

logger = logging.getLogger(__name__)


# ============================================================================
# Payload variants
# ============================================================================

@dataclass(frozen=True)
class StructuredPayload:
    suggestions: Tuple[Any, ...]


@dataclass(frozen=True)
class FreeTextPayload:
    text: str


ProviderPayload = Union[StructuredPayload, FreeTextPayload]


class ParseResult(NamedTuple):
    records: List[Dict[str, Any]]
    used_mock_fallback: bool = False


FENCE_PATTERN = re.compile(r"^```[a-zA-Z]*[ \t]*\n?(.*?)\n?```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Remove a leading ```json (or bare ```) fence and its closing fence."""
    cleaned = text.strip()
    match = FENCE_PATTERN.match(cleaned)
    if match:
        return match.group(1).strip()
    if cleaned.startswith("```"):
        # opening fence without a closing one
        return cleaned.partition("\n")[2].strip()
    return cleaned


def decode_structured(text: str) -> Optional[StructuredPayload]:
    """Return a StructuredPayload if ``text`` is a JSON object with a suggestions list."""
    try:
        decoded = json.loads(strip_code_fence(text))
    except (json.JSONDecodeError, TypeError):
        return None
    if isinstance(decoded, dict) and isinstance(decoded.get("suggestions"), list):
        return StructuredPayload(tuple(decoded["suggestions"]))
    return None


def payload_from_text(text: str) -> ProviderPayload:
    return decode_structured(text) or FreeTextPayload(text)


# ============================================================================
# Structured records
# ============================================================================

DEFAULT_PROPERTIES = {
    SuggestionKind.COLOR.value: "fill",
    SuggestionKind.SIZE.value: "width",
    SuggestionKind.TEXT.value: "content",
    SuggestionKind.GENERAL.value: "analysis",
}
KNOWN_KINDS = set(DEFAULT_PROPERTIES)


def normalize_kind(raw_kind: Any) -> Optional[str]:
    if raw_kind is None:
        return None
    kind = str(raw_kind).strip().lower()
    if not kind:
        return None
    return kind if kind in KNOWN_KINDS else SuggestionKind.GENERAL.value


def _first_present(entry: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if entry.get(key) is not None:
            return entry[key]
    return None


def parse_structured(entries: Sequence[Any]) -> List[Dict[str, Any]]:
    """Validate pass-through entries; anything without a kind is dropped."""
    records = []
    for entry in entries:
        if not isinstance(entry, dict):
            logger.debug("Dropping non-object suggestion entry: %r", entry)
            continue
        kind = normalize_kind(_first_present(entry, "kind", "type"))
        if kind is None:
            logger.debug("Dropping suggestion without kind: %r", entry)
            continue
        records.append({
            "kind": kind,
            "target": _first_present(entry, "targetElementId", "elementId"),
            "property": entry.get("property") or DEFAULT_PROPERTIES[kind],
            "currentValue": entry.get("currentValue"),
            "suggestedValue": entry.get("suggestedValue"),
            "confidence": entry.get("confidence"),
            "reasoning": entry.get("reasoning") or "",
        })
    return records


# ============================================================================
# Natural-language records
# ============================================================================

COLOR_KEYWORDS = ("color", "fill", "background")
SIZE_KEYWORDS = ("width", "height", "size")
TEXT_KEYWORDS = ("text", "title", "content")

PIXEL_PATTERN = re.compile(r"(\d+)px")
QUOTED_PATTERN = re.compile(r'"([^"]+)"')
LIST_ITEM_PATTERN = re.compile(r"^\s*(?:[-•*]|\d+\.)\s+")
SUMMARY_LENGTH = 200


def _mentions(line_lower: str, element: Element, include_type: bool) -> bool:
    name = element.name.lower()
    if name and name in line_lower:
        return True
    if element.id and element.id.lower() in line_lower:
        return True
    return include_type and bool(element.type) and element.type.lower() in line_lower


def _detect_color(line: str, line_lower: str, elements: Sequence[Element]) -> Optional[Dict[str, Any]]:
    if not any(keyword in line_lower for keyword in COLOR_KEYWORDS):
        return None
    match = HEX_COLOR_PATTERN.search(line) or RGB_COLOR_PATTERN.search(line)
    if not match:
        return None
    color = coerce_color(match.group(0))
    if color is None:
        return None

    target = next((el for el in elements if _mentions(line_lower, el, include_type=True)), None)
    if target is None and elements:
        target = next((el for el in elements if el.type != "TEXT"), elements[0])

    return {
        "kind": SuggestionKind.COLOR.value,
        "target": target.id if target else None,
        "property": "fill",
        "currentValue": (target.fill if target and target.fill is not None else "#FFFFFF"),
        "suggestedValue": color,
        "confidence": 0.9,
        "reasoning": line.strip(),
    }


def _detect_size(line: str, line_lower: str, elements: Sequence[Element]) -> Optional[Dict[str, Any]]:
    if not any(keyword in line_lower for keyword in SIZE_KEYWORDS):
        return None
    match = PIXEL_PATTERN.search(line)
    if not match:
        return None

    target = next((el for el in elements if _mentions(line_lower, el, include_type=False)), None)
    if target is None:
        return None

    prop = "width" if "width" in line_lower else "height"
    return {
        "kind": SuggestionKind.SIZE.value,
        "target": target.id,
        "property": prop,
        "currentValue": target.width if prop == "width" else target.height,
        "suggestedValue": int(match.group(1)),
        "confidence": 0.85,
        "reasoning": line.strip(),
    }


def _detect_text(line: str, line_lower: str, elements: Sequence[Element]) -> Optional[Dict[str, Any]]:
    if not any(keyword in line_lower for keyword in TEXT_KEYWORDS):
        return None
    match = QUOTED_PATTERN.search(line)
    if not match:
        return None

    text_elements = [el for el in elements if el.type == "TEXT"]
    if not text_elements:
        return None
    target = next(
        (el for el in text_elements if el.name and el.name.lower() in line_lower),
        text_elements[0],
    )

    return {
        "kind": SuggestionKind.TEXT.value,
        "target": target.id,
        "property": "content",
        "currentValue": target.characters or target.name,
        "suggestedValue": match.group(1),
        "confidence": 0.8,
        "reasoning": line.strip(),
    }


DETECTORS = (_detect_color, _detect_size, _detect_text)


def _summarize(text: str) -> str:
    list_items = [line.strip() for line in text.splitlines() if LIST_ITEM_PATTERN.match(line)]
    if list_items:
        return " ".join(list_items[:3])
    stripped = text.strip()
    if len(stripped) > SUMMARY_LENGTH:
        return stripped[:SUMMARY_LENGTH] + "..."
    return stripped


def parse_free_text(text: str, elements: Sequence[Element]) -> List[Dict[str, Any]]:
    """
    Run every detector on every line. When nothing is recognized, a single
    ``general`` record summarizing the message is returned so non-empty text
    never produces an empty list.
    """
    records = []
    for line in text.splitlines():
        line_lower = line.lower().strip()
        if not line_lower:
            continue
        for detector in DETECTORS:
            record = detector(line, line_lower, elements)
            if record is not None:
                records.append(record)

    if not records and text.strip():
        records.append({
            "kind": SuggestionKind.GENERAL.value,
            "target": elements[0].id if elements else None,
            "property": "analysis",
            "currentValue": "Current design",
            "suggestedValue": "See AI recommendations",
            "confidence": 0.7,
            "reasoning": _summarize(text),
        })

    logger.info(f"Parsed {len(records)} suggestions from free-text response")
    return records


# ============================================================================
# Entry point
# ============================================================================

def parse_payload(payload: ProviderPayload, elements: Sequence[Element]) -> ParseResult:
    """
    Parse one provider payload. Never raises: any failure is replaced with
    the mock generator's suggestions.
    """
    try:
        if isinstance(payload, StructuredPayload):
            return ParseResult(parse_structured(payload.suggestions))
        if isinstance(payload, FreeTextPayload):
            return ParseResult(parse_free_text(payload.text, elements))
        raise TypeError(f"Unsupported provider payload: {type(payload).__name__}")
    except Exception as e:
        logger.error(f"Error parsing provider payload, using mock suggestions: {e}", exc_info=True)
        mock = generate_mock_suggestions(elements)
        return ParseResult(parse_structured(mock["suggestions"]), used_mock_fallback=True)
