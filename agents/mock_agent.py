# agents/mock_agent.py
"""
Mock Design Agent
Deterministic local suggestions used as the terminal fallback tier.
Output uses the same wire shape the completion provider is asked to return.
"""
import logging
import math
from typing import Any, Dict, List, Sequence

from schemas.suggestions import Element, FILLABLE_TYPES
from utils.value_coercion import format_number

logger = logging.getLogger(__name__)

MOCK_PALETTE = ["#4A90E2", "#50E3C2", "#F5A623", "#D0021B", "#7ED321"]
SIZE_SCALE = 1.2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _describe_fill(fill: Any) -> str:
    if fill is None or fill == "" or fill == "none":
        return "no color"
    return fill if isinstance(fill, str) else str(fill)


def no_selection_suggestion() -> Dict[str, Any]:
    return {
        "type": "general",
        "elementId": "no-selection",
        "property": "selection",
        "currentValue": "No elements selected",
        "suggestedValue": "Select elements to get AI suggestions",
        "confidence": 1.0,
        "reasoning": "Please select design elements to receive AI-powered suggestions.",
    }


def general_suggestion(element: Element) -> Dict[str, Any]:
    """Layout review for one element, used when no other change applies."""
    return {
        "type": "general",
        "elementId": element.id,
        "property": "analysis",
        "currentValue": "Current design",
        "suggestedValue": "Review spacing and alignment",
        "confidence": 0.6,
        "reasoning": f'No automatic adjustments apply to "{element.name}"; review its layout manually.',
    }


def generate_mock_suggestions(elements: Sequence[Element]) -> Dict[str, Any]:
    """
    Build mock suggestions for every element.

    Palette choice depends only on the element's index, so repeated calls
    with the same elements return the same output.
    """
    suggestions: List[Dict[str, Any]] = []

    if not elements:
        suggestions.append(no_selection_suggestion())
        return {"suggestions": suggestions}

    try:
        for index, element in enumerate(elements):
            if element.type in FILLABLE_TYPES:
                current_fill = _describe_fill(element.fill)
                verb = "Adding" if current_fill == "no color" else "Updating"
                suggestions.append({
                    "type": "color",
                    "elementId": element.id,
                    "property": "fill",
                    "currentValue": current_fill,
                    "suggestedValue": MOCK_PALETTE[index % len(MOCK_PALETTE)],
                    "confidence": 0.8,
                    "reasoning": f'{verb} color for "{element.name}" to improve visual hierarchy and design cohesion.',
                })

            if element.width and element.height:
                suggestions.append({
                    "type": "size",
                    "elementId": element.id,
                    "property": "width",
                    "currentValue": format_number(element.width),
                    "suggestedValue": _round_half_up(element.width * SIZE_SCALE),
                    "confidence": 0.9,
                    "reasoning": f'Increased width for "{element.name}" for better visual balance and improved readability.',
                })

            if element.type == "TEXT" and element.name:
                suggestions.append({
                    "type": "text",
                    "elementId": element.id,
                    "property": "content",
                    "currentValue": element.name,
                    "suggestedValue": element.name[:1].upper() + element.name[1:].lower(),
                    "confidence": 0.85,
                    "reasoning": f'Improved capitalization for "{element.name}" for better readability and modern typography standards.',
                })
    except Exception as e:
        logger.warning(f"Error in mock response generation: {e}")
        suggestions.append({
            "type": "general",
            "elementId": "fallback",
            "property": "analysis",
            "currentValue": "Error occurred",
            "suggestedValue": "Fallback suggestion",
            "confidence": 0.5,
            "reasoning": "A fallback suggestion due to an error in analysis.",
        })

    # Nothing fillable, sized or textual: still answer for the selection
    if not suggestions:
        suggestions.append(general_suggestion(elements[0]))

    logger.info("Mock agent produced %d suggestions for %d elements", len(suggestions), len(elements))
    return {"suggestions": suggestions}
