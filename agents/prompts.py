# agents/prompts.py
"""Prompt text sent to the upstream AI providers."""
from typing import List, Sequence

from schemas.suggestions import Element
from utils.value_coercion import format_number

SYSTEM_PROMPT = (
    "You are a UX/UI design expert. Analyze designs and suggest specific improvements "
    "for better visual hierarchy, readability, and user experience. "
    "Always respond with valid JSON."
)


def describe_element(element: Element) -> str:
    fill = element.fill if element.fill not in (None, "") else "no color"
    return (
        f'- ID: {element.id} | {element.type} "{element.name}" '
        f"({format_number(element.width)}x{format_number(element.height)}, {fill})"
    )


def describe_elements(elements: Sequence[Element]) -> str:
    lines: List[str] = [describe_element(element) for element in elements]
    return "\n".join(lines)


def build_completion_prompt(elements: Sequence[Element]) -> str:
    """User prompt for the chat-completions tier; asks for strict JSON."""
    return f"""Analyze the following design elements and suggest improvements. Focus on color, size, typography, and alignment. Provide specific, actionable suggestions.

Elements:
{describe_elements(elements)}

IMPORTANT RULES:
1. Only suggest color changes that are visually different (avoid same RGB values)
2. For size changes, suggest meaningful improvements (10-30% changes)
3. For text, suggest proper capitalization and readability improvements
4. For alignment, be specific about horizontal/vertical positioning
5. CRITICAL: Use the exact ID provided above for each element (like "123:456")

Respond in this exact JSON format:
{{
  "suggestions": [
    {{
      "type": "color|size|text|general",
      "elementId": "USE EXACT ID FROM ABOVE (like 123:456)",
      "property": "fill|width|height|content|alignment",
      "currentValue": "current value",
      "suggestedValue": "new value",
      "confidence": 0.8,
      "reasoning": "why this change improves the design"
    }}
  ]
}}"""


def build_agent_message(elements: Sequence[Element]) -> str:
    """Thread message for the agent tier; the agent may answer in prose."""
    return f"""Please analyze these design elements and provide specific improvement suggestions:

{describe_elements(elements)}

Focus on:
1. Color harmony and accessibility
2. Typography and readability
3. Layout and spacing
4. Visual hierarchy

Provide actionable suggestions that a designer can implement."""
