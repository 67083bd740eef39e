"""
Suggestion Pipeline
Single entry point for one analyze request. Never raises for provider-side
problems; only a structurally invalid request is rejected.

EXECUTION ORDER:
1. Validate request shape (elements array)
2. Fetch provider output (agent -> completions -> mock)
3. Parse payload into suggestion records
4. Resolve targets and coerce values
5. Drop no-op color changes
6. Build the response envelope
"""
import logging
from typing import Any, Dict, List, Optional, Sequence

from agents.element_resolver import resolve_target
from agents.mock_agent import general_suggestion, generate_mock_suggestions
from agents.response_parser import ParseResult, parse_payload, parse_structured
from providers.config import ProviderConfig
from providers.gateway import MOCK_SOURCE, ProviderGateway
from providers.transport import Deadline
from schemas.suggestions import (
    Element,
    ResponseEnvelope,
    ResponseMetadata,
    Suggestion,
    SuggestionKind,
)
from utils.value_coercion import as_color, coerce_color, coerce_number, color_distance

logger = logging.getLogger(__name__)

DEFAULT_ANALYSIS_TYPE = "design-analysis"
NO_OP_COLOR_THRESHOLD = 0.01
DEFAULT_CONFIDENCE = 0.5


class InvalidRequestError(ValueError):
    """The request body does not carry an elements array."""

    def __init__(self, message: str, received: Dict[str, Any]):
        super().__init__(message)
        self.received = received


# ============================================================================
# STEP 1: VALIDATE
# ============================================================================

def _describe_received(body: Any, elements: Any) -> Dict[str, Any]:
    length = len(elements) if isinstance(elements, (list, str, dict)) else None
    return {
        "elementsType": "null" if elements is None else type(elements).__name__,
        "elementsLength": length,
        "bodyKeys": sorted(body.keys()) if isinstance(body, dict) else [],
    }


def extract_elements(body: Any) -> List[Element]:
    """
    Pull the element list out of ``{"elements": [...]}`` or
    ``{"data": {"elements": [...]}}``.

    Raises:
        InvalidRequestError: body is not an object, elements is missing or
            not an array, or an entry is not an object.
    """
    if not isinstance(body, dict):
        raise InvalidRequestError(
            "Invalid request: JSON object body is required",
            {"bodyType": type(body).__name__, "elementsType": "null", "elementsLength": None, "bodyKeys": []},
        )

    elements = body.get("elements")
    if elements is None:
        data = body.get("data")
        if isinstance(data, dict):
            elements = data.get("elements")

    if not isinstance(elements, list):
        logger.warning("Invalid elements array: %s", _describe_received(body, elements))
        raise InvalidRequestError(
            "Invalid request: elements array is required",
            _describe_received(body, elements),
        )

    bad = [index for index, entry in enumerate(elements) if not isinstance(entry, dict)]
    if bad:
        received = _describe_received(body, elements)
        received["invalidEntries"] = bad[:10]
        raise InvalidRequestError("Invalid request: every element must be an object", received)

    return [Element.from_payload(entry, index) for index, entry in enumerate(elements)]


# ============================================================================
# STEP 4/5: RESOLVE, COERCE, FILTER
# ============================================================================

def _plain_value(value: Any) -> Any:
    """Keep scalars and canonical colors; stringify anything else."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    color = as_color(value)
    if color is not None:
        return color
    return str(value)


def _confidence(value: Any) -> float:
    number = coerce_number(value)
    if number is None or number != number:
        return DEFAULT_CONFIDENCE
    return min(1.0, max(0.0, float(number)))


def refine_record(record: Dict[str, Any], index: int, elements: Sequence[Element]) -> Optional[Suggestion]:
    """
    Resolve the target and coerce values for one record.
    Returns None for a color change too small to matter.
    """
    target = resolve_target(record.get("target"), elements, index)
    kind = record["kind"]
    current = _plain_value(record.get("currentValue"))
    suggested = _plain_value(record.get("suggestedValue"))

    if kind == SuggestionKind.COLOR.value:
        color = as_color(suggested)
        if color is not None:
            existing = as_color(current)
            if existing is not None and color_distance(existing, color) < NO_OP_COLOR_THRESHOLD:
                logger.debug("Skipping near-identical color suggestion for %s", target.id if target else None)
                return None
            suggested = color
    elif kind == SuggestionKind.SIZE.value:
        number = coerce_number(suggested)
        if number is not None:
            suggested = number

    return Suggestion(
        kind=kind,
        targetElementId=target.id if target else None,
        property=str(record.get("property") or ""),
        currentValue=current,
        suggestedValue=suggested,
        confidence=_confidence(record.get("confidence")),
        reasoning=str(record.get("reasoning") or ""),
    )


def refine_records(records: Sequence[Dict[str, Any]], elements: Sequence[Element]) -> List[Suggestion]:
    suggestions = []
    for index, record in enumerate(records):
        suggestion = refine_record(record, index, elements)
        if suggestion is not None:
            suggestions.append(suggestion)
    return suggestions


# ============================================================================
# PIPELINE
# ============================================================================

class SuggestionPipeline:
    """Composes gateway, parser, resolver and coercion for one request at a time."""

    def __init__(self, config: ProviderConfig, gateway: Optional[ProviderGateway] = None):
        self.config = config
        self.gateway = gateway or ProviderGateway(config)

    def process(self, body: Any, deadline: Optional[Deadline] = None) -> ResponseEnvelope:
        """
        Run one analyze request.

        Raises:
            InvalidRequestError: only for a structurally invalid body; no
                provider tier is contacted in that case.
        """
        # STEP 1: Validate
        elements = extract_elements(body)
        analysis_type = str(body.get("type") or DEFAULT_ANALYSIS_TYPE)
        metadata = ResponseMetadata(elementsAnalyzed=len(elements), analysisType=analysis_type)
        logger.info(f"Processing {len(elements)} elements for type: {analysis_type}")

        try:
            # STEP 2: Fetch
            fetched = self.gateway.fetch(elements, deadline)

            # STEP 3: Parse
            parsed: ParseResult = parse_payload(fetched.payload, elements)
            source = MOCK_SOURCE if parsed.used_mock_fallback else fetched.source

            # STEP 4/5: Resolve, coerce, filter
            suggestions = refine_records(parsed.records, elements)
            if not suggestions and elements and source == MOCK_SOURCE:
                # every mock change was a no-op; still answer for the selection
                suggestions = refine_records(parse_structured([general_suggestion(elements[0])]), elements)

            # STEP 6: Envelope
            diagnostic = "; ".join(fetched.diagnostics) or None
            logger.info(
                "Analysis complete: source=%s, suggestions=%d (from %d records)",
                source, len(suggestions), len(parsed.records),
            )
            return ResponseEnvelope(
                success=True,
                suggestions=suggestions,
                sourceLabel=source,
                diagnostic=diagnostic,
                metadata=metadata,
            )
        except Exception as e:
            logger.error(f"Analysis error, returning fallback suggestions: {e}", exc_info=True)
            return self._fallback_envelope(elements, metadata, f"Using fallback analysis due to error: {e}")

    @staticmethod
    def _fallback_envelope(
        elements: Sequence[Element],
        metadata: ResponseMetadata,
        diagnostic: str,
    ) -> ResponseEnvelope:
        try:
            records = parse_structured(generate_mock_suggestions(elements)["suggestions"])
            suggestions = refine_records(records, elements)
            if not suggestions and elements:
                suggestions = refine_records(parse_structured([general_suggestion(elements[0])]), elements)
        except Exception as e:
            logger.error(f"Mock fallback failed as well: {e}", exc_info=True)
            suggestions = []
        return ResponseEnvelope(
            success=False,
            suggestions=suggestions,
            sourceLabel=MOCK_SOURCE,
            diagnostic=diagnostic,
            metadata=metadata,
        )
