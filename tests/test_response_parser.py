"""
Tests for provider payload parsing: structured pass-through, natural-language
detectors, summary fallback and parse-failure containment.
"""
import pytest
from unittest.mock import patch

from agents.response_parser import (
    FreeTextPayload,
    StructuredPayload,
    decode_structured,
    parse_free_text,
    parse_payload,
    parse_structured,
    payload_from_text,
    strip_code_fence,
)
from schemas.suggestions import Element


@pytest.fixture
def elements():
    return [
        Element(id="2:1", type="RECTANGLE", name="Card", width=320, height=200, fill="#FFFFFF"),
        Element(id="2:2", type="TEXT", name="Title", width=200, height=32, characters="hello world"),
        Element(id="2:3", type="TEXT", name="Caption", width=200, height=16),
    ]


# ============================================================================
# Fences and payload classification
# ============================================================================

def test_strip_code_fence_json():
    assert strip_code_fence('```json\n{"suggestions": []}\n```') == '{"suggestions": []}'


def test_strip_code_fence_bare_and_unfenced():
    assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('  {"a": 1}  ') == '{"a": 1}'


def test_strip_code_fence_without_closing_fence():
    assert strip_code_fence('```json\n{"a": 1}') == '{"a": 1}'


def test_decode_structured():
    payload = decode_structured('```json\n{"suggestions": [{"type": "color"}]}\n```')
    assert payload == StructuredPayload(({"type": "color"},))


def test_decode_structured_rejects_other_json():
    assert decode_structured('{"items": []}') is None
    assert decode_structured("[1, 2]") is None
    assert decode_structured("plain words") is None


def test_payload_from_text_falls_back_to_free_text():
    assert payload_from_text("Make the card blue") == FreeTextPayload("Make the card blue")


# ============================================================================
# Structured entries
# ============================================================================

def test_parse_structured_maps_wire_names():
    records = parse_structured([
        {"type": "color", "elementId": "2:1", "property": "fill", "currentValue": "#FFFFFF",
         "suggestedValue": "#000000", "confidence": 0.8, "reasoning": "contrast"},
    ])
    assert records == [{
        "kind": "color",
        "target": "2:1",
        "property": "fill",
        "currentValue": "#FFFFFF",
        "suggestedValue": "#000000",
        "confidence": 0.8,
        "reasoning": "contrast",
    }]


def test_parse_structured_drops_entries_without_kind():
    records = parse_structured([
        {"elementId": "2:1", "suggestedValue": "#000000"},
        "not an object",
        {"kind": "SIZE", "targetElementId": "2:2"},
    ])
    assert len(records) == 1
    assert records[0]["kind"] == "size"
    assert records[0]["target"] == "2:2"
    assert records[0]["property"] == "width"


def test_parse_structured_unknown_kind_becomes_general():
    records = parse_structured([{"type": "alignment", "elementId": "2:1"}])
    assert records[0]["kind"] == "general"
    assert records[0]["property"] == "analysis"


# ============================================================================
# Natural-language detectors
# ============================================================================

def test_color_detector_hex(elements):
    records = parse_free_text("Change the Card background color to #4A90E2 for contrast.", elements)
    assert len(records) == 1
    record = records[0]
    assert record["kind"] == "color"
    assert record["target"] == "2:1"
    assert record["property"] == "fill"
    assert record["currentValue"] == "#FFFFFF"
    assert record["suggestedValue"]["r"] == pytest.approx(74 / 255)
    assert record["confidence"] == 0.9


def test_color_detector_rgb(elements):
    records = parse_free_text("Use fill rgb(255, 0, 0) on the card", elements)
    assert records[0]["suggestedValue"] == {"r": 1.0, "g": 0.0, "b": 0.0}


def test_color_detector_needs_keyword(elements):
    assert all(r["kind"] != "color" for r in parse_free_text("Card: #4A90E2", elements))


def test_color_detector_falls_back_to_first_non_text_element():
    elements = [
        Element(id="3:1", type="TEXT", name="Label"),
        Element(id="3:2", type="FRAME", name="Panel"),
    ]
    records = parse_free_text("Pick a warmer color like #F5A623", elements)
    assert records[0]["target"] == "3:2"


def test_size_detector(elements):
    records = parse_free_text("Increase the Card width to 360px", elements)
    assert len(records) == 1
    record = records[0]
    assert record["kind"] == "size"
    assert record["target"] == "2:1"
    assert record["property"] == "width"
    assert record["currentValue"] == 320
    assert record["suggestedValue"] == 360


def test_size_detector_defaults_to_height(elements):
    records = parse_free_text("Set the Card size to 240px tall", elements)
    assert records[0]["property"] == "height"
    assert records[0]["currentValue"] == 200


def test_size_detector_without_named_element(elements):
    """A size change that names no element is summarized, not assigned."""
    records = parse_free_text("A height of 48px works better\nOverall:\n- tighten spacing", elements)
    assert all(r["kind"] != "size" for r in records)
    assert len(records) == 1
    assert records[0]["kind"] == "general"
    assert records[0]["reasoning"] == "- tighten spacing"


def test_text_detector_named_element(elements):
    records = parse_free_text('Rename the Caption text to "Read more"', elements)
    text_records = [r for r in records if r["kind"] == "text"]
    assert len(text_records) == 1
    assert text_records[0]["target"] == "2:3"
    assert text_records[0]["suggestedValue"] == "Read more"
    assert text_records[0]["currentValue"] == "Caption"


def test_text_detector_defaults_to_first_text_element(elements):
    records = parse_free_text('Use a shorter title: "Welcome"', elements)
    text_records = [r for r in records if r["kind"] == "text"]
    assert text_records[0]["target"] == "2:2"
    assert text_records[0]["currentValue"] == "hello world"


def test_text_detector_skips_without_text_elements():
    elements = [Element(id="4:1", type="RECTANGLE", name="Box")]
    records = parse_free_text('Change the title to "Hi"', elements)
    assert all(r["kind"] != "text" for r in records)


def test_one_line_can_fire_several_detectors(elements):
    records = parse_free_text('Title text "Hello" should use color #222222 and width 180px', elements)
    assert sorted(r["kind"] for r in records) == ["color", "size", "text"]


def test_general_summary_from_list_items(elements):
    message = "Overall thoughts:\n- Improve spacing\n- Align left edges\n1. Reduce clutter\n- Extra item"
    records = parse_free_text(message, elements)
    assert len(records) == 1
    assert records[0]["kind"] == "general"
    assert records[0]["target"] == "2:1"
    assert records[0]["reasoning"] == "- Improve spacing - Align left edges 1. Reduce clutter"


def test_general_summary_truncates_prose(elements):
    message = "x" * 300
    records = parse_free_text(message, elements)
    assert records[0]["reasoning"] == "x" * 200 + "..."


def test_general_summary_without_elements():
    records = parse_free_text("Looks good overall.", [])
    assert records[0]["target"] is None


def test_blank_text_yields_nothing(elements):
    assert parse_free_text("   \n  ", elements) == []


def test_parsing_is_idempotent(elements):
    text = 'Card fill #50E3C2\nCard width 400px\nTitle text "Hi"'
    assert parse_free_text(text, elements) == parse_free_text(text, elements)


# ============================================================================
# Entry point
# ============================================================================

def test_parse_payload_dispatches(elements):
    structured = parse_payload(StructuredPayload(({"type": "general"},)), elements)
    assert structured.records[0]["kind"] == "general"
    assert structured.used_mock_fallback is False

    free = parse_payload(FreeTextPayload("Card color #000000"), elements)
    assert free.records[0]["kind"] == "color"


def test_parse_failure_uses_mock_suggestions(elements):
    with patch("agents.response_parser.parse_free_text", side_effect=RuntimeError("boom")):
        result = parse_payload(FreeTextPayload("anything"), elements)
    assert result.used_mock_fallback is True
    assert result.records
    assert {r["target"] for r in result.records} <= {e.id for e in elements}


def test_unknown_payload_variant_uses_mock_suggestions(elements):
    result = parse_payload({"suggestions": []}, elements)
    assert result.used_mock_fallback is True
