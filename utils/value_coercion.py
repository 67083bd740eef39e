import re
from typing import Any, Dict, Optional, Union

HEX_COLOR_PATTERN = re.compile(r"#([0-9a-fA-F]{6})")
RGB_COLOR_PATTERN = re.compile(
    r"rgb\(\s*(\d{1,3})\s*,\s*(\d{1,3})\s*,\s*(\d{1,3})\s*\)", re.IGNORECASE
)
NUMBER_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")

CHANNELS = ("r", "g", "b")


def coerce_color(value: Any) -> Optional[Dict[str, float]]:
    """
    Convert ``#RRGGBB`` or ``rgb(R, G, B)`` into ``{"r", "g", "b"}`` with
    channels in [0, 1]. Anything else (including out-of-range rgb
    components) returns None; the caller keeps the raw value.
    """
    if not isinstance(value, str):
        return None
    text = value.strip()

    match = HEX_COLOR_PATTERN.fullmatch(text)
    if match:
        hex_digits = match.group(1)
        return {
            channel: int(hex_digits[i * 2:i * 2 + 2], 16) / 255
            for i, channel in enumerate(CHANNELS)
        }

    match = RGB_COLOR_PATTERN.fullmatch(text)
    if match:
        components = [int(part) for part in match.groups()]
        if any(component > 255 for component in components):
            return None
        return {channel: component / 255 for channel, component in zip(CHANNELS, components)}

    return None


def as_color(value: Any) -> Optional[Dict[str, float]]:
    """Accept an already-canonical color mapping or a parseable color string."""
    if isinstance(value, dict):
        try:
            color = {channel: float(value[channel]) for channel in CHANNELS}
        except (KeyError, TypeError, ValueError):
            return None
        if all(0 <= component <= 1 for component in color.values()):
            return color
        return None
    return coerce_color(value)


def coerce_number(value: Any) -> Optional[Union[int, float]]:
    """
    Numbers pass through; otherwise the first decimal numeral in the text
    is returned ("120px" -> 120.0). Units are not interpreted.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return None
    match = NUMBER_PATTERN.search(str(value))
    return float(match.group(1)) if match else None


def format_number(value: Union[int, float]) -> str:
    """Render 100.0 as "100" and 12.5 as "12.5"."""
    return f"{value:g}"


def color_distance(first: Dict[str, float], second: Dict[str, float]) -> float:
    """Summed per-channel absolute difference."""
    return sum(abs(first[channel] - second[channel]) for channel in CHANNELS)
