import re
import logging
from typing import Any, Optional, Tuple

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

COLOR_NAME_MAP = {
    "white": (255, 255, 255, 255),
    "black": (0, 0, 0, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 128, 0, 255),
    "blue": (0, 0, 255, 255),
    "gray": (128, 128, 128, 255),
    "grey": (128, 128, 128, 255),
    "transparent": (0, 0, 0, 0),
}

_RGB_FUNC = re.compile(
    r'^rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*(\d*\.?\d+)\s*)?\)$'
)


def _clamp_channel(value: int) -> int:
    return max(0, min(255, value))


def parse_color(color_input: Any, default_color: Optional[RGBA] = (0, 0, 0, 255)) -> Optional[RGBA]:
    """Parses a color input (hex, rgb(), rgba(), name string, or tuple) into an RGBA tuple."""
    if isinstance(color_input, (tuple, list)):
        if len(color_input) in (3, 4) and all(isinstance(c, int) for c in color_input):
            channels = [_clamp_channel(c) for c in color_input]
            if len(channels) == 3:
                channels.append(255)
            return tuple(channels)
        logger.warning(f"Invalid tuple/list format for color: {color_input}. Using default.")
        return default_color

    if not isinstance(color_input, str):
        logger.warning(f"Invalid color type provided: {type(color_input)}. Using default.")
        return default_color

    color_str = color_input.strip().lower()

    if color_str in COLOR_NAME_MAP:
        return COLOR_NAME_MAP[color_str]

    if color_str.startswith('#'):
        hex_val = color_str[1:]
        if len(hex_val) == 3:
            hex_val = ''.join(c * 2 for c in hex_val)
        if len(hex_val) == 6:
            hex_val += 'ff'
        if len(hex_val) == 8:
            try:
                return tuple(int(hex_val[i:i + 2], 16) for i in range(0, 8, 2))
            except ValueError:
                pass
        logger.warning(f"Invalid hex color format: '{color_str}'. Using default.")
        return default_color

    match = _RGB_FUNC.match(color_str)
    if match:
        r, g, b, a = match.groups()
        rgb = [int(r), int(g), int(b)]
        if any(c > 255 for c in rgb):
            logger.warning(f"RGB channel out of range in '{color_str}'. Using default.")
            return default_color
        alpha = 1.0 if a is None else max(0.0, min(1.0, float(a)))
        return (rgb[0], rgb[1], rgb[2], int(round(alpha * 255)))

    logger.warning(f"Unrecognized color format: '{color_str}'. Using default.")
    return default_color


def rgba_to_svg_rgba(rgba_tuple: RGBA) -> str:
    """Converts an RGBA tuple (0-255) to an SVG rgba string (alpha 0.0-1.0)."""
    if not (isinstance(rgba_tuple, tuple) and len(rgba_tuple) == 4 and all(isinstance(c, int) for c in rgba_tuple)):
        logger.warning(f"Invalid RGBA tuple for SVG conversion: {rgba_tuple}. Using default black.")
        return "rgba(0,0,0,1.0)"
    r, g, b, a = (_clamp_channel(c) for c in rgba_tuple)
    return f"rgba({r},{g},{b},{round(a / 255.0, 4)})"
