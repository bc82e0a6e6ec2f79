"""
Geometry and size resolution for watermark placement.

Both rendering backends consult this module and only supply their own draw
primitives, so the canvas preview and the server compositor place the mark
at the same anchor with the same scale. Nothing here touches pixels.
"""

import math
from dataclasses import dataclass
from typing import Tuple

from .config import CONFIG

HALIGN_START = 'start'
HALIGN_CENTER = 'center'
HALIGN_END = 'end'

VALIGN_TOP = 'top'
VALIGN_MIDDLE = 'middle'
VALIGN_BOTTOM = 'bottom'


@dataclass(frozen=True)
class AnchorPoint:
    x: float
    y: float
    halign: str
    valign: str


@dataclass(frozen=True)
class LogoBox:
    scale: float
    width: int
    height: int


@dataclass(frozen=True)
class Placement:
    anchor: AnchorPoint
    font_size: int
    max_logo_width: int


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def resolve_anchor(position: str, padding: float, width: float, height: float) -> AnchorPoint:
    """
    Map a position keyword and padding onto an anchor point.

    No clamping is done: a padding larger than half the image places the
    anchor past the centre line.
    """
    if 'left' in position:
        x, halign = padding, HALIGN_START
    elif 'right' in position:
        x, halign = width - padding, HALIGN_END
    else:
        x, halign = width / 2, HALIGN_CENTER

    if position.startswith('top'):
        y, valign = padding, VALIGN_TOP
    elif position.startswith('bottom'):
        y, valign = height - padding, VALIGN_BOTTOM
    else:
        y, valign = height / 2, VALIGN_MIDDLE

    return AnchorPoint(x=x, y=y, halign=halign, valign=valign)


def _multiplier(size: str) -> float:
    multipliers = CONFIG['watermark']['size_multipliers']
    if size not in multipliers:
        raise ValueError(f"Unknown watermark size '{size}'")
    return multipliers[size]


def resolve_font_size(size: str, width: float) -> int:
    return round_half_up(width * _multiplier(size))


def resolve_max_logo_width(size: str, width: float) -> int:
    return round_half_up(width * _multiplier(size) * CONFIG['watermark']['logo_width_factor'])


def scale_logo(native_width: int, native_height: int, max_logo_width: int) -> LogoBox:
    """Fit a logo inside max_logo_width, preserving aspect ratio and never upscaling."""
    if native_width <= 0 or native_height <= 0:
        raise ValueError(f"Logo has non-positive dimensions ({native_width}x{native_height})")
    scale = min(max_logo_width / native_width, 1)
    return LogoBox(
        scale=scale,
        width=max(1, round_half_up(native_width * scale)),
        height=max(1, round_half_up(native_height * scale)),
    )


def logo_origin(anchor: AnchorPoint, logo_width: float, logo_height: float) -> Tuple[float, float]:
    """Shift the anchor by the logo's own box so the box sits on the anchor's alignment."""
    x, y = anchor.x, anchor.y
    if anchor.halign == HALIGN_END:
        x -= logo_width
    elif anchor.halign == HALIGN_CENTER:
        x -= logo_width / 2
    if anchor.valign == VALIGN_BOTTOM:
        y -= logo_height
    elif anchor.valign == VALIGN_MIDDLE:
        y -= logo_height / 2
    return x, y


def resolve_placement(settings, width: float, height: float) -> Placement:
    """Run the geometry and size resolvers for one render call."""
    return Placement(
        anchor=resolve_anchor(settings.position, settings.padding, width, height),
        font_size=resolve_font_size(settings.size, width),
        max_logo_width=resolve_max_logo_width(settings.size, width),
    )
