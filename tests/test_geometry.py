import pytest

from watermark_engine.geometry import (
    AnchorPoint,
    logo_origin,
    resolve_anchor,
    resolve_font_size,
    resolve_max_logo_width,
    resolve_placement,
    round_half_up,
    scale_logo,
)
from watermark_engine.settings import POSITIONS, WatermarkSettings


@pytest.mark.parametrize("position", POSITIONS)
@pytest.mark.parametrize("width,height,padding", [
    (1200, 900, 20),
    (1200, 900, 0),
    (1200, 900, 449),
    (640, 480, 100),
    (31, 17, 8),
])
def test_anchor_stays_inside_image(position, width, height, padding):
    anchor = resolve_anchor(position, padding, width, height)
    assert 0 <= anchor.x <= width
    assert 0 <= anchor.y <= height


def test_bottom_right_anchor():
    anchor = resolve_anchor("bottom-right", 20, 1200, 900)
    assert anchor == AnchorPoint(x=1180, y=880, halign="end", valign="bottom")


@pytest.mark.parametrize("position,expected", [
    ("top-left", (20, 20, "start", "top")),
    ("top-center", (600, 20, "center", "top")),
    ("top-right", (1180, 20, "end", "top")),
    ("center-left", (20, 450, "start", "middle")),
    ("center", (600, 450, "center", "middle")),
    ("center-right", (1180, 450, "end", "middle")),
    ("bottom-left", (20, 880, "start", "bottom")),
    ("bottom-center", (600, 880, "center", "bottom")),
    ("bottom-right", (1180, 880, "end", "bottom")),
])
def test_every_position(position, expected):
    anchor = resolve_anchor(position, 20, 1200, 900)
    assert (anchor.x, anchor.y, anchor.halign, anchor.valign) == expected


def test_oversized_padding_is_not_clamped():
    anchor = resolve_anchor("top-left", 800, 1200, 900)
    assert (anchor.x, anchor.y) == (800, 800)


@pytest.mark.parametrize("width", [100, 320, 640, 1200, 1920, 4000, 8192])
def test_font_size_grows_with_size_tier(width):
    assert resolve_font_size("small", width) < resolve_font_size("medium", width) < resolve_font_size("large", width)


def test_font_size_values():
    assert resolve_font_size("medium", 1200) == 30
    assert resolve_font_size("small", 1200) == 18
    assert resolve_font_size("large", 1200) == 48


def test_font_size_rounds_half_up():
    # 100 * 0.025 = 2.5
    assert resolve_font_size("medium", 100) == 3
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4


def test_unknown_size_is_rejected():
    with pytest.raises(ValueError):
        resolve_font_size("huge", 1200)


def test_large_logo_on_wide_image_is_not_upscaled():
    max_width = resolve_max_logo_width("large", 2000)
    assert max_width == 800
    box = scale_logo(300, 100, max_width)
    assert box.scale == 1
    assert (box.width, box.height) == (300, 100)


def test_logo_is_downscaled_preserving_aspect_ratio():
    box = scale_logo(1600, 400, 800)
    assert box.scale == 0.5
    assert (box.width, box.height) == (800, 200)


@pytest.mark.parametrize("native_width,max_width", [(1, 1), (10, 1000), (999, 1000), (1000, 1000), (5000, 1000)])
def test_logo_scale_never_exceeds_one(native_width, max_width):
    box = scale_logo(native_width, native_width // 2 or 1, max_width)
    assert box.scale <= 1
    if native_width <= max_width:
        assert box.scale == 1


def test_scale_logo_rejects_empty_logo():
    with pytest.raises(ValueError):
        scale_logo(0, 10, 100)


def test_top_left_logo_origin_is_the_anchor():
    anchor = resolve_anchor("top-left", 20, 1200, 900)
    assert logo_origin(anchor, 300, 100) == (20, 20)


def test_bottom_right_logo_origin_shifts_by_box():
    anchor = resolve_anchor("bottom-right", 20, 1200, 900)
    assert logo_origin(anchor, 300, 100) == (880, 780)


def test_center_logo_origin_shifts_by_half_box():
    anchor = resolve_anchor("center", 20, 1200, 900)
    assert logo_origin(anchor, 300, 100) == (450, 400)


def test_resolve_placement_combines_both_resolvers():
    settings = WatermarkSettings(enabled=True, position="bottom-right", padding=20, size="large")
    placement = resolve_placement(settings, 2000, 1000)
    assert placement.anchor == AnchorPoint(1980, 980, "end", "bottom")
    assert placement.font_size == 80
    assert placement.max_logo_width == 800
