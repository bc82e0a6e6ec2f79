import sys

import pytest
from PIL import Image

from conftest import requires_cairo
from watermark_engine.canvas import ImageOp, Shadow, TextOp, WatermarkCanvas
from watermark_engine.errors import RenderError
from watermark_engine.geometry import resolve_anchor
from watermark_engine.logo_renderer import LogoRenderer
from watermark_engine.text_renderer import TextRenderer

SHADOW = Shadow(color=(0, 0, 0, 128), offset_x=1, offset_y=1, blur=4)


def test_zero_size_canvas_is_rejected():
    with pytest.raises(RenderError):
        WatermarkCanvas(0, 100)
    with pytest.raises(RenderError):
        WatermarkCanvas(100, -1)


def test_save_restore_brackets_state():
    canvas = WatermarkCanvas(10, 10)
    canvas.save()
    canvas.state.global_alpha = 0.2
    canvas.state.text_align = 'right'
    canvas.restore()
    assert canvas.state.global_alpha == 1.0
    assert canvas.state.text_align == 'start'


def test_text_is_recorded_with_alignment_alpha_and_shadow():
    canvas = WatermarkCanvas(1200, 900)
    anchor = resolve_anchor("bottom-right", 20, 1200, 900)

    TextRenderer.draw_on_canvas(canvas, "© My Photography", anchor, 30, 30)

    [op] = canvas.operations
    assert isinstance(op, TextOp)
    assert (op.x, op.y) == (1180, 880)
    assert op.text_anchor == "end"
    assert op.dominant_baseline == "text-after-edge"
    assert op.font_size == 30
    assert op.font_family == "Georgia, serif"
    assert op.fill == (255, 255, 255, 255)
    assert op.alpha == pytest.approx(0.3)
    assert op.shadow == SHADOW


def test_text_draw_restores_global_alpha():
    canvas = WatermarkCanvas(1200, 900)
    anchor = resolve_anchor("center", 20, 1200, 900)
    TextRenderer.draw_on_canvas(canvas, "Sample", anchor, 30, 45)
    assert canvas.state.global_alpha == 1.0
    assert canvas._current_shadow() is None


@pytest.mark.parametrize("position,anchor_attr,baseline_attr", [
    ("top-left", 'text-anchor="start"', 'dominant-baseline="text-before-edge"'),
    ("center", 'text-anchor="middle"', 'dominant-baseline="middle"'),
    ("bottom-right", 'text-anchor="end"', 'dominant-baseline="text-after-edge"'),
])
def test_svg_text_attributes(position, anchor_attr, baseline_attr):
    canvas = WatermarkCanvas(1200, 900)
    TextRenderer.draw_on_canvas(canvas, "A & B", resolve_anchor(position, 20, 1200, 900), 30, 30)
    svg = canvas.to_svg()
    assert anchor_attr in svg
    assert baseline_attr in svg
    assert 'opacity="0.3"' in svg
    assert "A &amp; B" in svg
    # shadow copy plus the text itself
    assert svg.count("<text ") == 2


def test_text_without_canvas_is_a_render_error():
    with pytest.raises(RenderError):
        TextRenderer.draw_on_canvas(None, "x", resolve_anchor("center", 0, 10, 10), 10, 50)


def test_logo_is_recorded_at_its_origin():
    canvas = WatermarkCanvas(1200, 900)
    logo = Image.new("RGBA", (300, 100), (255, 0, 0, 255))
    anchor = resolve_anchor("top-left", 20, 1200, 900)

    # medium at 1200px: max logo width 300, so no scaling
    LogoRenderer.draw_on_canvas(canvas, logo, anchor, 300, 30)

    [op] = canvas.operations
    assert isinstance(op, ImageOp)
    assert (op.x, op.y, op.width, op.height) == (20, 20, 300, 100)
    assert op.alpha == pytest.approx(0.3)
    assert op.shadow == SHADOW
    assert canvas.state.global_alpha == 1.0


def test_logo_is_downscaled_on_canvas():
    canvas = WatermarkCanvas(1200, 900)
    logo = Image.new("RGBA", (600, 200), (255, 0, 0, 255))
    LogoRenderer.draw_on_canvas(canvas, logo, resolve_anchor("bottom-right", 20, 1200, 900), 300, 100)
    [op] = canvas.operations
    assert (op.x, op.y, op.width, op.height) == (880, 780, 300, 100)


def test_logo_svg_includes_shadow_image():
    canvas = WatermarkCanvas(200, 200)
    logo = Image.new("RGBA", (40, 20), (255, 0, 0, 255))
    LogoRenderer.draw_on_canvas(canvas, logo, resolve_anchor("top-left", 10, 200, 200), 80, 50)
    svg = canvas.to_svg()
    assert svg.count("<image ") == 2
    assert 'xlink:href="data:image/png;base64,' in svg


def test_missing_cairo_is_a_render_error(monkeypatch):
    monkeypatch.setitem(sys.modules, "cairosvg", None)
    canvas = WatermarkCanvas(10, 10)
    with pytest.raises(RenderError):
        canvas.to_image()


@requires_cairo
def test_rasterise_image_and_text():
    canvas = WatermarkCanvas(120, 80)
    canvas.draw_image(Image.new("RGBA", (120, 80), (0, 0, 255, 255)), 0, 0)
    TextRenderer.draw_on_canvas(canvas, "Hi", resolve_anchor("center", 0, 120, 80), 30, 100)

    image = canvas.to_image()
    assert image.size == (120, 80)
    assert image.mode == "RGBA"
    assert image.getpixel((1, 1))[:3] == (0, 0, 255)


@pytest.mark.parametrize("opacity,alpha", [(0, 0.0), (100, 1.0)])
def test_opacity_bounds_map_to_alpha_bounds(opacity, alpha):
    canvas = WatermarkCanvas(1200, 900)
    anchor = resolve_anchor("center", 20, 1200, 900)
    TextRenderer.draw_on_canvas(canvas, "Sample", anchor, 30, opacity)
    LogoRenderer.draw_on_canvas(canvas, Image.new("RGBA", (40, 20), (255, 0, 0, 255)), anchor, 300, opacity)
    assert [op.alpha for op in canvas.operations] == [alpha, alpha]
    assert canvas.state.global_alpha == 1.0


def test_svg_text_shadow_is_an_unblurred_offset_copy():
    canvas = WatermarkCanvas(1200, 900)
    TextRenderer.draw_on_canvas(canvas, "Sample", resolve_anchor("top-left", 20, 1200, 900), 30, 100)
    svg = canvas.to_svg()

    shadow_at = svg.index('<text x="21" y="21"')
    text_at = svg.index('<text x="20" y="20"')
    assert shadow_at < text_at
    assert 'fill="rgba(0,0,0,0.502)"' in svg[shadow_at:text_at]
    assert 'fill="rgba(255,255,255,1.0)"' in svg[text_at:]
    assert "filter" not in svg
    assert "Blur" not in svg
