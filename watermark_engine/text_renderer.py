"""
Text renderer module.
Draws a text watermark at a resolved anchor on either backend.
"""

import math
from typing import Optional

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .config import CONFIG
from .errors import RenderError
from .font_manager import get_font_manager
from .geometry import AnchorPoint
from .image_effects import apply_opacity, shadow_params
from .logger import get_logger
from utils.helpers import parse_color

logger = get_logger(__name__)

# Alignment axis -> Pillow text anchor (horizontal letter + vertical letter)
_PIL_HORIZONTAL = {'start': 'l', 'center': 'm', 'end': 'r'}
_PIL_VERTICAL = {'top': 'a', 'middle': 'm', 'bottom': 'd'}

# Alignment axis -> canvas textAlign / textBaseline
_CANVAS_ALIGN = {'start': 'left', 'center': 'center', 'end': 'right'}
_CANVAS_BASELINE = {'top': 'top', 'middle': 'middle', 'bottom': 'bottom'}


class TextRenderer:
    """Handles the rendering of text watermarks."""

    @staticmethod
    def draw_on_canvas(canvas, text: str, anchor: AnchorPoint, font_size: int, opacity: float):
        """
        Draw the text onto an interactive canvas.

        All state changes are bracketed by save()/restore(), so global alpha is
        back to 1 when this returns.
        """
        if canvas is None:
            raise RenderError("No drawing context available for the text watermark")

        shadow = CONFIG['watermark']['shadow']
        canvas.save()
        try:
            state = canvas.state
            state.font_size = font_size
            state.font_family = CONFIG['fonts']['family']
            state.text_align = _CANVAS_ALIGN[anchor.halign]
            state.text_baseline = _CANVAS_BASELINE[anchor.valign]
            state.global_alpha = opacity / 100
            state.fill_style = CONFIG['watermark']['fill_color']
            state.shadow_color = shadow['color']
            state.shadow_offset_x = shadow['offset_x']
            state.shadow_offset_y = shadow['offset_y']
            # canvas shadowBlur is twice the Gaussian standard deviation
            state.shadow_blur = shadow['blur_radius'] * 2
            canvas.fill_text(text, anchor.x, anchor.y)
        finally:
            canvas.restore()

    @staticmethod
    def render_layer(width: int, height: int, text: str, anchor: AnchorPoint, font_size: int,
                     opacity: float, font: Optional[ImageFont.FreeTypeFont] = None) -> Image.Image:
        """Render the text onto a transparent layer the size of the target image."""
        if width <= 0 or height <= 0:
            raise RenderError(f"No drawing surface available for a {width}x{height} layer")

        if font is None:
            font = get_font_manager().get_font(font_size)
        pil_anchor = _PIL_HORIZONTAL[anchor.halign] + _PIL_VERTICAL[anchor.valign]
        shadow_color, offset_x, offset_y, blur_radius = shadow_params()
        fill = parse_color(CONFIG['watermark']['fill_color'], default_color=(255, 255, 255, 255))

        shadow_layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        shadow_draw = ImageDraw.Draw(shadow_layer)
        shadow_pos = (anchor.x + offset_x, anchor.y + offset_y)
        shadow_draw.text(shadow_pos, text, font=font, fill=shadow_color, anchor=pil_anchor)
        if blur_radius > 0:
            # Blur only the region around the glyphs
            left, top, right, bottom = shadow_draw.textbbox(shadow_pos, text, font=font, anchor=pil_anchor)
            pad = int(math.ceil(blur_radius * 3))
            box = (
                max(0, int(left) - pad),
                max(0, int(top) - pad),
                min(width, int(math.ceil(right)) + pad),
                min(height, int(math.ceil(bottom)) + pad),
            )
            if box[2] > box[0] and box[3] > box[1]:
                region = shadow_layer.crop(box).filter(ImageFilter.GaussianBlur(radius=blur_radius))
                shadow_layer.paste(region, box[:2])

        text_layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        ImageDraw.Draw(text_layer).text((anchor.x, anchor.y), text, font=font, fill=fill, anchor=pil_anchor)

        layer = Image.alpha_composite(shadow_layer, text_layer)
        logger.debug(f"Rendered text layer at ({anchor.x}, {anchor.y}) anchor '{pil_anchor}', font size {font_size}")
        return apply_opacity(layer, opacity / 100)
