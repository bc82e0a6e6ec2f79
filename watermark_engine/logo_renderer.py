"""
Logo renderer module.
Scales a decoded logo (never upscaling) and places it at a resolved anchor on either backend.
"""

from typing import Tuple

from PIL import Image

from .config import CONFIG
from .errors import RenderError
from .geometry import AnchorPoint, LogoBox, logo_origin, round_half_up, scale_logo
from .image_effects import apply_opacity, create_silhouette, shadow_params
from .logger import get_logger

logger = get_logger(__name__)


class LogoRenderer:
    """Handles the rendering of logo watermarks."""

    @staticmethod
    def prepare(logo: Image.Image, anchor: AnchorPoint, max_logo_width: int) -> Tuple[Image.Image, LogoBox, Tuple[float, float]]:
        """Scale the logo and work out its draw origin. Returns (scaled_logo, box, origin)."""
        if logo.mode != 'RGBA':
            logo = logo.convert('RGBA')
        box = scale_logo(logo.width, logo.height, max_logo_width)
        if (box.width, box.height) != logo.size:
            logo = logo.resize((box.width, box.height), Image.Resampling.LANCZOS)
        origin = logo_origin(anchor, box.width, box.height)
        logger.debug(f"Logo scaled by {box.scale:.4f} to {box.width}x{box.height}, origin {origin}")
        return logo, box, origin

    @staticmethod
    def draw_on_canvas(canvas, logo: Image.Image, anchor: AnchorPoint, max_logo_width: int, opacity: float):
        """Draw the logo onto an interactive canvas with uniform alpha and the fixed shadow."""
        if canvas is None:
            raise RenderError("No drawing context available for the logo watermark")

        scaled, box, (x, y) = LogoRenderer.prepare(logo, anchor, max_logo_width)
        shadow = CONFIG['watermark']['shadow']
        canvas.save()
        try:
            state = canvas.state
            state.global_alpha = opacity / 100
            state.shadow_color = shadow['color']
            state.shadow_offset_x = shadow['offset_x']
            state.shadow_offset_y = shadow['offset_y']
            state.shadow_blur = shadow['blur_radius'] * 2
            canvas.draw_image(scaled, x, y, box.width, box.height)
        finally:
            canvas.restore()

    @staticmethod
    def render_layer(width: int, height: int, logo: Image.Image, anchor: AnchorPoint,
                     max_logo_width: int, opacity: float) -> Image.Image:
        """Render the logo onto a transparent layer the size of the target image."""
        if width <= 0 or height <= 0:
            raise RenderError(f"No drawing surface available for a {width}x{height} layer")

        scaled, box, (x, y) = LogoRenderer.prepare(logo, anchor, max_logo_width)
        paste_x, paste_y = round_half_up(x), round_half_up(y)
        shadow_color, offset_x, offset_y, blur_radius = shadow_params()

        shadow_layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        silhouette, pad = create_silhouette(scaled, shadow_color, blur_radius)
        # paste clips anything that falls outside the layer
        shadow_layer.paste(silhouette, (paste_x + offset_x - pad, paste_y + offset_y - pad))

        logo_layer = Image.new('RGBA', (width, height), (0, 0, 0, 0))
        logo_layer.paste(scaled, (paste_x, paste_y))
        layer = Image.alpha_composite(shadow_layer, logo_layer)
        return apply_opacity(layer, opacity / 100)
