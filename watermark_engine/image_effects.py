"""
Image effects module.
Alpha and shadow helpers shared by the text and logo renderers.
"""

import math
from typing import Tuple

from PIL import Image, ImageFilter

from .config import CONFIG
from utils.helpers import parse_color


def shadow_params() -> Tuple[Tuple[int, int, int, int], int, int, float]:
    """Return the fixed drop shadow as (rgba, offset_x, offset_y, blur_radius)."""
    shadow = CONFIG['watermark']['shadow']
    color = parse_color(shadow['color'], default_color=(0, 0, 0, 128))
    return color, shadow['offset_x'], shadow['offset_y'], shadow['blur_radius']


def apply_opacity(image: Image.Image, opacity: float) -> Image.Image:
    """Multiply the alpha channel by `opacity` (0.0-1.0). Returns a new RGBA image."""
    image = image.convert('RGBA') if image.mode != 'RGBA' else image.copy()
    if opacity >= 1.0:
        return image
    factor = max(0.0, opacity)
    alpha = image.getchannel('A').point(lambda p: int(p * factor))
    image.putalpha(alpha)
    return image


def create_silhouette(image: Image.Image, color: Tuple[int, int, int, int],
                      blur_radius: float = 0) -> Tuple[Image.Image, int]:
    """
    Build a solid-colour copy of an RGBA image's shape, scaled by the colour's alpha.
    Used as the drop shadow of a logo.

    The silhouette is padded on every side so the blur is not clipped.
    Returns (silhouette, pad); draw it at the image origin minus `pad`.
    """
    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    r, g, b, a = color
    pad = int(math.ceil(blur_radius * 2)) if blur_radius > 0 else 0
    mask = Image.new('L', (image.width + 2 * pad, image.height + 2 * pad), 0)
    mask.paste(image.getchannel('A').point(lambda p: p * a // 255), (pad, pad))
    if blur_radius > 0:
        mask = mask.filter(ImageFilter.GaussianBlur(radius=blur_radius))
    silhouette = Image.new('RGBA', mask.size, (r, g, b, 0))
    silhouette.putalpha(mask)
    return silhouette, pad
