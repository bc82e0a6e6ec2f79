"""
Main watermark processor module.
The authoritative server-side path: bakes the watermark into stored image bytes.

This path runs unattended, so a logo that cannot be fetched or decoded
leaves the photo unwatermarked instead of failing the surrounding operation.
A source image that cannot be decoded is still a hard failure.
"""

from typing import Callable, Optional

from PIL import Image

from .config import CONFIG
from .errors import DecodeError, FetchError, MetadataError
from .font_manager import get_font_manager
from .geometry import resolve_placement
from .image_handler import decode_image, encode_image, is_multi_frame, load_logo_from_url, probe_dimensions
from .logger import get_logger
from .logo_renderer import LogoRenderer
from .settings import WatermarkSettings
from .text_renderer import TextRenderer

logger = get_logger(__name__)

LogoLoader = Callable[[str], Image.Image]


def _composite(base: Image.Image, layer: Image.Image) -> Image.Image:
    """Blend the watermark layer over a copy of the base image using the layer's alpha."""
    if layer.size != base.size:
        # Layers rendered at fallback dimensions are anchored top-left like the source
        layer = layer.crop((0, 0, base.width, base.height))
    if base.mode == 'RGB':
        base = base.copy()
        base.paste(layer, (0, 0), layer)
        return base
    # Sources with transparency keep their own alpha under the mark
    return Image.alpha_composite(base.convert('RGBA'), layer)


def apply_server_watermark(buffer: bytes, settings: WatermarkSettings,
                           logo_loader: Optional[LogoLoader] = None) -> bytes:
    """
    Apply the configured watermark to encoded image bytes.

    Returns new encoded bytes in the source format, or the very same `buffer`
    object when there is nothing to render or the logo cannot be obtained.

    Raises:
        DecodeError: the source image itself cannot be decoded.
        RenderError: the watermarked image cannot be encoded.
    """
    if not settings.enabled:
        return buffer

    mode = settings.render_mode
    if mode is None:
        logger.info(f"Watermark enabled but nothing to render for type '{settings.type}'. Returning original.")
        return buffer

    try:
        width, height = probe_dimensions(buffer)
    except MetadataError as e:
        width = CONFIG['canvas']['fallback_width']
        height = CONFIG['canvas']['fallback_height']
        logger.warning(f"{e}. Falling back to {width}x{height} for watermark geometry.")

    base = decode_image(buffer)
    source_format = base.format
    if is_multi_frame(base):
        logger.warning(f"Skipping watermark for multi-frame {source_format} image ({base.n_frames} frames). Returning original.")
        return buffer
    placement = resolve_placement(settings, width, height)

    if mode == 'text':
        font = get_font_manager().get_font(placement.font_size)
        layer = TextRenderer.render_layer(
            width, height, settings.text, placement.anchor, placement.font_size, settings.opacity, font=font
        )
    else:
        loader = logo_loader or load_logo_from_url
        try:
            logo = loader(settings.logo_url)
        except (FetchError, DecodeError) as e:
            logger.error(f"Failed to apply logo watermark from '{settings.logo_url}': {e}. Returning original.")
            return buffer
        layer = LogoRenderer.render_layer(
            width, height, logo, placement.anchor, placement.max_logo_width, settings.opacity
        )

    result = _composite(base, layer)
    logger.info(f"Applied {mode} watermark at {settings.position} to {base.width}x{base.height} {source_format} image")
    return encode_image(result, source_format)
