"""
Interactive watermark path.

Renders the watermark on a WatermarkCanvas before upload and for the live
settings preview. Unlike the server path, every FetchError, DecodeError and
RenderError propagates: the user is in the loop and can retry the upload.
"""

import concurrent.futures
from typing import Callable, List, Optional, Sequence

from PIL import Image

from .canvas import WatermarkCanvas
from .config import CONFIG
from .geometry import resolve_placement
from .image_handler import decode_image, encode_image, is_multi_frame, load_logo_from_url
from .logger import get_logger
from .logo_renderer import LogoRenderer
from .settings import WatermarkSettings
from .text_renderer import TextRenderer

logger = get_logger(__name__)

LogoLoader = Callable[[str], Image.Image]


def _draw_watermark(canvas: WatermarkCanvas, settings: WatermarkSettings, mode: str, logo_loader: LogoLoader):
    placement = resolve_placement(settings, canvas.width, canvas.height)
    if mode == 'text':
        TextRenderer.draw_on_canvas(canvas, settings.text, placement.anchor, placement.font_size, settings.opacity)
    else:
        logo = logo_loader(settings.logo_url)
        LogoRenderer.draw_on_canvas(canvas, logo, placement.anchor, placement.max_logo_width, settings.opacity)


def apply_watermark(image_bytes: bytes, settings: WatermarkSettings,
                    logo_loader: Optional[LogoLoader] = None) -> bytes:
    """
    Watermark an image file client-side before it is uploaded.

    Returns new encoded bytes in the source format, or the very same
    `image_bytes` object when the settings render nothing.
    """
    mode = settings.render_mode
    if mode is None:
        return image_bytes

    source = decode_image(image_bytes)
    source_format = source.format
    if is_multi_frame(source):
        logger.warning(f"Uploading multi-frame {source_format} image ({source.n_frames} frames) without a watermark")
        return image_bytes
    canvas = WatermarkCanvas(source.width, source.height)
    canvas.draw_image(source.convert('RGBA'), 0, 0)
    _draw_watermark(canvas, settings, mode, logo_loader or load_logo_from_url)

    rendered = canvas.to_image()
    logger.info(f"Applied {mode} watermark on canvas to {source.width}x{source.height} {source_format} image")
    return encode_image(rendered, source_format)


def apply_watermark_batch(images: Sequence[bytes], settings: WatermarkSettings,
                          max_workers: Optional[int] = None,
                          logo_loader: Optional[LogoLoader] = None) -> List[bytes]:
    """
    Watermark several files concurrently.

    All-of semantics: results come back in input order and the first failure
    is raised once every submitted render has finished.
    """
    if not images:
        return []
    workers = max_workers or CONFIG['batch']['max_workers']
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as ex:
        futures = [ex.submit(apply_watermark, data, settings, logo_loader) for data in images]
        concurrent.futures.wait(futures)
    return [f.result() for f in futures]


def render_preview(image_bytes: bytes, settings: WatermarkSettings, container_width: int, container_height: int,
                   logo_loader: Optional[LogoLoader] = None) -> Image.Image:
    """
    Render the settings preview: the image cover-fitted to the container with
    the watermark drawn at container size. Disabled settings show the image only.
    """
    source = decode_image(image_bytes).convert('RGBA')
    canvas = WatermarkCanvas(container_width, container_height)

    scale = max(container_width / source.width, container_height / source.height)
    scaled_width = source.width * scale
    scaled_height = source.height * scale
    offset_x = (container_width - scaled_width) / 2
    offset_y = (container_height - scaled_height) / 2
    canvas.draw_image(source, offset_x, offset_y, scaled_width, scaled_height)

    mode = settings.render_mode
    if mode is not None:
        _draw_watermark(canvas, settings, mode, logo_loader or load_logo_from_url)
    return canvas.to_image()
