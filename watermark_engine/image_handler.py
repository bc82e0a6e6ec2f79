"""
Image handler module.
Handles fetching the logo asset, decoding, probing and encoding image bytes.
"""

from io import BytesIO
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

from .config import CONFIG
from .errors import DecodeError, FetchError, MetadataError, RenderError
from .logger import get_logger

logger = get_logger(__name__)

# Formats Pillow reads but should be written back as something else
_OUTPUT_FORMAT_ALIASES = {
    'MPO': 'JPEG',
    'JPG': 'JPEG',
}
_NO_ALPHA_FORMATS = {'JPEG', 'BMP'}


def load_logo_from_url(url: str, timeout: Optional[float] = None) -> Image.Image:
    """
    Fetch the logo with an HTTP GET and decode it to RGBA.

    The logo is fetched fresh on every call. No timeout is applied unless the
    caller passes one.
    """
    if not url or not isinstance(url, str) or urlparse(url).scheme.lower() not in ('http', 'https'):
        raise FetchError(f"Invalid logo URL: '{url}'")
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Failed to fetch logo from '{url}': {e}")
        raise FetchError(f"Failed to fetch logo from '{url}': {e}") from e

    if not response.ok:
        logger.error(f"Logo request for '{url}' returned HTTP {response.status_code}")
        raise FetchError(f"Logo request for '{url}' returned HTTP {response.status_code}")

    logo = decode_image(response.content)
    if logo.mode != 'RGBA':
        logo = logo.convert('RGBA')
    return logo


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes fully. The returned image keeps its source `format`."""
    try:
        img = Image.open(BytesIO(data))
        img.load()
        return img
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, TypeError) as e:
        raise DecodeError(f"Could not decode image data: {e}") from e


def probe_dimensions(data: bytes) -> Tuple[int, int]:
    """Read the pixel dimensions from the image header without decoding pixels."""
    try:
        with Image.open(BytesIO(data)) as img:
            width, height = img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError, TypeError) as e:
        raise MetadataError(f"Could not read image dimensions: {e}") from e
    if not width or not height:
        raise MetadataError(f"Image reported empty dimensions ({width}x{height})")
    return width, height


def is_multi_frame(image: Image.Image) -> bool:
    """True for animated sources whose frames would be lost on re-encode. MPO keeps its primary frame as JPEG."""
    return getattr(image, 'n_frames', 1) > 1 and image.format != 'MPO'


def output_format_for(source_format: Optional[str]) -> str:
    fmt = (source_format or CONFIG['images']['default_format']).upper()
    return _OUTPUT_FORMAT_ALIASES.get(fmt, fmt)


def encode_image(image: Image.Image, source_format: Optional[str]) -> bytes:
    """Encode an image in its source format (PNG when unknown)."""
    fmt = output_format_for(source_format)
    save_kwargs = {}
    if fmt in _NO_ALPHA_FORMATS and image.mode != 'RGB':
        image = image.convert('RGB')
    if fmt == 'JPEG':
        save_kwargs['quality'] = CONFIG['images']['jpeg_quality']
    buffer = BytesIO()
    try:
        image.save(buffer, format=fmt, **save_kwargs)
    except (KeyError, OSError, ValueError) as e:
        raise RenderError(f"Failed to encode watermarked image as {fmt}: {e}") from e
    return buffer.getvalue()
