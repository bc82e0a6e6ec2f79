"""
Upload hook.
Decides which artifact the upload pipeline sends to storage.
"""

from . import interactive
from .logger import get_logger

logger = get_logger(__name__)


def prepare_upload(data: bytes, content_type: str, settings_source, apply_watermark: bool = False) -> bytes:
    """
    Return the bytes to upload for one file.

    When the caller opts in and the file is an image, the watermarked
    artifact replaces the original. Rendering errors propagate so the upload
    fails visibly.

    Args:
        data: The file as picked by the user.
        content_type: MIME type of the file.
        settings_source: Anything with a get() returning WatermarkSettings,
                         normally the session's SessionSettingsCache.
        apply_watermark: The caller's opt-in flag.
    """
    if not apply_watermark or not (content_type or '').startswith('image/'):
        return data
    settings = settings_source.get()
    logger.debug(f"Watermarking {content_type} upload before requesting a storage URL")
    return interactive.apply_watermark(data, settings)
