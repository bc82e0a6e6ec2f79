"""
Font management module for the watermark engine.
Resolves the fixed serif face used for text watermarks, with /tmp caching
of a downloaded font for Lambda cold starts.
"""

import os
from typing import Dict, Optional

import requests
from PIL import ImageFont

from .config import CONFIG
from .logger import get_logger

logger = get_logger(__name__)

DOWNLOADED_FONT_NAME = "watermark-serif.ttf"


class FontManager:
    """
    Resolves one serif font file and hands out Pillow fonts per pixel size.
    """

    def __init__(self, font_path: Optional[str] = None, font_url: Optional[str] = None,
                 cache_dir: Optional[str] = None):
        """
        Args:
            font_path: Explicit TTF/OTF path. Falls back to WATERMARK_FONT_PATH.
            font_url: URL to download a font from when no local serif face exists.
                      Falls back to WATERMARK_FONT_URL.
            cache_dir: Where a downloaded font is kept between invocations.
        """
        self.font_path = font_path or os.environ.get(CONFIG['fonts']['path_env'])
        self.font_url = font_url or os.environ.get(CONFIG['fonts']['url_env'])
        self.cache_dir = cache_dir or CONFIG['fonts']['cache_dir']
        self._resolved_path: Optional[str] = None
        self._path_resolved = False
        self._cached_fonts: Dict[int, ImageFont.FreeTypeFont] = {}

    def get_font(self, font_size: int) -> ImageFont.FreeTypeFont:
        """Get a cached font object for the given pixel size."""
        font_size = max(1, int(font_size))
        if font_size not in self._cached_fonts:
            self._cached_fonts[font_size] = self._load_font(font_size)
        return self._cached_fonts[font_size]

    def _load_font(self, font_size: int) -> ImageFont.FreeTypeFont:
        font_path = self.get_font_path()
        if font_path:
            try:
                return ImageFont.truetype(font_path, font_size)
            except OSError as e:
                logger.error(f"Failed to load font {font_path} with size {font_size}: {e}")
        logger.warning(f"No serif font available, using Pillow's built-in font at size {font_size}.")
        return ImageFont.load_default(size=font_size)

    def get_font_path(self) -> Optional[str]:
        """Resolve the serif font file once: explicit path, system candidates, /tmp cache, download."""
        if self._path_resolved:
            return self._resolved_path

        candidates = []
        if self.font_path:
            candidates.append(self.font_path)
        candidates.extend(CONFIG['fonts']['candidates'])
        candidates.append(os.path.join(self.cache_dir, DOWNLOADED_FONT_NAME))

        for candidate in candidates:
            if candidate and os.path.exists(candidate):
                logger.info(f"Using watermark font at {candidate}")
                self._resolved_path = candidate
                break
        else:
            if self.font_url:
                self._resolved_path = self._download_font(self.font_url)

        self._path_resolved = True
        return self._resolved_path

    def _download_font(self, url: str) -> Optional[str]:
        target_path = os.path.join(self.cache_dir, DOWNLOADED_FONT_NAME)
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            logger.info(f"Downloading watermark font from {url}")
            response = requests.get(url, timeout=60)
            response.raise_for_status()
            with open(target_path, 'wb') as f:
                f.write(response.content)
            logger.info(f"Saved watermark font to {target_path}")
            return target_path
        except (requests.RequestException, OSError) as e:
            logger.error(f"Failed to download font from {url}: {e}")
            return None


_default_font_manager: Optional[FontManager] = None


def get_font_manager() -> FontManager:
    """Returns the process-wide FontManager."""
    global _default_font_manager
    if _default_font_manager is None:
        _default_font_manager = FontManager()
    return _default_font_manager
