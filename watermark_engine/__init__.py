# watermark_engine/__init__.py

"""
Watermark compositing engine.
Shared placement math plus two renderers: an SVG canvas for the interactive
path and a Pillow compositor for the authoritative server path.
"""

# Import configuration and logging setup first
from .config import CONFIG
from .logger import get_logger

from .errors import (
    WatermarkError,
    ConfigurationError,
    FetchError,
    DecodeError,
    RenderError,
    MetadataError,
)
from .settings import (
    WatermarkSettings,
    DEFAULT_SETTINGS,
    POSITIONS,
    SIZES,
    WATERMARK_TYPES,
    validate_settings_update,
)
from .geometry import (
    AnchorPoint,
    resolve_anchor,
    resolve_font_size,
    resolve_max_logo_width,
    resolve_placement,
    scale_logo,
    logo_origin,
)
from .canvas import WatermarkCanvas
from .text_renderer import TextRenderer
from .logo_renderer import LogoRenderer
from .font_manager import FontManager
from .image_handler import load_logo_from_url
from .settings_cache import TTLSettingsCache, SessionSettingsCache, fetch_settings_over_http
from .processor import apply_server_watermark
from .interactive import apply_watermark, apply_watermark_batch, render_preview
from .upload import prepare_upload

logger = get_logger(__name__)
logger.debug("Watermark engine module initialized")

__all__ = [
    'CONFIG',
    'get_logger',
    'WatermarkError',
    'ConfigurationError',
    'FetchError',
    'DecodeError',
    'RenderError',
    'MetadataError',
    'WatermarkSettings',
    'DEFAULT_SETTINGS',
    'POSITIONS',
    'SIZES',
    'WATERMARK_TYPES',
    'validate_settings_update',
    'AnchorPoint',
    'resolve_anchor',
    'resolve_font_size',
    'resolve_max_logo_width',
    'resolve_placement',
    'scale_logo',
    'logo_origin',
    'WatermarkCanvas',
    'TextRenderer',
    'LogoRenderer',
    'FontManager',
    'load_logo_from_url',
    'TTLSettingsCache',
    'SessionSettingsCache',
    'fetch_settings_over_http',
    'apply_server_watermark',
    'apply_watermark',
    'apply_watermark_batch',
    'render_preview',
    'prepare_upload',
]
