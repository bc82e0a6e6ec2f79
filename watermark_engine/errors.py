"""
Exception hierarchy for the watermark engine.

The interactive path lets every one of these propagate to the caller. The
server path swallows FetchError/DecodeError raised for the logo only and
resolves MetadataError with fallback dimensions.
"""


class WatermarkError(Exception):
    """Base exception for all watermarking operations."""
    pass


class ConfigurationError(WatermarkError):
    """Raised when a settings update carries invalid fields."""
    pass


class FetchError(WatermarkError):
    """Raised when the logo asset cannot be retrieved or the response is not OK."""
    pass


class DecodeError(WatermarkError):
    """Raised when image or logo bytes cannot be decoded."""
    pass


class RenderError(WatermarkError):
    """Raised when no drawing surface is available or output encoding fails."""
    pass


class MetadataError(WatermarkError):
    """Raised when the source image dimensions cannot be probed."""
    pass
