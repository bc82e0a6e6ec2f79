"""
Watermark settings model.
Holds the single site-wide configuration record and its compiled-in defaults.
"""

from dataclasses import dataclass, asdict, replace, fields
from typing import Any, Dict, Optional

from .errors import ConfigurationError

WATERMARK_TYPES = ('text', 'logo')
SIZES = ('small', 'medium', 'large')
POSITIONS = (
    'top-left',
    'top-center',
    'top-right',
    'center-left',
    'center',
    'center-right',
    'bottom-left',
    'bottom-center',
    'bottom-right',
)

# Persisted rows use the camelCase keys of the settings API
_PERSISTED_KEYS = {
    'logo_url': 'logoUrl',
}
_FIELD_ALIASES = {persisted: name for name, persisted in _PERSISTED_KEYS.items()}
_NULLABLE_FIELDS = {'logo_url'}


@dataclass(frozen=True)
class WatermarkSettings:
    enabled: bool = False
    type: str = 'text'
    text: str = '© My Photography'
    logo_url: Optional[str] = None
    position: str = 'bottom-right'
    opacity: int = 30
    size: str = 'medium'
    padding: int = 20

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'WatermarkSettings':
        """Merge a (possibly partial) persisted record over the defaults, field by field."""
        if not data:
            return cls()
        return cls().merged(data)

    def merged(self, partial: Dict[str, Any]) -> 'WatermarkSettings':
        """Return a copy with the known keys of `partial` applied."""
        known = {f.name for f in fields(self)}
        changes = {}
        for key, value in partial.items():
            name = _FIELD_ALIASES.get(key, key)
            if name not in known:
                continue
            if value is None and name not in _NULLABLE_FIELDS:
                continue
            changes[name] = value
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted camelCase shape."""
        return {_PERSISTED_KEYS.get(key, key): value for key, value in asdict(self).items()}

    @property
    def render_mode(self) -> Optional[str]:
        """'text', 'logo' or None when this record renders nothing."""
        if not self.enabled:
            return None
        if self.type == 'logo':
            return 'logo' if self.logo_url else None
        if self.type == 'text':
            return 'text' if self.text else None
        return None


DEFAULT_SETTINGS = WatermarkSettings()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_settings_update(partial: Dict[str, Any]) -> None:
    """
    Validate a partial settings update before it is merged and persisted.

    Raises:
        ConfigurationError: when any supplied field is out of range.
    """
    if not isinstance(partial, dict):
        raise ConfigurationError("Settings update must be an object")

    opacity = partial.get('opacity')
    if opacity is not None and (not _is_number(opacity) or opacity < 0 or opacity > 100):
        raise ConfigurationError("Opacity must be between 0 and 100")

    padding = partial.get('padding')
    if padding is not None and (not _is_number(padding) or padding < 0):
        raise ConfigurationError("Padding must be non-negative")

    if partial.get('type') is not None and partial['type'] not in WATERMARK_TYPES:
        raise ConfigurationError(f"Type must be one of {', '.join(WATERMARK_TYPES)}")

    if partial.get('position') is not None and partial['position'] not in POSITIONS:
        raise ConfigurationError(f"Position must be one of {', '.join(POSITIONS)}")

    if partial.get('size') is not None and partial['size'] not in SIZES:
        raise ConfigurationError(f"Size must be one of {', '.join(SIZES)}")
