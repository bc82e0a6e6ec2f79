import os
import sys
from io import BytesIO

import pytest
from PIL import Image

# Adjust path to import from the project root
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))


def _cairo_available():
    try:
        import cairosvg  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


requires_cairo = pytest.mark.skipif(not _cairo_available(), reason="CairoSVG / libcairo not installed")


def image_bytes(width=400, height=300, color=(20, 40, 160), fmt='PNG', mode='RGB'):
    """Encode a solid-colour test image."""
    if mode == 'RGBA' and len(color) == 3:
        color = (*color, 255)
    img = Image.new(mode, (width, height), color)
    buffer = BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def decode(data):
    img = Image.open(BytesIO(data))
    img.load()
    return img


class FakeResponse:
    def __init__(self, content=b'', status_code=200, json_body=None):
        self.content = content
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self._json_body = json_body

    def json(self):
        return self._json_body

    def raise_for_status(self):
        if not self.ok:
            import requests
            raise requests.HTTPError(f"HTTP {self.status_code}")


@pytest.fixture
def png_bytes():
    return image_bytes()


@pytest.fixture
def logo_png():
    """A 50x20 opaque red logo."""
    return image_bytes(50, 20, color=(255, 0, 0, 255), mode='RGBA')
