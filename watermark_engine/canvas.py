"""
Canvas module.
An immediate-mode 2D drawing context for the interactive preview path.

Draw calls are recorded together with the drawing state in force at the time
(alpha, alignment, shadow), serialised to SVG and rasterised with CairoSVG.
The state model follows the browser canvas: save()/restore() bracket any
change so a render call never leaks alpha or shadow into the next one.
"""

import base64
from dataclasses import dataclass, replace
from io import BytesIO
from typing import List, Optional, Union
from xml.sax.saxutils import escape, quoteattr

from PIL import Image

from .errors import RenderError
from .image_effects import create_silhouette
from .logger import get_logger
from utils.helpers import parse_color, rgba_to_svg_rgba

logger = get_logger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"

# canvas textAlign -> SVG text-anchor
_TEXT_ANCHORS = {
    'left': 'start',
    'start': 'start',
    'center': 'middle',
    'right': 'end',
    'end': 'end',
}

# canvas textBaseline -> SVG dominant-baseline
_BASELINES = {
    'top': 'text-before-edge',
    'hanging': 'hanging',
    'middle': 'middle',
    'alphabetic': 'alphabetic',
    'ideographic': 'ideographic',
    'bottom': 'text-after-edge',
}


@dataclass
class CanvasState:
    global_alpha: float = 1.0
    font_size: float = 10
    font_family: str = 'sans-serif'
    text_align: str = 'start'
    text_baseline: str = 'alphabetic'
    fill_style: str = 'black'
    shadow_color: str = 'transparent'
    shadow_offset_x: float = 0
    shadow_offset_y: float = 0
    shadow_blur: float = 0


@dataclass(frozen=True)
class Shadow:
    color: tuple
    offset_x: float
    offset_y: float
    blur: float


@dataclass(frozen=True)
class TextOp:
    text: str
    x: float
    y: float
    font_size: float
    font_family: str
    text_anchor: str
    dominant_baseline: str
    fill: tuple
    alpha: float
    shadow: Optional[Shadow]


@dataclass(frozen=True)
class ImageOp:
    image: Image.Image
    x: float
    y: float
    width: float
    height: float
    alpha: float
    shadow: Optional[Shadow]


def _num(value: float) -> str:
    return ('%.3f' % value).rstrip('0').rstrip('.')


def _png_data_uri(image: Image.Image) -> str:
    buffer = BytesIO()
    image.save(buffer, format='PNG')
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode('ascii')


class WatermarkCanvas:
    """A fixed-size drawing surface with browser-canvas drawing state."""

    def __init__(self, width: int, height: int):
        if not width or not height or width <= 0 or height <= 0:
            raise RenderError(f"No drawing context available for a {width}x{height} surface")
        self.width = int(width)
        self.height = int(height)
        self.state = CanvasState()
        self._stack: List[CanvasState] = []
        self.operations: List[Union[TextOp, ImageOp]] = []

    # --- state ---

    def save(self):
        self._stack.append(replace(self.state))

    def restore(self):
        if self._stack:
            self.state = self._stack.pop()

    def _current_shadow(self) -> Optional[Shadow]:
        s = self.state
        color = parse_color(s.shadow_color, default_color=None)
        if not color or color[3] == 0:
            return None
        if not (s.shadow_offset_x or s.shadow_offset_y or s.shadow_blur):
            return None
        return Shadow(color=color, offset_x=s.shadow_offset_x, offset_y=s.shadow_offset_y, blur=s.shadow_blur)

    # --- drawing ---

    def draw_image(self, image: Image.Image, x: float, y: float,
                   width: Optional[float] = None, height: Optional[float] = None):
        self.operations.append(ImageOp(
            image=image,
            x=x,
            y=y,
            width=image.width if width is None else width,
            height=image.height if height is None else height,
            alpha=self.state.global_alpha,
            shadow=self._current_shadow(),
        ))

    def fill_text(self, text: str, x: float, y: float):
        s = self.state
        self.operations.append(TextOp(
            text=text,
            x=x,
            y=y,
            font_size=s.font_size,
            font_family=s.font_family,
            text_anchor=_TEXT_ANCHORS.get(s.text_align, 'start'),
            dominant_baseline=_BASELINES.get(s.text_baseline, 'alphabetic'),
            fill=parse_color(s.fill_style, default_color=(0, 0, 0, 255)),
            alpha=s.global_alpha,
            shadow=self._current_shadow(),
        ))

    # --- output ---

    def _text_element(self, op: TextOp, x: float, y: float, fill: tuple) -> str:
        return (
            f'<text x="{_num(x)}" y="{_num(y)}" font-family={quoteattr(op.font_family)} '
            f'font-size="{_num(op.font_size)}" fill="{rgba_to_svg_rgba(fill)}" '
            f'text-anchor="{op.text_anchor}" dominant-baseline="{op.dominant_baseline}" '
            f'opacity="{_num(op.alpha)}">{escape(op.text)}</text>'
        )

    def _image_element(self, image: Image.Image, x: float, y: float,
                       width: float, height: float, alpha: float) -> str:
        return (
            f'<image x="{_num(x)}" y="{_num(y)}" width="{_num(width)}" height="{_num(height)}" '
            f'preserveAspectRatio="none" opacity="{_num(alpha)}" '
            f'xlink:href="{_png_data_uri(image)}"/>'
        )

    def _render_op(self, op: Union[TextOp, ImageOp]) -> List[str]:
        elements = []
        if isinstance(op, TextOp):
            if op.shadow:
                # SVG text shadows are drawn unblurred; the offset carries the legibility
                elements.append(self._text_element(
                    op, op.x + op.shadow.offset_x, op.y + op.shadow.offset_y, op.shadow.color))
            elements.append(self._text_element(op, op.x, op.y, op.fill))
            return elements

        if op.shadow:
            size = (max(1, int(round(op.width))), max(1, int(round(op.height))))
            source = op.image if op.image.size == size else op.image.resize(size, Image.Resampling.LANCZOS)
            # canvas shadowBlur is twice the Gaussian standard deviation
            silhouette, pad = create_silhouette(source, op.shadow.color, op.shadow.blur / 2)
            elements.append(self._image_element(
                silhouette,
                op.x + op.shadow.offset_x - pad,
                op.y + op.shadow.offset_y - pad,
                silhouette.width,
                silhouette.height,
                op.alpha,
            ))
        elements.append(self._image_element(op.image, op.x, op.y, op.width, op.height, op.alpha))
        return elements

    def to_svg(self) -> str:
        body = []
        for op in self.operations:
            body.extend(self._render_op(op))
        return (
            f'<svg xmlns="{SVG_NS}" xmlns:xlink="{XLINK_NS}" '
            f'width="{self.width}" height="{self.height}" viewBox="0 0 {self.width} {self.height}">'
            + ''.join(body)
            + '</svg>'
        )

    def to_image(self) -> Image.Image:
        """Rasterise the recorded operations into a new RGBA image."""
        try:
            import cairosvg
        except (ImportError, OSError) as e:
            raise RenderError(f"Canvas drawing context unavailable, CairoSVG could not be loaded: {e}") from e

        logger.debug(f"Rasterising canvas {self.width}x{self.height} with {len(self.operations)} operations")
        try:
            png_bytes = cairosvg.svg2png(
                bytestring=self.to_svg().encode('utf-8'),
                output_width=self.width,
                output_height=self.height,
            )
            image = Image.open(BytesIO(png_bytes))
            image.load()
        except Exception as e:
            logger.error(f"CairoSVG failed to rasterise the canvas: {e}", exc_info=True)
            raise RenderError(f"Failed to rasterise canvas: {e}") from e
        return image.convert('RGBA') if image.mode != 'RGBA' else image
