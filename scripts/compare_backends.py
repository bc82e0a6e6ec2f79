#!/usr/bin/env python
"""
Renders one image through both watermark backends for every position.
Useful for eyeballing that the canvas preview and the server compositor
put the mark in the same place at the same size.
"""

import os
import sys
import logging
from io import BytesIO
from pathlib import Path

from PIL import Image

# Add the project root to the path so we can import our modules
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from watermark_engine import POSITIONS, WatermarkSettings, apply_server_watermark, apply_watermark
from watermark_engine.errors import WatermarkError
from watermark_engine.logger import get_logger

logging.basicConfig(level=logging.INFO,
                    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = get_logger(__name__)

def make_sample_image(width, height):
    """Build a gradient PNG so the mark is visible on light and dark areas."""
    img = Image.linear_gradient('L').resize((width, height)).convert('RGB')
    buffer = BytesIO()
    img.save(buffer, format='PNG')
    return buffer.getvalue()

def compare(image_bytes, output_dir, base_settings):
    os.makedirs(output_dir, exist_ok=True)
    failures = 0
    for position in POSITIONS:
        settings = base_settings.merged({'position': position})
        for label, render in (('server', apply_server_watermark), ('canvas', apply_watermark)):
            out_path = Path(output_dir) / f"{position}_{label}.png"
            try:
                data = render(image_bytes, settings)
            except WatermarkError as e:
                logger.error(f"{label} backend failed for {position}: {e}")
                failures += 1
                continue
            out_path.write_bytes(data)
            logger.info(f"Saved {out_path}")
    return failures

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Render every watermark position through both backends")
    parser.add_argument("--image", "-i", default=None,
                        help="Source image (default: generated 1200x900 gradient)")
    parser.add_argument("--output", "-o", default="test_output",
                        help="Directory to save output images (default: test_output)")
    parser.add_argument("--text", default="© My Photography", help="Watermark text")
    parser.add_argument("--logo-url", default=None, help="Render a logo from this URL instead of text")
    parser.add_argument("--size", choices=["small", "medium", "large"], default="medium")
    parser.add_argument("--opacity", type=int, default=60)
    parser.add_argument("--padding", type=int, default=20)
    args = parser.parse_args()

    if args.image:
        source = Path(args.image).read_bytes()
    else:
        source = make_sample_image(1200, 900)

    settings = WatermarkSettings(
        enabled=True,
        type='logo' if args.logo_url else 'text',
        text=args.text,
        logo_url=args.logo_url,
        opacity=args.opacity,
        size=args.size,
        padding=args.padding,
    )
    sys.exit(1 if compare(source, args.output, settings) else 0)
