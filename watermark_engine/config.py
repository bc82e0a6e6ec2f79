"""
Configuration settings for the watermark engine.
Contains default values shared by the canvas and Pillow backends.
"""

CONFIG = {
    'canvas': {
        # Geometry used when the server cannot probe the source dimensions
        'fallback_width': 1920,
        'fallback_height': 1080,
    },
    'watermark': {
        'size_multipliers': {
            'small': 0.015,
            'medium': 0.025,
            'large': 0.04,
        },
        'logo_width_factor': 10,
        'fill_color': 'white',
        'shadow': {
            'color': 'rgba(0, 0, 0, 0.5)',
            'offset_x': 1,
            'offset_y': 1,
            'blur_radius': 2,
        },
    },
    'fonts': {
        'family': 'Georgia, serif',
        'path_env': 'WATERMARK_FONT_PATH',
        'url_env': 'WATERMARK_FONT_URL',
        'cache_dir': '/tmp',
        'candidates': [
            '/usr/share/fonts/truetype/msttcorefonts/Georgia.ttf',
            '/Library/Fonts/Georgia.ttf',
            '/System/Library/Fonts/Supplemental/Georgia.ttf',
            'C:\\Windows\\Fonts\\georgia.ttf',
            '/usr/share/fonts/truetype/dejavu/DejaVuSerif.ttf',
            '/usr/share/fonts/dejavu/DejaVuSerif.ttf',
            '/usr/share/fonts/truetype/liberation/LiberationSerif-Regular.ttf',
        ],
    },
    'cache': {
        'server_ttl_seconds': 60,
    },
    'images': {
        'jpeg_quality': 92,
        'default_format': 'PNG',
    },
    'batch': {
        'max_workers': 4,
    },
    'debug': {
        'verbose_logging': True
    }
}
