# file: src/module2_qr_renderer/__init__.py

"""
Module 2: QR Raster/Vector Renderer

Consumes the boolean module matrix of a QRSymbol (Module 1) and produces a
pixel-exact raster bitmap or SVG document at a requested pixel width, with
a quiet zone of `margin` modules.

This module does NOT:
- Encode text (handled by Module 1)
- Lay out labels, pages or PDFs
- Cache rendered images

Public API:
    - render(symbol, target_pixel_width, margin=None, fmt='raster') -> RenderedImage
    - QRRenderer(config_path=None).render(symbol, target_pixel_width)
    - render_raster / render_svg / render_text
"""

from .renderer import render, QRRenderer, RenderedImage, RenderFormat
from .geometry import compute_module_pixel_size, DEFAULT_MARGIN
from .raster import render_raster, encode_png, write_png
from .vector import render_svg
from .text import render_text
from .errors import (
    RenderError,
    ImageTooSmallError,
    UnsupportedFormatError,
    RenderConfigurationError,
)

__all__ = [
    'render',
    'QRRenderer',
    'RenderedImage',
    'RenderFormat',
    'compute_module_pixel_size',
    'DEFAULT_MARGIN',
    'render_raster',
    'encode_png',
    'write_png',
    'render_svg',
    'render_text',
    'RenderError',
    'ImageTooSmallError',
    'UnsupportedFormatError',
    'RenderConfigurationError',
]

__version__ = '1.0.0'
