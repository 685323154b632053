# file: src/module2_qr_renderer/vector.py

"""
Vector (SVG) rendering of QR symbols.

Dark modules are merged into horizontal runs per row; each run becomes one
rectangle in a single path. The viewBox is in module units and the
width/height attributes carry the pixel size, so the SVG scales to exactly
the same geometry as the raster output.
"""

import logging
import re
from typing import Iterator, Tuple

import numpy as np

from module1_qr_encoder import QRSymbol

from .errors import RenderError
from .geometry import DEFAULT_MARGIN, compute_module_pixel_size

logger = logging.getLogger(__name__)


_COLOR_PATTERN = re.compile(r'^(#[0-9a-fA-F]{3}|#[0-9a-fA-F]{6}|[a-zA-Z]+)$')


def _validate_color(name: str, color: str) -> None:
    if not isinstance(color, str) or not _COLOR_PATTERN.match(color):
        raise RenderError(f"{name} must be a hex colour or colour name, got {color!r}")


def _normalize_color(color: str) -> str:
    color = color.lower()
    if len(color) == 4 and color.startswith("#"):
        return "#" + "".join(c * 2 for c in color[1:])
    return color


def validate_colors(dark_color: str, light_color: str) -> None:
    """
    Check SVG fills.

    Raises:
        RenderError: If either colour is malformed or both are the same colour
    """
    _validate_color("dark_color", dark_color)
    _validate_color("light_color", light_color)
    if _normalize_color(dark_color) == _normalize_color(light_color):
        raise RenderError(f"dark_color and light_color must differ, both are {dark_color!r}")


def dark_runs(modules: np.ndarray) -> Iterator[Tuple[int, int, int]]:
    """
    Yield (x, y, length) for every horizontal run of dark modules.
    """
    for y, row in enumerate(np.asarray(modules, dtype=bool)):
        # Pad with light modules so every run has a start and an end edge
        edges = np.diff(np.concatenate(([False], row, [False])).astype(np.int8))
        starts = np.flatnonzero(edges == 1)
        ends = np.flatnonzero(edges == -1)
        for start, end in zip(starts, ends):
            yield int(start), y, int(end - start)


def svg_path_data(symbol: QRSymbol, margin: int = DEFAULT_MARGIN) -> str:
    """Path data with one closed rectangle per dark run, offset by the margin."""
    return ''.join(
        f"M{x + margin},{y + margin}h{length}v1h-{length}z"
        for x, y, length in dark_runs(symbol.modules)
    )


def render_svg(
    symbol: QRSymbol,
    target_pixel_width: int,
    margin: int = DEFAULT_MARGIN,
    dark_color: str = "#000000",
    light_color: str = "#ffffff"
) -> str:
    """
    Render a symbol as an SVG document.

    Args:
        symbol: Encoded symbol
        target_pixel_width: Desired output width in pixels
        margin: Quiet zone width in modules
        dark_color: Fill of dark modules
        light_color: Background fill

    Returns:
        SVG document as a string

    Raises:
        ImageTooSmallError: If modules would be smaller than one pixel
        RenderError: If parameters are invalid
    """
    validate_colors(dark_color, light_color)
    module_pixel_size = compute_module_pixel_size(symbol.size, target_pixel_width, margin)

    total_modules = symbol.size + 2 * margin
    pixel_size = total_modules * module_pixel_size

    logger.debug(
        "Vectorized version %d symbol into %dx%d SVG",
        symbol.version, pixel_size, pixel_size,
    )
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" '
        f'width="{pixel_size}" height="{pixel_size}" '
        f'viewBox="0 0 {total_modules} {total_modules}" shape-rendering="crispEdges">\n'
        f'<rect width="{total_modules}" height="{total_modules}" fill="{light_color}"/>\n'
        f'<path d="{svg_path_data(symbol, margin)}" fill="{dark_color}"/>\n'
        '</svg>\n'
    )
