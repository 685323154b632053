# file: src/module2_qr_renderer/geometry.py

"""
Module-to-pixel scaling shared by all renderers.
"""

import numbers

import numpy as np

from .errors import ImageTooSmallError, RenderError


# Quiet zone recommended by ISO/IEC 18004
DEFAULT_MARGIN = 4


def is_integer(value) -> bool:
    """True for Python and NumPy integers, excluding bool."""
    return isinstance(value, numbers.Integral) and not isinstance(value, (bool, np.bool_))


def validate_margin(margin: int) -> None:
    if not is_integer(margin) or margin < 0:
        raise RenderError(f"Margin must be a non-negative integer, got {margin!r}")


def compute_module_pixel_size(symbol_size: int, target_pixel_width: int, margin: int = DEFAULT_MARGIN) -> int:
    """
    Whole number of pixels per module that fits the target width.

    modulePixelSize = floor(target_pixel_width / (symbol_size + 2 * margin))

    Raises:
        RenderError: If width or margin are invalid
        ImageTooSmallError: If modules would be smaller than one pixel
    """
    validate_margin(margin)
    if not is_integer(target_pixel_width) or target_pixel_width <= 0:
        raise RenderError(f"Target pixel width must be a positive integer, got {target_pixel_width!r}")

    total_modules = int(symbol_size) + 2 * int(margin)
    module_pixel_size = int(target_pixel_width) // total_modules
    if module_pixel_size < 1:
        raise ImageTooSmallError(
            f"Target width {target_pixel_width}px is too small for {total_modules} modules "
            f"(at least {total_modules}px required)",
            target_pixel_width=int(target_pixel_width),
            required_pixel_width=total_modules,
        )
    return module_pixel_size
