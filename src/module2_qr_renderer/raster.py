# file: src/module2_qr_renderer/raster.py

"""
Raster rendering of QR symbols.

Produces grayscale uint8 bitmaps where every module is a solid square of
whole pixels, and encodes/writes them as PNG through OpenCV.
"""

import logging
import os

import numpy as np
import cv2

from module1_qr_encoder import QRSymbol

from .errors import RenderError
from .geometry import DEFAULT_MARGIN, compute_module_pixel_size, is_integer

logger = logging.getLogger(__name__)


# Type alias for Image
Image = np.ndarray  # Shape: (H, W), dtype: uint8, range: [0, 255]


def _validate_gray_value(name: str, value: int) -> None:
    if not is_integer(value) or not 0 <= value <= 255:
        raise RenderError(f"{name} must be an integer in [0, 255], got {value!r}")


def validate_gray_values(dark_value: int, light_value: int) -> None:
    """
    Check raster gray levels.

    Raises:
        RenderError: If either value is out of range or both are equal
    """
    _validate_gray_value("dark_value", dark_value)
    _validate_gray_value("light_value", light_value)
    # Equal levels would erase every module
    if dark_value == light_value:
        raise RenderError(f"dark_value and light_value must differ, both are {dark_value}")


def render_raster(
    symbol: QRSymbol,
    target_pixel_width: int,
    margin: int = DEFAULT_MARGIN,
    dark_value: int = 0,
    light_value: int = 255
) -> Image:
    """
    Rasterize a symbol.

    Args:
        symbol: Encoded symbol
        target_pixel_width: Desired output width in pixels
        margin: Quiet zone width in modules
        dark_value: Gray level of dark modules
        light_value: Gray level of light modules and the quiet zone

    Returns:
        Square grayscale image of side (size + 2 * margin) * module_pixel_size

    Raises:
        ImageTooSmallError: If modules would be smaller than one pixel
        RenderError: If parameters are invalid
    """
    validate_gray_values(dark_value, light_value)
    module_pixel_size = compute_module_pixel_size(symbol.size, target_pixel_width, margin)

    padded = np.pad(np.asarray(symbol.modules, dtype=bool), margin, mode='constant', constant_values=False)
    dark = padded.repeat(module_pixel_size, axis=0).repeat(module_pixel_size, axis=1)

    image = np.full(dark.shape, light_value, dtype=np.uint8)
    image[dark] = dark_value

    logger.debug(
        "Rasterized version %d symbol at %dpx/module into %dx%d",
        symbol.version, module_pixel_size, image.shape[1], image.shape[0],
    )
    return image


def _validate_image(image: Image) -> None:
    if not isinstance(image, np.ndarray):
        raise RenderError(f"Expected numpy array, got {type(image)}")
    if image.ndim not in (2, 3):
        raise RenderError(f"Invalid image dimensions: {image.ndim}. Expected 2 (H, W) or 3 (H, W, C).")
    if image.ndim == 3 and image.shape[2] not in (1, 3, 4):
        raise RenderError(f"Invalid number of channels: {image.shape[2]}. Expected 1, 3 or 4.")
    if image.dtype != np.uint8:
        raise RenderError(f"Invalid image dtype: {image.dtype}. Expected uint8.")
    if image.size == 0:
        raise RenderError("Image is empty")


def encode_png(image: Image) -> bytes:
    """
    Encode an image as PNG bytes.

    Raises:
        RenderError: If the image is invalid or encoding fails
    """
    _validate_image(image)
    ok, buffer = cv2.imencode('.png', image)
    if not ok:
        raise RenderError("PNG encoding failed")
    return buffer.tobytes()


def write_png(image: Image, path: str) -> None:
    """
    Write an image to a PNG file.

    Args:
        image: Grayscale or BGR uint8 image
        path: Output file path

    Raises:
        RenderError: If the image is invalid
        IOError: If write fails
    """
    _validate_image(image)
    if not path.lower().endswith('.png'):
        raise RenderError(f"Raster output path must end in .png: {path}")

    # Create output directory if it doesn't exist
    output_dir = os.path.dirname(path)
    if output_dir and not os.path.exists(output_dir):
        os.makedirs(output_dir, exist_ok=True)

    try:
        written = cv2.imwrite(path, image, [cv2.IMWRITE_PNG_COMPRESSION, 9])
    except cv2.error as e:
        raise IOError(f"Error writing image: {e}") from e
    if not written:
        raise IOError(f"Failed to write image: {path}")

    # Verify file was created
    if not os.path.exists(path):
        raise IOError(f"Image file was not created: {path}")
