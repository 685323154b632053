# file: src/module2_qr_renderer/renderer.py

"""
Rendering entry point.

One representation is chosen per call (raster or SVG) and produced in
full; there is no fallback from one representation to another.
"""

import base64
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import numpy as np
import yaml

from module1_qr_encoder import QRSymbol

from .errors import RenderConfigurationError, RenderError, UnsupportedFormatError
from .geometry import DEFAULT_MARGIN, compute_module_pixel_size, validate_margin
from .raster import encode_png, render_raster, validate_gray_values, write_png
from .vector import render_svg, validate_colors

logger = logging.getLogger(__name__)


class RenderFormat(Enum):
    RASTER = "raster"
    SVG = "svg"

    @classmethod
    def parse(cls, value: Union["RenderFormat", str]) -> "RenderFormat":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise UnsupportedFormatError(f"Unknown render format: {value!r}")


@dataclass(frozen=True, eq=False)
class RenderedImage:
    """
    A rendered symbol holding exactly one representation.

    Attributes:
        format: RASTER or SVG
        width, height: Output size in pixels
        module_pixel_size: Pixels per module side
        margin: Quiet zone width in modules
        pixels: Grayscale uint8 array (raster only)
        svg: SVG document (SVG only)
    """

    format: RenderFormat
    width: int
    height: int
    module_pixel_size: int
    margin: int
    pixels: Optional[np.ndarray] = field(default=None, repr=False)
    svg: Optional[str] = field(default=None, repr=False)

    def __post_init__(self):
        if self.format is RenderFormat.RASTER and (self.pixels is None or self.svg is not None):
            raise UnsupportedFormatError("Raster image must hold pixels and nothing else")
        if self.format is RenderFormat.SVG and (self.svg is None or self.pixels is not None):
            raise UnsupportedFormatError("SVG image must hold an SVG document and nothing else")
        if self.pixels is not None:
            # Own a read-only copy; the caller's array stays writable
            pixels = np.array(self.pixels, dtype=np.uint8)
            pixels.setflags(write=False)
            object.__setattr__(self, 'pixels', pixels)

    def dark_pixel_count(self, dark_value: int = 0) -> int:
        """Number of raster pixels equal to dark_value."""
        self._require(RenderFormat.RASTER)
        return int(np.count_nonzero(self.pixels == dark_value))

    def to_png_bytes(self) -> bytes:
        self._require(RenderFormat.RASTER)
        return encode_png(self.pixels)

    def to_data_url(self) -> str:
        """Base64 data URL, ready to embed in HTML or a PDF template."""
        if self.format is RenderFormat.RASTER:
            encoded = base64.b64encode(self.to_png_bytes()).decode('ascii')
            return f"data:image/png;base64,{encoded}"
        encoded = base64.b64encode(self.svg.encode('utf-8')).decode('ascii')
        return f"data:image/svg+xml;base64,{encoded}"

    def save(self, path: str) -> None:
        """
        Write the image to disk: PNG for raster, SVG text for SVG.

        Raises:
            IOError: If write fails
        """
        if self.format is RenderFormat.RASTER:
            write_png(self.pixels, path)
            return

        output_dir = os.path.dirname(path)
        if output_dir and not os.path.exists(output_dir):
            os.makedirs(output_dir, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(self.svg)

    def _require(self, fmt: RenderFormat) -> None:
        if self.format is not fmt:
            raise UnsupportedFormatError(
                f"Image is {self.format.value}, operation needs {fmt.value}"
            )


def render(
    symbol: QRSymbol,
    target_pixel_width: int,
    margin: Optional[int] = None,
    fmt: Union[RenderFormat, str] = RenderFormat.RASTER,
    *,
    dark_value: int = 0,
    light_value: int = 255,
    dark_color: str = "#000000",
    light_color: str = "#ffffff"
) -> RenderedImage:
    """
    Render a symbol at a target pixel width.

    Args:
        symbol: Encoded symbol
        target_pixel_width: Desired output width in pixels (square output)
        margin: Quiet zone width in modules (None = 4)
        fmt: 'raster' or 'svg'
        dark_value, light_value: Gray levels for raster output
        dark_color, light_color: Fills for SVG output

    Returns:
        RenderedImage of side (size + 2 * margin) * module_pixel_size

    Raises:
        ImageTooSmallError: If modules would be smaller than one pixel
        UnsupportedFormatError: If fmt is unknown
        RenderError: If parameters are invalid
    """
    fmt = RenderFormat.parse(fmt)
    if margin is None:
        margin = DEFAULT_MARGIN
    module_pixel_size = compute_module_pixel_size(symbol.size, target_pixel_width, margin)
    margin = int(margin)
    side = (symbol.size + 2 * margin) * module_pixel_size

    if fmt is RenderFormat.RASTER:
        pixels = render_raster(symbol, target_pixel_width, margin, dark_value, light_value)
        return RenderedImage(fmt, side, side, module_pixel_size, margin, pixels=pixels)

    svg = render_svg(symbol, target_pixel_width, margin, dark_color, light_color)
    return RenderedImage(fmt, side, side, module_pixel_size, margin, svg=svg)


class QRRenderer:
    """
    Configured renderer.

    Applies the configured output format, quiet zone and colours to every
    render call.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the renderer.

        Args:
            config_path: Path to configuration YAML file.
                        If None, uses the packaged default configuration.
        """
        self.config = self._load_config(config_path)
        renderer_config = self.config.get('renderer') or {}
        raster_config = renderer_config.get('raster') or {}
        svg_config = renderer_config.get('svg') or {}

        try:
            self.format = RenderFormat.parse(renderer_config.get('format', 'raster'))
        except UnsupportedFormatError as e:
            raise RenderConfigurationError(str(e)) from e
        self.margin = renderer_config.get('margin', DEFAULT_MARGIN)
        self.dark_value = raster_config.get('dark_value', 0)
        self.light_value = raster_config.get('light_value', 255)
        self.dark_color = svg_config.get('dark_color', '#000000')
        self.light_color = svg_config.get('light_color', '#ffffff')

        try:
            validate_margin(self.margin)
            validate_gray_values(self.dark_value, self.light_value)
            validate_colors(self.dark_color, self.light_color)
        except RenderError as e:
            raise RenderConfigurationError(f"Invalid renderer config: {e}") from e

    def _load_config(self, config_path: Optional[str]) -> dict:
        """
        Load configuration from file or use defaults.

        Raises:
            RenderConfigurationError: If an explicit config file cannot be loaded
        """
        if config_path is None:
            default_config_path = os.path.join(
                os.path.dirname(__file__),
                "default_config.yaml"
            )
            if not os.path.exists(default_config_path):
                logger.warning("Default renderer config not found, using built-in defaults")
                return self._get_default_config()
            config_path = default_config_path

        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise RenderConfigurationError(f"Failed to load config {config_path}: {e}") from e

        if config is None:
            return self._get_default_config()
        if not isinstance(config, dict):
            raise RenderConfigurationError(f"Config {config_path} must be a mapping")
        return config

    def _get_default_config(self) -> dict:
        return {
            "renderer": {
                "format": "raster",
                "margin": DEFAULT_MARGIN,
                "raster": {"dark_value": 0, "light_value": 255},
                "svg": {"dark_color": "#000000", "light_color": "#ffffff"},
            }
        }

    def render(
        self,
        symbol: QRSymbol,
        target_pixel_width: int,
        margin: Optional[int] = None,
        fmt: Optional[Union[RenderFormat, str]] = None
    ) -> RenderedImage:
        """Render with configured defaults; margin and fmt override them."""
        return render(
            symbol,
            target_pixel_width,
            self.margin if margin is None else margin,
            self.format if fmt is None else fmt,
            dark_value=self.dark_value,
            light_value=self.light_value,
            dark_color=self.dark_color,
            light_color=self.light_color,
        )
