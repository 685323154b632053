# file: src/module2_qr_renderer/errors.py

"""
Renderer exception hierarchy.

All exceptions inherit from RenderError for unified handling.
"""


class RenderError(Exception):
    """Base exception for all rendering errors."""
    pass


class ImageTooSmallError(RenderError):
    """Raised when the target width cannot give every module at least one pixel."""

    def __init__(self, message: str, target_pixel_width: int = None, required_pixel_width: int = None):
        super().__init__(message)
        self.target_pixel_width = target_pixel_width
        self.required_pixel_width = required_pixel_width


class UnsupportedFormatError(RenderError):
    """Raised when an output representation is unknown or not held by an image."""
    pass


class RenderConfigurationError(RenderError):
    """Raised when renderer configuration is invalid."""
    pass
