# file: src/module1_qr_encoder/errors.py

"""
QR encoder exception hierarchy.

All exceptions inherit from QREncodingError for unified handling.
"""


class QREncodingError(Exception):
    """Base exception for all QR encoding errors."""
    pass


class DataTooLongError(QREncodingError):
    """Raised when the payload does not fit in any allowed version."""

    def __init__(self, message: str, data_bits: int = None, capacity_bits: int = None):
        super().__init__(message)
        self.data_bits = data_bits
        self.capacity_bits = capacity_bits


class UnsupportedModeError(QREncodingError):
    """Raised when a segment mode other than byte mode is requested."""
    pass


class InvalidEccLevelError(QREncodingError):
    """Raised when an error correction level cannot be recognised."""
    pass


class QRConfigurationError(QREncodingError):
    """Raised when encoder parameters or configuration are invalid."""
    pass
