# file: src/module1_qr_encoder/__init__.py

"""
Module 1: QR Symbol Encoder

Turns text and an error correction level into a QR symbol: byte-mode
segment, smallest fitting version, padded bit stream, Reed-Solomon blocks,
interleaving, module layout and penalty-based mask selection.

Pure and deterministic: no I/O, no shared mutable state.

Public API:
    - encode(text, ecc_level=EccLevel.HIGH, ...) -> QRSymbol
    - encode_with_metadata(text, ecc_level, ...) -> (QRSymbol, dict)
    - QREncoder(config_path=None).encode(text)
    - EccLevel, Mode, QRSymbol
"""

from .encoder import encode, encode_with_metadata, QREncoder
from .symbol import QRSymbol
from .tables import EccLevel, Mode, MIN_VERSION, MAX_VERSION, max_byte_capacity
from .metrics import (
    compute_dark_module_ratio,
    compute_penalty_breakdown,
    compute_redundancy_overhead,
    compute_capacity_utilization,
)
from .errors import (
    QREncodingError,
    DataTooLongError,
    UnsupportedModeError,
    InvalidEccLevelError,
    QRConfigurationError,
)

__version__ = "1.0.0"

__all__ = [
    "encode",
    "encode_with_metadata",
    "QREncoder",
    "QRSymbol",
    "EccLevel",
    "Mode",
    "MIN_VERSION",
    "MAX_VERSION",
    "max_byte_capacity",
    "compute_dark_module_ratio",
    "compute_penalty_breakdown",
    "compute_redundancy_overhead",
    "compute_capacity_utilization",
    "QREncodingError",
    "DataTooLongError",
    "UnsupportedModeError",
    "InvalidEccLevelError",
    "QRConfigurationError",
]
