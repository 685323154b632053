# file: src/module1_qr_encoder/metrics.py

"""
Symbol metrics.

Provides utilities to inspect an encoded symbol: dark module share,
penalty breakdown of the chosen mask, redundancy overhead and capacity
utilisation for a version and error correction level.
"""

from typing import Dict

import numpy as np

from .masking import penalty_components
from .symbol import QRSymbol
from .tables import (
    ECC_CODEWORDS_PER_BLOCK,
    NUM_ERROR_CORRECTION_BLOCKS,
    EccLevel,
    max_byte_capacity,
    num_data_codewords,
)


def compute_dark_module_ratio(symbol: QRSymbol) -> float:
    """
    Share of dark modules in the symbol.

    Returns:
        Ratio in [0.0, 1.0]
    """
    return float(np.count_nonzero(symbol.modules)) / symbol.modules.size


def compute_penalty_breakdown(symbol: QRSymbol) -> Dict[str, int]:
    """
    Penalty components of the symbol as masked.

    Returns:
        Dictionary with 'runs', 'blocks', 'finder_like', 'balance' and 'total'
    """
    runs, blocks, finder_like, balance = penalty_components(np.asarray(symbol.modules))
    return {
        'runs': runs,
        'blocks': blocks,
        'finder_like': finder_like,
        'balance': balance,
        'total': runs + blocks + finder_like + balance,
    }


def compute_redundancy_overhead(version: int, ecl: EccLevel) -> float:
    """
    Calculate redundancy overhead as a fraction.

    Returns:
        Overhead ratio: ECC codewords / data codewords

    Example:
        >>> round(compute_redundancy_overhead(1, EccLevel.LOW), 3)
        0.368
    """
    ecc_codewords = (
        ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][version]
        * NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][version]
    )
    return ecc_codewords / num_data_codewords(version, ecl)


def compute_capacity_utilization(payload_bytes: int, version: int, ecl: EccLevel) -> float:
    """
    Fraction of the byte-mode capacity used by a payload.

    Raises:
        ValueError: If payload_bytes is negative
    """
    if payload_bytes < 0:
        raise ValueError(f"payload_bytes must be >= 0, got {payload_bytes}")
    return payload_bytes / max_byte_capacity(version, ecl)
