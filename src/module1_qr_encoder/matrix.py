# file: src/module1_qr_encoder/matrix.py

"""
Module matrix layout: function patterns, format/version information and
data placement.

Coordinates are (x, y) = (column, row); arrays are indexed [y, x].
"""

from typing import Iterator, Tuple

import numpy as np

from .errors import QREncodingError
from .tables import (
    ALIGNMENT_PATTERN_POSITIONS,
    FORMAT_GENERATOR,
    FORMAT_MASK,
    VERSION_GENERATOR,
    EccLevel,
    symbol_size,
    validate_version,
)


def _get_bit(value: int, index: int) -> bool:
    return ((value >> index) & 1) != 0


def format_bits(ecl: EccLevel, mask: int) -> int:
    """15-bit format information word (BCH protected, XOR masked)."""
    data = (ecl.format_bits << 3) | mask
    remainder = data
    for _ in range(10):
        remainder = (remainder << 1) ^ ((remainder >> 9) * FORMAT_GENERATOR)
    return ((data << 10) | remainder) ^ FORMAT_MASK


def version_bits(version: int) -> int:
    """18-bit version information word (BCH protected)."""
    remainder = version
    for _ in range(12):
        remainder = (remainder << 1) ^ ((remainder >> 11) * VERSION_GENERATOR)
    return (version << 12) | remainder


class ModuleMatrix:
    """
    Square grid of modules with a co-indexed function-module flag.

    Both arrays are allocated once from the version and never resized.
    Modules flagged as function modules are never touched by data
    placement or masking.
    """

    def __init__(self, version: int):
        validate_version(version)
        self.version = version
        self.size = symbol_size(version)
        self.modules = np.zeros((self.size, self.size), dtype=bool)
        self.is_function = np.zeros((self.size, self.size), dtype=bool)

    def copy(self) -> "ModuleMatrix":
        clone = ModuleMatrix(self.version)
        clone.modules = self.modules.copy()
        clone.is_function = self.is_function.copy()
        return clone

    def set_function_module(self, x: int, y: int, dark: bool) -> None:
        self.modules[y, x] = dark
        self.is_function[y, x] = True

    # ------------------------------------------------------------------
    # Function patterns
    # ------------------------------------------------------------------

    def draw_function_patterns(self) -> None:
        """
        Draw timing, finder and alignment patterns, reserve the format area
        and draw version information (version 7+).
        """
        size = self.size

        # Timing patterns
        for i in range(size):
            self.set_function_module(6, i, i % 2 == 0)
            self.set_function_module(i, 6, i % 2 == 0)

        # Finder patterns with separators (overwrite timing where they meet)
        self._draw_finder_pattern(3, 3)
        self._draw_finder_pattern(size - 4, 3)
        self._draw_finder_pattern(3, size - 4)

        # Alignment patterns, skipping the three finder corners
        positions = ALIGNMENT_PATTERN_POSITIONS[self.version]
        count = len(positions)
        for i in range(count):
            for j in range(count):
                if (i == 0 and j == 0) or (i == 0 and j == count - 1) or (i == count - 1 and j == 0):
                    continue
                self._draw_alignment_pattern(positions[i], positions[j])

        # Placeholder format bits (overwritten once the mask is known)
        self.draw_format_bits(EccLevel.LOW, 0)
        self._draw_version()

    def _draw_finder_pattern(self, x: int, y: int) -> None:
        """9x9 finder with separator ring, centred at (x, y); clipped at edges."""
        for dy in range(-4, 5):
            for dx in range(-4, 5):
                xx, yy = x + dx, y + dy
                if 0 <= xx < self.size and 0 <= yy < self.size:
                    distance = max(abs(dx), abs(dy))
                    self.set_function_module(xx, yy, distance not in (2, 4))

    def _draw_alignment_pattern(self, x: int, y: int) -> None:
        for dy in range(-2, 3):
            for dx in range(-2, 3):
                self.set_function_module(x + dx, y + dy, max(abs(dx), abs(dy)) != 1)

    def draw_format_bits(self, ecl: EccLevel, mask: int) -> None:
        """Draw both copies of the format information plus the dark module."""
        bits = format_bits(ecl, mask)
        size = self.size

        # First copy, around the top-left finder
        for i in range(0, 6):
            self.set_function_module(8, i, _get_bit(bits, i))
        self.set_function_module(8, 7, _get_bit(bits, 6))
        self.set_function_module(8, 8, _get_bit(bits, 7))
        self.set_function_module(7, 8, _get_bit(bits, 8))
        for i in range(9, 15):
            self.set_function_module(14 - i, 8, _get_bit(bits, i))

        # Second copy, split between the other two finders
        for i in range(0, 8):
            self.set_function_module(size - 1 - i, 8, _get_bit(bits, i))
        for i in range(8, 15):
            self.set_function_module(8, size - 15 + i, _get_bit(bits, i))

        # Dark module
        self.set_function_module(8, size - 8, True)

    def _draw_version(self) -> None:
        if self.version < 7:
            return
        bits = version_bits(self.version)
        for i in range(18):
            bit = _get_bit(bits, i)
            a = self.size - 11 + i % 3
            b = i // 3
            self.set_function_module(a, b, bit)
            self.set_function_module(b, a, bit)

    # ------------------------------------------------------------------
    # Data placement
    # ------------------------------------------------------------------

    def data_module_positions(self) -> Iterator[Tuple[int, int]]:
        """
        Yield (x, y) of every non-function module in placement order.

        Column pairs are visited right to left, skipping the vertical timing
        column; the vertical direction alternates, starting upwards.
        """
        size = self.size
        right = size - 1
        while right >= 1:
            if right == 6:
                right = 5
            upward = ((right + 1) & 2) == 0
            for vert in range(size):
                y = size - 1 - vert if upward else vert
                for j in range(2):
                    x = right - j
                    if not self.is_function[y, x]:
                        yield x, y
            right -= 2

    def draw_codewords(self, codewords: bytes) -> int:
        """
        Place the interleaved codeword stream into the data modules, MSB
        first. Modules left over after the stream ends (remainder bits)
        stay light.

        Returns:
            Number of bits placed
        """
        total_bits = len(codewords) * 8
        placed = 0
        for x, y in self.data_module_positions():
            if placed >= total_bits:
                break
            self.modules[y, x] = _get_bit(codewords[placed >> 3], 7 - (placed & 7))
            placed += 1

        if placed != total_bits:
            raise QREncodingError(
                f"Codeword stream of {total_bits} bits does not fit version {self.version} "
                f"({placed} bits placed)"
            )
        return placed
