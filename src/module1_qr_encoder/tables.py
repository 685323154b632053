# file: src/module1_qr_encoder/tables.py

"""
Constant tables for QR symbol construction (ISO/IEC 18004).

Tables are tuples indexed by error correction ordinal and then by version
(index 0 is an unused placeholder so that versions index directly).
Nothing here is mutated after import.
"""

from enum import Enum
from typing import Tuple, Union

from .errors import InvalidEccLevelError, UnsupportedModeError, QRConfigurationError


MIN_VERSION = 1
MAX_VERSION = 40

PAD_BYTES = (0xEC, 0x11)

# Format information: BCH(15,5) generator and XOR mask
FORMAT_GENERATOR = 0x537
FORMAT_MASK = 0x5412

# Version information: BCH(18,6) generator
VERSION_GENERATOR = 0x1F25


class EccLevel(Enum):
    """Error correction level. Value is the ordinal used to index tables."""

    LOW = 0
    MEDIUM = 1
    QUARTILE = 2
    HIGH = 3

    @property
    def ordinal(self) -> int:
        return self.value

    @property
    def format_bits(self) -> int:
        """Two-bit level indicator written into the format information."""
        return _FORMAT_BITS[self.value]

    @property
    def recovery_percent(self) -> int:
        """Approximate share of codewords that can be restored."""
        return _RECOVERY_PERCENT[self.value]

    @property
    def code(self) -> str:
        return self.name[0]

    @classmethod
    def parse(cls, value: Union["EccLevel", str]) -> "EccLevel":
        """
        Resolve an error correction level.

        Accepts an EccLevel member, a one-letter code ('L', 'M', 'Q', 'H')
        or a full level name, case-insensitive.

        Raises:
            InvalidEccLevelError: If the value names no level
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            for level in cls:
                if key in (level.name, level.code):
                    return level
        raise InvalidEccLevelError(f"Unknown error correction level: {value!r}")


_FORMAT_BITS = (1, 0, 3, 2)
_RECOVERY_PERCENT = (7, 15, 25, 30)


class Mode(Enum):
    """Segment mode. Value is the 4-bit mode indicator."""

    NUMERIC = 0x1
    ALPHANUMERIC = 0x2
    BYTE = 0x4
    KANJI = 0x8
    ECI = 0x7

    @property
    def mode_bits(self) -> int:
        return self.value

    @classmethod
    def parse(cls, value: Union["Mode", str]) -> "Mode":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                pass
        raise UnsupportedModeError(f"Unknown segment mode: {value!r}")


ECC_CODEWORDS_PER_BLOCK: Tuple[Tuple[int, ...], ...] = (
    # Version: (0 is a placeholder)
    #  0,  1,  2,  3,  4,  5,  6,  7,  8,  9, 10, 11, 12, 13, 14, 15, 16, 17, 18, 19, 20,
    #     21, 22, 23, 24, 25, 26, 27, 28, 29, 30, 31, 32, 33, 34, 35, 36, 37, 38, 39, 40
    (-1,  7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28, 28,
         28, 28, 30, 30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),  # Low
    (-1, 10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26, 26,
         26, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28),  # Medium
    (-1, 13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26, 30,
         28, 30, 30, 30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),  # Quartile
    (-1, 17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26, 28,
         30, 24, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),  # High
)

NUM_ERROR_CORRECTION_BLOCKS: Tuple[Tuple[int, ...], ...] = (
    (-1,  1,  1,  1,  1,  1,  2,  2,  2,  2,  4,  4,  4,  4,  4,  6,  6,  6,  6,  7,  8,
          8,  9,  9, 10, 12, 12, 12, 13, 14, 15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25),  # Low
    (-1,  1,  1,  1,  2,  2,  4,  4,  4,  5,  5,  5,  8,  9,  9, 10, 10, 11, 13, 14, 16,
         17, 17, 18, 20, 21, 23, 25, 26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49),  # Medium
    (-1,  1,  1,  2,  2,  4,  4,  6,  6,  8,  8,  8, 10, 12, 16, 12, 17, 16, 18, 21, 20,
         23, 23, 25, 27, 29, 34, 34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68),  # Quartile
    (-1,  1,  1,  2,  4,  4,  4,  5,  6,  8,  8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25,
         25, 34, 30, 32, 35, 37, 40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81),  # High
)

ALIGNMENT_PATTERN_POSITIONS: Tuple[Tuple[int, ...], ...] = (
    (),                                 # placeholder
    (),                                 # 1
    (6, 18),                            # 2
    (6, 22),                            # 3
    (6, 26),                            # 4
    (6, 30),                            # 5
    (6, 34),                            # 6
    (6, 22, 38),                        # 7
    (6, 24, 42),                        # 8
    (6, 26, 46),                        # 9
    (6, 28, 50),                        # 10
    (6, 30, 54),                        # 11
    (6, 32, 58),                        # 12
    (6, 34, 62),                        # 13
    (6, 26, 46, 66),                    # 14
    (6, 26, 48, 70),                    # 15
    (6, 26, 50, 74),                    # 16
    (6, 30, 54, 78),                    # 17
    (6, 30, 56, 82),                    # 18
    (6, 30, 58, 86),                    # 19
    (6, 34, 62, 90),                    # 20
    (6, 28, 50, 72, 94),                # 21
    (6, 26, 50, 74, 98),                # 22
    (6, 30, 54, 78, 102),               # 23
    (6, 28, 54, 80, 106),               # 24
    (6, 32, 58, 84, 110),               # 25
    (6, 30, 58, 86, 114),               # 26
    (6, 34, 62, 90, 118),               # 27
    (6, 26, 50, 74, 98, 122),           # 28
    (6, 30, 54, 78, 102, 126),          # 29
    (6, 26, 52, 78, 104, 130),          # 30
    (6, 30, 56, 82, 108, 134),          # 31
    (6, 34, 60, 86, 112, 138),          # 32
    (6, 30, 58, 86, 114, 142),          # 33
    (6, 34, 62, 90, 118, 146),          # 34
    (6, 30, 54, 78, 102, 126, 150),     # 35
    (6, 24, 50, 76, 102, 128, 154),     # 36
    (6, 28, 54, 80, 106, 132, 158),     # 37
    (6, 32, 58, 84, 110, 136, 162),     # 38
    (6, 26, 54, 82, 110, 138, 166),     # 39
    (6, 30, 58, 86, 114, 142, 170),     # 40
)


def validate_version(version: int) -> None:
    if not isinstance(version, int) or not MIN_VERSION <= version <= MAX_VERSION:
        raise QRConfigurationError(
            f"Version must be an integer in [{MIN_VERSION}, {MAX_VERSION}], got {version!r}"
        )


def symbol_size(version: int) -> int:
    """Side length of the module matrix."""
    return version * 4 + 17


def num_raw_data_modules(version: int) -> int:
    """
    Number of modules left for data and ECC codewords once all function
    patterns are drawn. Includes remainder bits, so it may not be a
    multiple of 8.
    """
    validate_version(version)
    result = (16 * version + 128) * version + 64
    if version >= 2:
        num_align = version // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if version >= 7:
            result -= 36
    return result


def num_data_codewords(version: int, ecl: EccLevel) -> int:
    """Number of 8-bit data codewords (excluding ECC) for a version and level."""
    return (
        num_raw_data_modules(version) // 8
        - ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][version]
        * NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][version]
    )


def char_count_bits(mode: Mode, version: int) -> int:
    """Width of the character count indicator."""
    if mode is not Mode.BYTE:
        raise UnsupportedModeError(f"Only byte mode is supported, got {mode.name}")
    return 8 if version <= 9 else 16


def max_byte_capacity(version: int, ecl: EccLevel) -> int:
    """Largest byte-mode payload (in bytes) that fits the version and level."""
    header_bits = 4 + char_count_bits(Mode.BYTE, version)
    available = num_data_codewords(version, ecl) * 8 - header_bits
    return min(available // 8, (1 << char_count_bits(Mode.BYTE, version)) - 1)
