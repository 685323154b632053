# file: src/module1_qr_encoder/symbol.py

"""
Immutable QR symbol produced by the encoder.
"""

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .tables import EccLevel


@dataclass(frozen=True, eq=False)
class QRSymbol:
    """
    Encoded QR symbol.

    Attributes:
        version: Symbol version, 1..40
        ecc_level: Error correction level actually used
        mask: Mask pattern index, 0..7
        modules: (size, size) bool array, True = dark, indexed [y, x]
        function_modules: (size, size) bool array flagging function modules
    """

    version: int
    ecc_level: EccLevel
    mask: int
    modules: np.ndarray = field(repr=False)
    function_modules: np.ndarray = field(repr=False)

    def __post_init__(self):
        modules = np.array(self.modules, dtype=bool)
        function_modules = np.array(self.function_modules, dtype=bool)
        modules.setflags(write=False)
        function_modules.setflags(write=False)
        object.__setattr__(self, 'modules', modules)
        object.__setattr__(self, 'function_modules', function_modules)

    @property
    def size(self) -> int:
        return self.version * 4 + 17

    def get_module(self, x: int, y: int) -> bool:
        """Colour of the module at column x, row y; False outside the symbol."""
        return 0 <= x < self.size and 0 <= y < self.size and bool(self.modules[y, x])

    def dark_module_count(self) -> int:
        return int(np.count_nonzero(self.modules))

    def to_list(self) -> List[List[bool]]:
        return self.modules.tolist()

    def same_as(self, other: "QRSymbol") -> bool:
        """True if both symbols have identical version, level, mask and modules."""
        return (
            self.version == other.version
            and self.ecc_level is other.ecc_level
            and self.mask == other.mask
            and np.array_equal(self.modules, other.modules)
        )
