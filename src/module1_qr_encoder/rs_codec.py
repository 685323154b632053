# file: src/module1_qr_encoder/rs_codec.py

"""
Reed-Solomon error correction codewords for QR blocks.

Uses the reedsolo library for Galois Field arithmetic and RS encoding.
QR symbols use GF(256) generated by x^8 + x^4 + x^3 + x^2 + 1 (0x11D)
with generator alpha = 2 and first consecutive root alpha^0.
"""

from types import MappingProxyType
from typing import Sequence

from reedsolo import RSCodec

from .errors import QREncodingError, QRConfigurationError
from .tables import ECC_CODEWORDS_PER_BLOCK


PRIMITIVE_POLYNOMIAL = 0x11D
GENERATOR = 2
FIRST_CONSECUTIVE_ROOT = 0
FIELD_SIZE = 256


def _build_codec(nsym: int) -> RSCodec:
    return RSCodec(
        nsym,
        fcr=FIRST_CONSECUTIVE_ROOT,
        prim=PRIMITIVE_POLYNOMIAL,
        generator=GENERATOR,
    )


# One shared codec per ECC block length used by QR symbols, built at import
_CODECS = MappingProxyType({
    nsym: _build_codec(nsym)
    for nsym in sorted({n for row in ECC_CODEWORDS_PER_BLOCK for n in row[1:]})
})


class ReedSolomonCodec:
    """
    Reed-Solomon remainder generator for a fixed ECC length.

    Parameters:
        nsym (int): Number of error correction codewords per block

    Invariants:
        - block length (data + nsym) <= 255 (GF(256) constraint)
        - generator polynomial has roots alpha^0 .. alpha^(nsym-1)
    """

    def __init__(self, nsym: int):
        if not isinstance(nsym, int) or isinstance(nsym, bool) or nsym < 1:
            raise QRConfigurationError(f"nsym={nsym!r} must be a positive integer")
        if nsym >= FIELD_SIZE - 1:
            raise QRConfigurationError(f"nsym={nsym} exceeds GF(256) limit of 254")

        self.nsym = nsym
        codec = _CODECS.get(nsym)
        self.codec = codec if codec is not None else _build_codec(nsym)

    def encode(self, data: Sequence[int]) -> bytes:
        """
        Compute the error correction codewords for one block.

        Args:
            data: Data codewords of the block (values 0..255)

        Returns:
            nsym remainder bytes of data(x) * x^nsym divided by the generator

        Raises:
            QREncodingError: If the block is too long for GF(256) or encoding fails
        """
        if len(data) + self.nsym > FIELD_SIZE - 1:
            raise QREncodingError(
                f"Block of {len(data)} data codewords plus {self.nsym} ECC codewords "
                f"exceeds 255"
            )

        try:
            encoded = self.codec.encode(bytes(data))
        except (ValueError, TypeError) as e:
            raise QREncodingError(f"Reed-Solomon encoding failed: {e}") from e
        return bytes(encoded[-self.nsym:])

    def get_code_rate(self, data_length: int) -> float:
        """
        Calculate code rate for a block.

        Returns:
            Code rate: k / n
        """
        return data_length / (data_length + self.nsym)
