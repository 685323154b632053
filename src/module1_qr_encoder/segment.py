# file: src/module1_qr_encoder/segment.py

"""
Data segments and the bit buffer they are packed into.
"""

from typing import Optional, Union

import numpy as np

from .errors import QREncodingError, UnsupportedModeError
from .tables import Mode, char_count_bits


class BitBuffer(list):
    """Growable sequence of 0/1 integers, most significant bit first."""

    def append_bits(self, value: int, length: int) -> None:
        """Append the low `length` bits of `value`, MSB first."""
        if length < 0 or value >> length != 0:
            raise QREncodingError(f"Value {value} does not fit in {length} bits")
        self.extend((value >> i) & 1 for i in reversed(range(length)))

    def to_bytes(self) -> bytes:
        """
        Pack bits into bytes (big-endian: MSB first).

        The buffer must hold a whole number of bytes.
        """
        if len(self) % 8 != 0:
            raise QREncodingError(f"Bit length {len(self)} is not a multiple of 8")
        if len(self) == 0:
            return b''
        bits = np.array(self, dtype=np.uint8).reshape(-1, 8)
        return bytes(np.packbits(bits, axis=1, bitorder='big').flatten())


class Segment:
    """
    A run of payload data tagged with its mode and character count.

    Only byte mode segments can be built; the payload holds the raw bytes.
    """

    def __init__(self, mode: Mode, num_chars: int, data: bytes):
        if mode is not Mode.BYTE:
            raise UnsupportedModeError(f"Only byte mode is supported, got {mode.name}")
        if num_chars < 0:
            raise QREncodingError(f"Invalid character count: {num_chars}")
        self.mode = mode
        self.num_chars = num_chars
        self.data = bytes(data)

    def __repr__(self) -> str:
        return f"Segment(mode={self.mode.name}, num_chars={self.num_chars})"

    @staticmethod
    def make_bytes(data: Union[bytes, bytearray]) -> "Segment":
        return Segment(Mode.BYTE, len(data), data)

    @staticmethod
    def make(data: Union[str, bytes, bytearray], mode: Union[Mode, str] = Mode.BYTE) -> "Segment":
        """
        Build a segment from text or raw bytes.

        Text is UTF-8 encoded, so every code point becomes 1-4 bytes.

        Raises:
            UnsupportedModeError: If mode is anything but byte mode
            QREncodingError: If text cannot be UTF-8 encoded (lone surrogates)
        """
        mode = Mode.parse(mode)
        if mode is not Mode.BYTE:
            raise UnsupportedModeError(f"Only byte mode is supported, got {mode.name}")

        if isinstance(data, str):
            try:
                data = data.encode('utf-8')
            except UnicodeEncodeError as e:
                raise QREncodingError(f"Text cannot be encoded as UTF-8: {e}") from e
        elif not isinstance(data, (bytes, bytearray)):
            raise QREncodingError(f"Expected str or bytes, got {type(data)}")

        return Segment.make_bytes(data)

    def payload_bits(self) -> int:
        return len(self.data) * 8

    def total_bits(self, version: int) -> Optional[int]:
        """
        Bits needed to encode this segment at a version: mode indicator,
        character count indicator and payload.

        Returns:
            Bit count, or None if the character count overflows its field
        """
        count_bits = char_count_bits(self.mode, version)
        if self.num_chars >= (1 << count_bits):
            return None
        return 4 + count_bits + self.payload_bits()

    def write_to(self, buffer: BitBuffer, version: int) -> None:
        buffer.append_bits(self.mode.mode_bits, 4)
        buffer.append_bits(self.num_chars, char_count_bits(self.mode, version))
        for byte in self.data:
            buffer.append_bits(byte, 8)
