"""
Unit tests for Reed-Solomon codeword generation.

Test coverage:
    - Codec configuration (primitive polynomial 0x11D, generator 2, fcr 0)
    - Agreement with plain polynomial long division over GF(256)
    - Known QR error correction vector
    - Error correction capability of generated blocks
    - Configuration validation
"""

import pytest
from reedsolo import RSCodec

from module1_qr_encoder import QREncodingError, QRConfigurationError
from module1_qr_encoder.rs_codec import ReedSolomonCodec
from module1_qr_encoder.testing_utils import inject_codeword_errors


def _slow_multiply(a, b):
    """Carry-less multiply reduced by x^8 + x^4 + x^3 + x^2 + 1."""
    result = 0
    while b:
        if b & 1:
            result ^= a
        b >>= 1
        a <<= 1
        if a & 0x100:
            a ^= 0x11D
    return result


def _long_division_remainder(data, nsym):
    """Remainder of data(x) * x^nsym by prod(x - 2^i), i in [0, nsym)."""
    generator = [1]
    root = 1
    for _ in range(nsym):
        product = [0] * (len(generator) + 1)
        for i, coefficient in enumerate(generator):
            product[i] ^= coefficient
            product[i + 1] ^= _slow_multiply(coefficient, root)
        generator = product
        root = _slow_multiply(root, 2)

    remainder = list(data) + [0] * nsym
    for i in range(len(data)):
        factor = remainder[i]
        if factor:
            for j, coefficient in enumerate(generator):
                remainder[i + j] ^= _slow_multiply(coefficient, factor)
    return bytes(remainder[-nsym:])


class TestCodecConfiguration:
    """Test the wrapped codec uses the QR field and generator."""

    def test_field_parameters(self):
        codec = ReedSolomonCodec(10)
        assert codec.codec.prim == 0x11D
        assert codec.codec.generator == 2
        assert codec.codec.fcr == 0
        assert codec.codec.nsym == 10

    def test_codecs_shared_across_instances(self):
        """Test QR block lengths reuse one codec built at import."""
        assert ReedSolomonCodec(22).codec is ReedSolomonCodec(22).codec
        assert ReedSolomonCodec(3).codec.nsym == 3

    @pytest.mark.parametrize("nsym", [7, 10, 17, 22, 26, 28, 30])
    def test_matches_long_division(self, nsym):
        """Test remainders equal a direct GF(256) polynomial division."""
        data = bytes((i * 53 + 7) % 256 for i in range(40))
        assert ReedSolomonCodec(nsym).encode(data) == _long_division_remainder(data, nsym)

    def test_accepts_int_sequences(self):
        data = [1, 2, 3, 250, 0, 17]
        assert ReedSolomonCodec(7).encode(data) == _long_division_remainder(data, 7)


class TestReedSolomonCodec:
    """Test Reed-Solomon remainder generation."""

    def test_initialization_valid(self):
        codec = ReedSolomonCodec(10)
        assert codec.nsym == 10

    def test_initialization_invalid_nsym(self):
        with pytest.raises(QRConfigurationError, match="must be a positive integer"):
            ReedSolomonCodec(0)
        with pytest.raises(QRConfigurationError, match="exceeds GF\\(256\\)"):
            ReedSolomonCodec(255)
        with pytest.raises(QRConfigurationError):
            ReedSolomonCodec(True)

    def test_known_vector_version1_medium(self):
        """Test the 1-M "HELLO WORLD" example from the QR standard walkthrough."""
        data = [32, 91, 11, 120, 209, 114, 220, 77, 67, 64, 236, 17, 236, 17, 236, 17]
        codec = ReedSolomonCodec(10)
        assert list(codec.encode(data)) == [196, 35, 39, 119, 235, 215, 231, 226, 93, 23]

    def test_error_correction_within_capability(self):
        """Test a block with nsym // 2 corrupted codewords is recoverable."""
        nsym = 26
        data = bytes(range(40, 120))
        block = data + ReedSolomonCodec(nsym).encode(data)

        corrupted = inject_codeword_errors(block, nsym // 2, seed=42)
        assert corrupted != block

        decoded = RSCodec(nsym).decode(corrupted)[0]
        assert bytes(decoded) == data

    def test_all_zero_block(self):
        assert ReedSolomonCodec(7).encode([0] * 19) == bytes(7)

    def test_block_too_long(self):
        with pytest.raises(QREncodingError, match="exceeds 255"):
            ReedSolomonCodec(30).encode(bytes(230))

    def test_code_rate(self):
        assert ReedSolomonCodec(7).get_code_rate(19) == pytest.approx(19 / 26)
