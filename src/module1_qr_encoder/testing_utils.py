# file: src/module1_qr_encoder/testing_utils.py

"""
Testing utilities for the QR encoder.

Provides a minimal reader that reverses the encoder's layout (format
information, unmasking, codeword extraction, block de-interleaving and
byte-segment parsing) and codeword error injection for robustness checks.
Used only in test/evaluation contexts.
"""

import random
from typing import List, Optional, Tuple

import numpy as np

from .masking import NUM_MASKS, apply_mask
from .matrix import ModuleMatrix, format_bits
from .segment import BitBuffer
from .symbol import QRSymbol
from .tables import (
    ECC_CODEWORDS_PER_BLOCK,
    NUM_ERROR_CORRECTION_BLOCKS,
    EccLevel,
    Mode,
    char_count_bits,
    num_raw_data_modules,
)


def read_format_info(symbol: QRSymbol) -> Tuple[EccLevel, int]:
    """
    Read the first copy of the format information.

    The closest valid format word (by Hamming distance) wins, so a few
    damaged format modules are tolerated.

    Returns:
        (error correction level, mask index)
    """
    modules = symbol.modules
    bits = 0
    for i in range(0, 6):
        bits |= int(modules[i, 8]) << i
    bits |= int(modules[7, 8]) << 6
    bits |= int(modules[8, 8]) << 7
    bits |= int(modules[8, 7]) << 8
    for i in range(9, 15):
        bits |= int(modules[8, 14 - i]) << i

    best = None
    best_distance = None
    for ecl in EccLevel:
        for mask in range(NUM_MASKS):
            distance = bin(bits ^ format_bits(ecl, mask)).count('1')
            if best_distance is None or distance < best_distance:
                best = (ecl, mask)
                best_distance = distance
    return best


def extract_codewords(symbol: QRSymbol) -> bytes:
    """
    Unmask the data modules and read them back in placement order.

    Returns:
        Interleaved codeword stream (data + ECC), remainder bits dropped
    """
    layout = ModuleMatrix(symbol.version)
    layout.draw_function_patterns()

    _, mask = read_format_info(symbol)
    unmasked = apply_mask(np.asarray(symbol.modules), layout.is_function, mask)

    num_bits = num_raw_data_modules(symbol.version) // 8 * 8
    bits = BitBuffer()
    for x, y in layout.data_module_positions():
        if len(bits) == num_bits:
            break
        bits.append(int(unmasked[y, x]))
    return bits.to_bytes()


def deinterleave_blocks(codewords: bytes, version: int, ecl: EccLevel) -> List[Tuple[bytes, bytes]]:
    """
    Split an interleaved stream back into (data, ecc) pairs per block.
    """
    num_blocks = NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][version]
    block_ecc_len = ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][version]
    raw_codewords = num_raw_data_modules(version) // 8
    if len(codewords) != raw_codewords:
        raise ValueError(f"Expected {raw_codewords} codewords, got {len(codewords)}")

    num_short_blocks = num_blocks - raw_codewords % num_blocks
    short_data_len = raw_codewords // num_blocks - block_ecc_len
    lengths = [short_data_len + (0 if i < num_short_blocks else 1) for i in range(num_blocks)]

    data_blocks = [bytearray() for _ in range(num_blocks)]
    ecc_blocks = [bytearray() for _ in range(num_blocks)]
    index = 0
    for i in range(max(lengths)):
        for b in range(num_blocks):
            if i < lengths[b]:
                data_blocks[b].append(codewords[index])
                index += 1
    for _ in range(block_ecc_len):
        for b in range(num_blocks):
            ecc_blocks[b].append(codewords[index])
            index += 1

    return [(bytes(d), bytes(e)) for d, e in zip(data_blocks, ecc_blocks)]


def decode_symbol(symbol: QRSymbol) -> bytes:
    """
    Recover the byte-mode payload of an undamaged symbol.

    Raises:
        ValueError: If the stream does not start with a byte-mode segment
    """
    ecl, _ = read_format_info(symbol)
    blocks = deinterleave_blocks(extract_codewords(symbol), symbol.version, ecl)
    data = b''.join(block for block, _ in blocks)
    bits = np.unpackbits(np.frombuffer(data, dtype=np.uint8), bitorder='big')

    mode = int(''.join(str(b) for b in bits[:4]), 2)
    if mode != Mode.BYTE.mode_bits:
        raise ValueError(f"Expected byte mode indicator, got {mode:04b}")

    count_width = char_count_bits(Mode.BYTE, symbol.version)
    count = int(''.join(str(b) for b in bits[4:4 + count_width]), 2)
    start = 4 + count_width
    payload_bits = bits[start:start + count * 8]
    if len(payload_bits) != count * 8:
        raise ValueError(f"Character count {count} exceeds the data stream")
    return bytes(np.packbits(payload_bits, bitorder='big'))


def inject_codeword_errors(
    data: bytes,
    num_errors: int,
    seed: Optional[int] = None
) -> bytes:
    """
    Corrupt distinct codewords with random non-zero error values.

    WARNING: This function introduces non-determinism when no seed is
    given and should ONLY be used in testing/evaluation contexts.

    Args:
        data: Original codewords
        num_errors: Number of codewords to corrupt
        seed: Random seed for reproducibility (optional)

    Returns:
        Data with injected errors
    """
    if not 0 <= num_errors <= len(data):
        raise ValueError(f"num_errors must be in [0, {len(data)}], got {num_errors}")

    rng = random.Random(seed)
    corrupted = bytearray(data)
    for position in rng.sample(range(len(data)), num_errors):
        corrupted[position] ^= rng.randint(1, 255)
    return bytes(corrupted)
