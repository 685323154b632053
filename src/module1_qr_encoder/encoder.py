# file: src/module1_qr_encoder/encoder.py

"""
QR symbol encoding entry point.

Pipeline:
    text
    → byte-mode segment (UTF-8)
    → version search (smallest version that fits)
    → bit packing (header, terminator, byte alignment, 0xEC/0x11 padding)
    → block division + Reed-Solomon ECC per block
    → interleaving
    → module placement (function patterns + zigzag data)
    → mask selection (exhaustive, lowest penalty)
    → QRSymbol
"""

import itertools
import logging
import os
import time
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml

from .errors import DataTooLongError, QREncodingError, QRConfigurationError
from .masking import evaluate_masks, masked_candidate, select_mask, validate_mask
from .matrix import ModuleMatrix
from .rs_codec import ReedSolomonCodec
from .segment import BitBuffer, Segment
from .symbol import QRSymbol
from .tables import (
    ECC_CODEWORDS_PER_BLOCK,
    MAX_VERSION,
    MIN_VERSION,
    NUM_ERROR_CORRECTION_BLOCKS,
    PAD_BYTES,
    EccLevel,
    Mode,
    num_data_codewords,
    num_raw_data_modules,
    validate_version,
)

logger = logging.getLogger(__name__)


def _validate_version_bounds(min_version: int, max_version: int) -> None:
    validate_version(min_version)
    validate_version(max_version)
    if min_version > max_version:
        raise QRConfigurationError(
            f"min_version={min_version} is greater than max_version={max_version}"
        )


def choose_version(
    segment: Segment,
    ecl: EccLevel,
    min_version: int = MIN_VERSION,
    max_version: int = MAX_VERSION
) -> Tuple[int, int]:
    """
    Find the smallest version in [min_version, max_version] whose data
    capacity holds the segment.

    Returns:
        (version, data bits used)

    Raises:
        DataTooLongError: If no version in range fits
    """
    _validate_version_bounds(min_version, max_version)

    for version in range(min_version, max_version + 1):
        capacity_bits = num_data_codewords(version, ecl) * 8
        data_bits = segment.total_bits(version)
        if data_bits is not None and data_bits <= capacity_bits:
            return version, data_bits

    capacity_bits = num_data_codewords(max_version, ecl) * 8
    data_bits = segment.total_bits(max_version)
    if data_bits is None:
        data_bits = 4 + 16 + segment.payload_bits()
    raise DataTooLongError(
        f"Payload of {len(segment.data)} bytes needs {data_bits} bits, but version "
        f"{max_version} at level {ecl.name} holds {capacity_bits}",
        data_bits=data_bits,
        capacity_bits=capacity_bits,
    )


def pack_data_codewords(segment: Segment, version: int, ecl: EccLevel) -> bytes:
    """
    Pack a segment into exactly num_data_codewords(version, ecl) bytes.

    Appends up to four terminator bits, zero bits up to the next byte
    boundary, then alternating 0xEC/0x11 pad bytes.
    """
    capacity_bits = num_data_codewords(version, ecl) * 8
    buffer = BitBuffer()
    segment.write_to(buffer, version)
    if len(buffer) > capacity_bits:
        raise DataTooLongError(
            f"Segment needs {len(buffer)} bits, version {version} at level {ecl.name} "
            f"holds {capacity_bits}",
            data_bits=len(buffer),
            capacity_bits=capacity_bits,
        )

    buffer.append_bits(0, min(4, capacity_bits - len(buffer)))
    buffer.append_bits(0, -len(buffer) % 8)
    for pad in itertools.cycle(PAD_BYTES):
        if len(buffer) >= capacity_bits:
            break
        buffer.append_bits(pad, 8)

    if len(buffer) != capacity_bits:
        raise QREncodingError(
            f"Padded data is {len(buffer)} bits, expected exactly {capacity_bits}"
        )
    return buffer.to_bytes()


def split_blocks(data: bytes, version: int, ecl: EccLevel) -> List[bytes]:
    """
    Divide padded data codewords into error correction blocks.

    Short blocks come first; the last (raw codewords mod block count)
    blocks hold one extra data codeword.
    """
    expected = num_data_codewords(version, ecl)
    if len(data) != expected:
        raise QREncodingError(f"Expected {expected} data codewords, got {len(data)}")

    num_blocks = NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][version]
    block_ecc_len = ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][version]
    raw_codewords = num_raw_data_modules(version) // 8
    num_short_blocks = num_blocks - raw_codewords % num_blocks
    short_data_len = raw_codewords // num_blocks - block_ecc_len

    blocks = []
    offset = 0
    for i in range(num_blocks):
        length = short_data_len + (0 if i < num_short_blocks else 1)
        blocks.append(data[offset:offset + length])
        offset += length
    return blocks


def add_ecc_and_interleave(data: bytes, version: int, ecl: EccLevel) -> bytes:
    """
    Append Reed-Solomon codewords to every block and interleave the result.

    Data codewords are read round-robin across blocks (short blocks are
    skipped once exhausted), followed by ECC codewords round-robin.
    """
    data_blocks = split_blocks(data, version, ecl)
    codec = ReedSolomonCodec(ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][version])
    ecc_blocks = [codec.encode(block) for block in data_blocks]

    result = bytearray()
    longest = max(len(block) for block in data_blocks)
    for i in range(longest):
        for block in data_blocks:
            if i < len(block):
                result.append(block[i])
    for i in range(codec.nsym):
        for ecc in ecc_blocks:
            result.append(ecc[i])

    raw_codewords = num_raw_data_modules(version) // 8
    if len(result) != raw_codewords:
        raise QREncodingError(
            f"Interleaved stream is {len(result)} codewords, expected {raw_codewords}"
        )
    return bytes(result)


def build_unmasked_matrix(version: int, codewords: bytes) -> ModuleMatrix:
    """Draw function patterns and place the codeword stream, without masking."""
    matrix = ModuleMatrix(version)
    matrix.draw_function_patterns()
    matrix.draw_codewords(codewords)
    return matrix


def encode(
    text: Union[str, bytes],
    ecc_level: Union[EccLevel, str] = EccLevel.HIGH,
    *,
    mode: Union[Mode, str] = Mode.BYTE,
    min_version: int = MIN_VERSION,
    max_version: int = MAX_VERSION,
    mask: Optional[int] = None,
    boost_ecl: bool = False
) -> QRSymbol:
    """
    Encode text into a QR symbol.

    Args:
        text: Text (UTF-8 encoded) or raw bytes
        ecc_level: Error correction level (default: HIGH)
        mode: Segment mode; only byte mode is supported
        min_version: Lowest version to consider
        max_version: Highest version to consider
        mask: Force a mask index 0..7 (None = lowest penalty)
        boost_ecl: Raise the level while the data still fits the chosen version

    Returns:
        QRSymbol

    Raises:
        DataTooLongError: If the payload does not fit max_version
        UnsupportedModeError: If mode is not byte mode
        InvalidEccLevelError: If ecc_level is not recognised
        QRConfigurationError: If version bounds or mask are invalid

    Example:
        >>> symbol = encode("HELLO", "M")
        >>> symbol.version, symbol.size
        (1, 21)
    """
    symbol, _ = _encode_internal(
        text, ecc_level, mode, min_version, max_version, mask, boost_ecl,
        collect_metadata=False,
    )
    return symbol


def encode_with_metadata(
    text: Union[str, bytes],
    ecc_level: Union[EccLevel, str] = EccLevel.HIGH,
    *,
    mode: Union[Mode, str] = Mode.BYTE,
    min_version: int = MIN_VERSION,
    max_version: int = MAX_VERSION,
    mask: Optional[int] = None,
    boost_ecl: bool = False
) -> Tuple[QRSymbol, Dict[str, Any]]:
    """
    Encode text and collect details about the encoding.

    Useful for debugging and analysis.

    Returns:
        symbol: QRSymbol
        metadata: Dictionary containing:
            - version, size, ecc_level, mask
            - payload_bytes: Length of the encoded payload
            - data_bits: Bits used by header and payload
            - capacity_bits: Data capacity of the chosen version
            - data_codewords, ecc_codewords_per_block, num_blocks
            - block_lengths: Data codewords per block
            - mask_penalties: Penalty score of each of the 8 masks
            - encode_time: Total time in seconds
    """
    return _encode_internal(
        text, ecc_level, mode, min_version, max_version, mask, boost_ecl,
        collect_metadata=True,
    )


def _encode_internal(
    text: Union[str, bytes],
    ecc_level: Union[EccLevel, str],
    mode: Union[Mode, str],
    min_version: int,
    max_version: int,
    mask: Optional[int],
    boost_ecl: bool,
    collect_metadata: bool
) -> Tuple[QRSymbol, Optional[Dict[str, Any]]]:
    start_time = time.perf_counter()

    ecl = EccLevel.parse(ecc_level)
    if mask is not None:
        validate_mask(mask)
    segment = Segment.make(text, mode)

    version, data_bits = choose_version(segment, ecl, min_version, max_version)
    if boost_ecl:
        for candidate in (EccLevel.MEDIUM, EccLevel.QUARTILE, EccLevel.HIGH):
            if candidate.ordinal > ecl.ordinal and data_bits <= num_data_codewords(version, candidate) * 8:
                ecl = candidate

    logger.debug(
        "Encoding %d bytes at version %d, level %s (%d bits)",
        len(segment.data), version, ecl.name, data_bits,
    )

    data_codewords = pack_data_codewords(segment, version, ecl)
    codewords = add_ecc_and_interleave(data_codewords, version, ecl)
    matrix = build_unmasked_matrix(version, codewords)

    if mask is None:
        chosen_mask, masked, penalties = select_mask(matrix, ecl)
    else:
        chosen_mask = mask
        masked = masked_candidate(matrix, ecl, mask)
        penalties = evaluate_masks(matrix, ecl) if collect_metadata else None

    symbol = QRSymbol(
        version=version,
        ecc_level=ecl,
        mask=chosen_mask,
        modules=masked.modules,
        function_modules=masked.is_function,
    )

    if not collect_metadata:
        return symbol, None

    metadata = {
        'version': version,
        'size': symbol.size,
        'ecc_level': ecl.name,
        'mask': chosen_mask,
        'payload_bytes': len(segment.data),
        'data_bits': data_bits,
        'capacity_bits': len(data_codewords) * 8,
        'data_codewords': len(data_codewords),
        'ecc_codewords_per_block': ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][version],
        'num_blocks': NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][version],
        'block_lengths': [len(block) for block in split_blocks(data_codewords, version, ecl)],
        'mask_penalties': penalties,
        'encode_time': time.perf_counter() - start_time,
    }
    return symbol, metadata


class QREncoder:
    """
    Configured encoder.

    Applies defaults from a YAML configuration (error correction level,
    version bounds, level boosting) to every encode call.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize the encoder.

        Args:
            config_path: Path to configuration YAML file.
                        If None, uses the packaged default configuration.
        """
        self.config = self._load_config(config_path)
        encoder_config = self.config.get('encoder') or {}

        self.ecc_level = EccLevel.parse(encoder_config.get('ecc_level', 'HIGH'))
        self.min_version = encoder_config.get('min_version', MIN_VERSION)
        self.max_version = encoder_config.get('max_version', MAX_VERSION)
        self.boost_ecl = bool(encoder_config.get('boost_ecl', False))
        _validate_version_bounds(self.min_version, self.max_version)

    def _load_config(self, config_path: Optional[str]) -> dict:
        """
        Load configuration from file or use defaults.

        Args:
            config_path: Path to config file or None

        Returns:
            Configuration dictionary

        Raises:
            QRConfigurationError: If an explicit config file cannot be loaded
        """
        if config_path is None:
            default_config_path = os.path.join(
                os.path.dirname(__file__),
                "default_config.yaml"
            )
            if not os.path.exists(default_config_path):
                logger.warning("Default encoder config not found, using built-in defaults")
                return self._get_default_config()
            config_path = default_config_path

        try:
            with open(config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise QRConfigurationError(f"Failed to load config {config_path}: {e}") from e

        if config is None:
            return self._get_default_config()
        if not isinstance(config, dict):
            raise QRConfigurationError(f"Config {config_path} must be a mapping")
        return config

    def _get_default_config(self) -> dict:
        return {
            "encoder": {
                "ecc_level": "HIGH",
                "min_version": MIN_VERSION,
                "max_version": MAX_VERSION,
                "boost_ecl": False,
            }
        }

    def encode(
        self,
        text: Union[str, bytes],
        ecc_level: Optional[Union[EccLevel, str]] = None,
        mask: Optional[int] = None
    ) -> QRSymbol:
        """Encode with configured defaults; ecc_level overrides the configured level."""
        return encode(
            text,
            self.ecc_level if ecc_level is None else ecc_level,
            min_version=self.min_version,
            max_version=self.max_version,
            mask=mask,
            boost_ecl=self.boost_ecl,
        )

    def encode_with_metadata(
        self,
        text: Union[str, bytes],
        ecc_level: Optional[Union[EccLevel, str]] = None,
        mask: Optional[int] = None
    ) -> Tuple[QRSymbol, Dict[str, Any]]:
        return encode_with_metadata(
            text,
            self.ecc_level if ecc_level is None else ecc_level,
            min_version=self.min_version,
            max_version=self.max_version,
            mask=mask,
            boost_ecl=self.boost_ecl,
        )
