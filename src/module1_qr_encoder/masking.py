# file: src/module1_qr_encoder/masking.py

"""
Data masking and penalty-based mask selection.

The penalty follows the four rules of ISO/IEC 18004 section 7.8.3:
    N1: runs of five or more same-colour modules in a row or column
    N2: 2x2 blocks of one colour
    N3: finder-like 1:1:3:1:1 patterns bordered by four light modules
    N4: deviation of the dark share from 50%
"""

import logging
from collections import deque
from typing import Callable, List, Sequence, Tuple

import numpy as np

from .errors import QRConfigurationError
from .matrix import ModuleMatrix
from .tables import EccLevel

logger = logging.getLogger(__name__)


NUM_MASKS = 8

PENALTY_N1 = 3
PENALTY_N2 = 3
PENALTY_N3 = 40
PENALTY_N4 = 10

# Predicates over (row, column) index grids; True means "invert this module"
_MASK_PATTERNS: Tuple[Callable[[np.ndarray, np.ndarray], np.ndarray], ...] = (
    lambda y, x: (x + y) % 2 == 0,
    lambda y, x: y % 2 == 0,
    lambda y, x: x % 3 == 0,
    lambda y, x: (x + y) % 3 == 0,
    lambda y, x: (x // 3 + y // 2) % 2 == 0,
    lambda y, x: x * y % 2 + x * y % 3 == 0,
    lambda y, x: (x * y % 2 + x * y % 3) % 2 == 0,
    lambda y, x: ((x + y) % 2 + x * y % 3) % 2 == 0,
)


def validate_mask(mask: int) -> None:
    if not isinstance(mask, int) or isinstance(mask, bool) or not 0 <= mask < NUM_MASKS:
        raise QRConfigurationError(f"Mask must be an integer in [0, 7], got {mask!r}")


def mask_pattern(mask: int, size: int) -> np.ndarray:
    """Boolean (size, size) grid of the modules a mask inverts."""
    validate_mask(mask)
    y, x = np.indices((size, size))
    return _MASK_PATTERNS[mask](y, x)


def apply_mask(modules: np.ndarray, is_function: np.ndarray, mask: int) -> np.ndarray:
    """
    XOR the mask pattern into the data modules.

    Function modules are left exactly as they are. Returns a new array.
    """
    pattern = mask_pattern(mask, modules.shape[0])
    return modules ^ (pattern & ~is_function)


# ----------------------------------------------------------------------
# Penalty score
# ----------------------------------------------------------------------

def _finder_add_history(run_length: int, history: deque, size: int) -> None:
    if history[0] == 0:
        # Light border before the first run
        run_length += size
    history.appendleft(run_length)


def _finder_count_patterns(history: Sequence[int]) -> int:
    """Count 1:1:3:1:1 patterns in the last seven runs (0, 1 or 2)."""
    n = history[1]
    core = n > 0 and history[2] == history[4] == history[5] == n and history[3] == n * 3
    return (
        (1 if core and history[0] >= n * 4 and history[6] >= n else 0)
        + (1 if core and history[6] >= n * 4 and history[0] >= n else 0)
    )


def _line_penalty(line: Sequence[bool], size: int) -> Tuple[int, int]:
    """
    Score one row or column.

    Returns:
        (N1 run penalty, number of finder-like patterns)
    """
    run_penalty = 0
    finder_count = 0
    run_color = False
    run_length = 0
    history: deque = deque([0] * 7, maxlen=7)

    for color in line:
        if color == run_color:
            run_length += 1
            if run_length == 5:
                run_penalty += PENALTY_N1
            elif run_length > 5:
                run_penalty += 1
        else:
            _finder_add_history(run_length, history, size)
            if not run_color:
                finder_count += _finder_count_patterns(history)
            run_color = color
            run_length = 1

    # Terminate the line as if followed by a light border
    if run_color:
        _finder_add_history(run_length, history, size)
        run_length = 0
    run_length += size
    _finder_add_history(run_length, history, size)
    finder_count += _finder_count_patterns(history)

    return run_penalty, finder_count


def penalty_components(modules: np.ndarray) -> Tuple[int, int, int, int]:
    """
    Compute the four penalty components of a masked matrix.

    Returns:
        (N1 runs, N2 blocks, N3 finder-like, N4 balance)
    """
    size = modules.shape[0]
    lines = modules.tolist()
    columns = modules.T.tolist()

    runs = 0
    finders = 0
    for line in lines + columns:
        run_penalty, finder_count = _line_penalty(line, size)
        runs += run_penalty
        finders += finder_count

    same_block = (
        (modules[:-1, :-1] == modules[:-1, 1:])
        & (modules[:-1, :-1] == modules[1:, :-1])
        & (modules[:-1, :-1] == modules[1:, 1:])
    )
    blocks = int(np.count_nonzero(same_block)) * PENALTY_N2

    dark = int(np.count_nonzero(modules))
    total = size * size
    # Smallest k such that the dark share is within (5k + 5)% of 50%
    k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
    balance = max(k, 0) * PENALTY_N4

    return runs, blocks, finders * PENALTY_N3, balance


def penalty_score(modules: np.ndarray) -> int:
    return sum(penalty_components(modules))


# ----------------------------------------------------------------------
# Mask selection
# ----------------------------------------------------------------------

def masked_candidate(matrix: ModuleMatrix, ecl: EccLevel, mask: int) -> ModuleMatrix:
    """Clone the unmasked matrix, apply a mask and draw its format bits."""
    candidate = matrix.copy()
    candidate.modules = apply_mask(matrix.modules, matrix.is_function, mask)
    candidate.draw_format_bits(ecl, mask)
    return candidate


def evaluate_masks(matrix: ModuleMatrix, ecl: EccLevel) -> List[int]:
    """Penalty score of each of the eight masks against the same unmasked matrix."""
    return [
        penalty_score(masked_candidate(matrix, ecl, mask).modules)
        for mask in range(NUM_MASKS)
    ]


def select_mask(matrix: ModuleMatrix, ecl: EccLevel) -> Tuple[int, ModuleMatrix, List[int]]:
    """
    Try all eight masks and keep the one with the lowest penalty.

    Ties go to the lowest mask index.

    Returns:
        (mask index, masked matrix, penalties of all masks)
    """
    best_mask = -1
    best_score = None
    best_matrix = None
    penalties = []

    for mask in range(NUM_MASKS):
        candidate = masked_candidate(matrix, ecl, mask)
        score = penalty_score(candidate.modules)
        penalties.append(score)
        if best_score is None or score < best_score:
            best_mask = mask
            best_score = score
            best_matrix = candidate

    logger.debug("Mask penalties %s, selected mask %d", penalties, best_mask)
    return best_mask, best_matrix, penalties
