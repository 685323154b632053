# file: src/module2_qr_renderer/text.py

"""
Plain-text rendering for terminals and logs.
"""

from module1_qr_encoder import QRSymbol

from .errors import RenderError
from .geometry import DEFAULT_MARGIN, validate_margin


def render_text(
    symbol: QRSymbol,
    margin: int = DEFAULT_MARGIN,
    dark: str = "██",
    light: str = "  "
) -> str:
    """
    Render a symbol as lines of text, one string per module.

    Dark and light strings must have the same length so columns line up.
    """
    validate_margin(margin)
    if len(dark) != len(light) or not dark:
        raise RenderError("dark and light must be non-empty strings of equal length")

    total = symbol.size + 2 * margin
    lines = []
    for y in range(-margin, symbol.size + margin):
        lines.append(''.join(
            dark if symbol.get_module(x, y) else light
            for x in range(-margin, total - margin)
        ))
    return '\n'.join(lines) + '\n'
