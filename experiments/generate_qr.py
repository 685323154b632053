import sys
from pathlib import Path

from module1_qr_encoder import QREncoder
from module2_qr_renderer import QRRenderer, render_text


# --------------------------------------------------
# Arguments
# --------------------------------------------------
TEXT = sys.argv[1] if len(sys.argv) > 1 else "https://example.com"
WIDTH = int(sys.argv[2]) if len(sys.argv) > 2 else 512

OUTPUT_DIR = Path(__file__).resolve().parents[1] / "data/qr"
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

# --------------------------------------------------
# Encode
# --------------------------------------------------
symbol = QREncoder().encode(TEXT)
print(f"Version {symbol.version} ({symbol.size}x{symbol.size}), level {symbol.ecc_level.name}, mask {symbol.mask}")

# --------------------------------------------------
# Render both representations
# --------------------------------------------------
renderer = QRRenderer()

raster = renderer.render(symbol, WIDTH, fmt="raster")
raster.save(str(OUTPUT_DIR / "qr.png"))

vector = renderer.render(symbol, WIDTH, fmt="svg")
vector.save(str(OUTPUT_DIR / "qr.svg"))

print(f"Saved {raster.width}x{raster.height} PNG and SVG to {OUTPUT_DIR}")
print(render_text(symbol, margin=2))
