import logging
import sys

import cv2
import numpy as np

from module1_qr_encoder import QREncoder
from module2_qr_renderer import QRRenderer


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )


setup_logging(verbose="-v" in sys.argv)
logger = logging.getLogger("exp2_render_roundtrip")

# --------------------------------------------------
# 1. Encoder / renderer from packaged configs
# --------------------------------------------------
encoder = QREncoder()
renderer = QRRenderer()
detector = cv2.QRCodeDetector()

payloads = [
    "HELLO",
    "https://example.com/items/42",
    "SKU-000123|BIN-A4|QTY-12",
    "Grüße aus Köln",
]
levels = ["L", "M", "Q", "H"]
width = 600

# --------------------------------------------------
# 2. Encode → render → decode
# --------------------------------------------------
print("payload_bytes,ecc_level,version,mask,module_px,decoded")

failures = 0
for text in payloads:
    for level in levels:
        symbol, meta = encoder.encode_with_metadata(text, ecc_level=level)
        image = renderer.render(symbol, width, fmt="raster")

        data, points, _ = detector.detectAndDecode(np.ascontiguousarray(image.pixels))
        ok = points is not None and data == text
        if not ok:
            failures += 1
            logger.warning("Decode mismatch for %r at level %s: got %r", text, level, data)

        print(f"{meta['payload_bytes']},{level},{symbol.version},{symbol.mask},{image.module_pixel_size},{ok}")

# --------------------------------------------------
# 3. Verification
# --------------------------------------------------
logger.info("%d/%d symbols decoded", len(payloads) * len(levels) - failures, len(payloads) * len(levels))
assert failures == 0
