from module1_qr_encoder import EccLevel, MIN_VERSION, MAX_VERSION, max_byte_capacity
from module1_qr_encoder.metrics import compute_redundancy_overhead
from module1_qr_encoder.tables import symbol_size


# --------------------------------------------------
# Capacity experiment
# --------------------------------------------------
# Byte-mode capacity and ECC overhead for every version and level

print("version,size,ecc_level,max_bytes,redundancy_overhead")

for version in range(MIN_VERSION, MAX_VERSION + 1):
    for level in EccLevel:
        capacity = max_byte_capacity(version, level)
        overhead = compute_redundancy_overhead(version, level)
        print(f"{version},{symbol_size(version)},{level.code},{capacity},{overhead:.3f}")
