from module1_qr_encoder import encode_with_metadata, compute_dark_module_ratio


# --------------------------------------------------
# Mask penalty experiment
# --------------------------------------------------
# Penalty of all eight masks per payload; the selected mask is the minimum

payloads = [
    "A",
    "HELLO WORLD",
    "https://example.com/" + "x" * 80,
    "0" * 300,
]

print("payload_bytes,version,selected_mask,dark_ratio," + ",".join(f"mask{m}" for m in range(8)))

for text in payloads:
    symbol, meta = encode_with_metadata(text, "M")
    penalties = meta["mask_penalties"]
    assert penalties[symbol.mask] == min(penalties)

    ratio = compute_dark_module_ratio(symbol)
    print(
        f"{meta['payload_bytes']},{symbol.version},{symbol.mask},{ratio:.3f},"
        + ",".join(str(p) for p in penalties)
    )
