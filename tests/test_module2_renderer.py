"""
Unit tests for Module 2: QR Raster/Vector Renderer.

Test coverage:
    - Module pixel size computation and the too-small failure
    - Pixel-exact raster output (quiet zone, whole-pixel modules)
    - SVG output geometry and well-formedness
    - Text rendering
    - RenderedImage representations, PNG/data URL export and saving
    - Configured renderer (YAML)
    - End-to-end decode with OpenCV's QR detector
"""

import base64
import xml.etree.ElementTree as ET

import cv2
import numpy as np
import pytest

from module1_qr_encoder import encode, encode_with_metadata, EccLevel
from module2_qr_renderer import (
    render,
    QRRenderer,
    RenderedImage,
    RenderFormat,
    compute_module_pixel_size,
    DEFAULT_MARGIN,
    render_raster,
    encode_png,
    write_png,
    render_svg,
    render_text,
    RenderError,
    ImageTooSmallError,
    UnsupportedFormatError,
    RenderConfigurationError,
)
from module2_qr_renderer.vector import dark_runs


SVG_NS = "{http://www.w3.org/2000/svg}"


@pytest.fixture
def hello_symbol():
    """Version 1 symbol (21x21)."""
    return encode("HELLO", EccLevel.MEDIUM)


@pytest.fixture
def version5_symbol():
    """Version 5 symbol (37x37)."""
    return encode("HELLO", EccLevel.MEDIUM, min_version=5)


class TestGeometry:
    """Test module-to-pixel scaling."""

    def test_floor_division(self):
        assert compute_module_pixel_size(37, 600) == 13
        assert compute_module_pixel_size(21, 290) == 10
        assert compute_module_pixel_size(21, 29) == 1

    def test_margin_affects_size(self):
        assert compute_module_pixel_size(21, 210, margin=0) == 10
        assert compute_module_pixel_size(21, 210, margin=DEFAULT_MARGIN) == 7

    def test_too_small(self):
        """Test 20px cannot hold 29 modules (21 + 2 * 4)."""
        with pytest.raises(ImageTooSmallError) as excinfo:
            compute_module_pixel_size(21, 20)
        assert excinfo.value.target_pixel_width == 20
        assert excinfo.value.required_pixel_width == 29

    def test_too_small_is_render_error(self):
        with pytest.raises(RenderError):
            compute_module_pixel_size(177, 100)

    @pytest.mark.parametrize("width", [0, -5, 12.5, "100"])
    def test_invalid_width(self, width):
        with pytest.raises(RenderError, match="Target pixel width"):
            compute_module_pixel_size(21, width)

    def test_invalid_margin(self):
        with pytest.raises(RenderError, match="Margin"):
            compute_module_pixel_size(21, 100, margin=-1)

    def test_numpy_integers_accepted(self):
        """Test NumPy integer widths and margins scale like Python ints."""
        size = compute_module_pixel_size(37, np.int64(600), margin=np.int32(4))
        assert size == 13
        assert type(size) is int

    def test_bool_rejected(self):
        with pytest.raises(RenderError, match="Margin"):
            compute_module_pixel_size(21, 100, margin=True)
        with pytest.raises(RenderError, match="Target pixel width"):
            compute_module_pixel_size(21, np.bool_(True))


class TestRasterRendering:
    """Test pixel-exact raster output."""

    def test_version5_at_600px(self, version5_symbol):
        """Test 37 + 8 = 45 modules at 13px each give a 585px square."""
        image = render_raster(version5_symbol, 600)
        assert image.shape == (585, 585)
        assert image.dtype == np.uint8

    def test_dark_pixels_match_dark_modules(self, version5_symbol):
        image = render_raster(version5_symbol, 600)
        dark_pixels = int(np.count_nonzero(image == 0))
        assert dark_pixels == version5_symbol.dark_module_count() * 13 * 13

    def test_modules_are_uniform_blocks(self, version5_symbol):
        """Test every module is a solid 13x13 square of its colour."""
        image = render_raster(version5_symbol, 600)
        blocks = image.reshape(45, 13, 45, 13)
        assert (blocks == blocks[:, :1, :, :1]).all()

        module_colors = blocks[:, 0, :, 0]
        expected = np.pad(version5_symbol.modules, 4)
        assert np.array_equal(module_colors == 0, expected)

    def test_quiet_zone_is_light(self, hello_symbol):
        image = render_raster(hello_symbol, 290)
        margin_px = 4 * 10
        assert (image[:margin_px] == 255).all()
        assert (image[-margin_px:] == 255).all()
        assert (image[:, :margin_px] == 255).all()
        assert (image[:, -margin_px:] == 255).all()

    def test_minimum_width(self, hello_symbol):
        """Test 29px gives exactly one pixel per module."""
        image = render_raster(hello_symbol, 29)
        assert image.shape == (29, 29)
        assert np.array_equal(image[4:25, 4:25] == 0, hello_symbol.modules)

    def test_zero_margin(self, hello_symbol):
        image = render_raster(hello_symbol, 42, margin=0)
        assert image.shape == (42, 42)
        assert image[0, 0] == 0

    def test_too_small(self, hello_symbol):
        with pytest.raises(ImageTooSmallError):
            render_raster(hello_symbol, 20)

    def test_custom_gray_values(self, hello_symbol):
        image = render_raster(hello_symbol, 29, dark_value=30, light_value=220)
        assert set(np.unique(image).tolist()) == {30, 220}

    def test_invalid_gray_value(self, hello_symbol):
        with pytest.raises(RenderError, match="dark_value"):
            render_raster(hello_symbol, 100, dark_value=256)

    def test_equal_gray_values_rejected(self, hello_symbol):
        """Test identical dark and light levels are refused instead of drawing a blank image."""
        with pytest.raises(RenderError, match="must differ"):
            render_raster(hello_symbol, 400, dark_value=128, light_value=128)

    def test_numpy_gray_values(self, hello_symbol):
        image = render_raster(hello_symbol, 29, dark_value=np.uint8(10), light_value=np.int64(200))
        assert set(np.unique(image).tolist()) == {10, 200}

    def test_deterministic_png(self, hello_symbol):
        first = encode_png(render_raster(hello_symbol, 200))
        second = encode_png(render_raster(encode("HELLO", EccLevel.MEDIUM), 200))
        assert first == second
        assert first[:8] == b"\x89PNG\r\n\x1a\n"

    def test_encode_png_rejects_float(self):
        with pytest.raises(RenderError, match="dtype"):
            encode_png(np.zeros((10, 10), dtype=np.float32))


class TestSvgRendering:
    """Test SVG output."""

    def test_document_attributes(self, version5_symbol):
        svg = render_svg(version5_symbol, 600)
        root = ET.fromstring(svg.encode("utf-8"))
        assert root.tag == f"{SVG_NS}svg"
        assert root.get("width") == "585"
        assert root.get("height") == "585"
        assert root.get("viewBox") == "0 0 45 45"

    def test_runs_cover_dark_modules(self, version5_symbol):
        """Test run lengths add up to the dark module count."""
        runs = list(dark_runs(version5_symbol.modules))
        assert sum(length for _, _, length in runs) == version5_symbol.dark_module_count()

        for x, y, length in runs:
            assert version5_symbol.modules[y, x:x + length].all()
            if x + length < version5_symbol.size:
                assert not version5_symbol.modules[y, x + length]

    def test_path_offset_by_margin(self, hello_symbol):
        """Test the top-left finder row starts at the margin."""
        root = ET.fromstring(render_svg(hello_symbol, 290).encode("utf-8"))
        path = root.find(f"{SVG_NS}path")
        assert path.get("d").startswith("M4,4h7v1h-7z")

    def test_colors(self, hello_symbol):
        root = ET.fromstring(
            render_svg(hello_symbol, 290, dark_color="#123456", light_color="white").encode("utf-8")
        )
        assert root.find(f"{SVG_NS}rect").get("fill") == "white"
        assert root.find(f"{SVG_NS}path").get("fill") == "#123456"

    def test_invalid_color(self, hello_symbol):
        with pytest.raises(RenderError, match="dark_color"):
            render_svg(hello_symbol, 290, dark_color='"/><script>')

    @pytest.mark.parametrize("dark, light", [
        ("#000000", "#000000"),
        ("#ABCDEF", "#abcdef"),
        ("#fff", "#FFFFFF"),
        ("Navy", "navy"),
    ])
    def test_equal_colors_rejected(self, hello_symbol, dark, light):
        with pytest.raises(RenderError, match="must differ"):
            render_svg(hello_symbol, 290, dark_color=dark, light_color=light)

    def test_too_small(self, hello_symbol):
        with pytest.raises(ImageTooSmallError):
            render_svg(hello_symbol, 28)


class TestTextRendering:
    """Test text output."""

    def test_dimensions(self, hello_symbol):
        text = render_text(hello_symbol, margin=1, dark="#", light=".")
        lines = text.splitlines()
        assert len(lines) == 23
        assert all(len(line) == 23 for line in lines)
        assert lines[0] == "." * 23
        assert lines[1].startswith(".#######.")

    def test_default_blocks(self, hello_symbol):
        lines = render_text(hello_symbol).splitlines()
        assert len(lines) == 29
        assert len(lines[0]) == 58

    def test_mismatched_strings(self, hello_symbol):
        with pytest.raises(RenderError, match="equal length"):
            render_text(hello_symbol, dark="#", light="  ")


class TestRender:
    """Test the render entry point and RenderedImage."""

    def test_raster(self, version5_symbol):
        image = render(version5_symbol, 600)
        assert isinstance(image, RenderedImage)
        assert image.format is RenderFormat.RASTER
        assert (image.width, image.height) == (585, 585)
        assert image.module_pixel_size == 13
        assert image.margin == 4
        assert image.svg is None
        assert image.dark_pixel_count() == version5_symbol.dark_module_count() * 169

    def test_svg(self, version5_symbol):
        image = render(version5_symbol, 600, fmt="svg")
        assert image.format is RenderFormat.SVG
        assert image.pixels is None
        assert 'width="585"' in image.svg

    def test_raster_and_svg_share_geometry(self, hello_symbol):
        raster = render(hello_symbol, 500, margin=2)
        svg = render(hello_symbol, 500, margin=2, fmt=RenderFormat.SVG)
        assert (raster.width, raster.module_pixel_size) == (svg.width, svg.module_pixel_size)

    def test_unknown_format(self, hello_symbol):
        with pytest.raises(UnsupportedFormatError, match="Unknown render format"):
            render(hello_symbol, 300, fmt="pdf")

    def test_pixels_read_only(self, hello_symbol):
        image = render(hello_symbol, 100)
        with pytest.raises(ValueError):
            image.pixels[0, 0] = 0

    def test_caller_array_stays_writable(self):
        """Test the image keeps a private read-only copy of the pixels."""
        pixels = np.full((10, 10), 255, dtype=np.uint8)
        image = RenderedImage(RenderFormat.RASTER, 10, 10, 1, 0, pixels=pixels)

        assert pixels.flags.writeable
        assert not image.pixels.flags.writeable
        pixels[0, 0] = 0
        assert image.pixels[0, 0] == 255

    def test_equal_gray_values_rejected(self, hello_symbol):
        with pytest.raises(RenderError, match="must differ"):
            render(hello_symbol, 400, dark_value=128, light_value=128)

    def test_numpy_width_and_margin(self, version5_symbol):
        image = render(version5_symbol, np.int64(600), margin=np.int32(4))
        assert image.width == 585
        assert type(image.margin) is int

    def test_svg_has_no_png(self, hello_symbol):
        image = render(hello_symbol, 300, fmt="svg")
        with pytest.raises(UnsupportedFormatError):
            image.to_png_bytes()
        with pytest.raises(UnsupportedFormatError):
            image.dark_pixel_count()

    def test_single_representation(self):
        with pytest.raises(UnsupportedFormatError):
            RenderedImage(RenderFormat.RASTER, 10, 10, 1, 0)
        with pytest.raises(UnsupportedFormatError):
            RenderedImage(RenderFormat.SVG, 10, 10, 1, 0, pixels=np.zeros((10, 10), dtype=np.uint8), svg="<svg/>")

    def test_png_data_url(self, hello_symbol):
        image = render(hello_symbol, 290)
        url = image.to_data_url()
        assert url.startswith("data:image/png;base64,")
        png = base64.b64decode(url.split(",", 1)[1])
        decoded = cv2.imdecode(np.frombuffer(png, dtype=np.uint8), cv2.IMREAD_GRAYSCALE)
        assert np.array_equal(decoded, image.pixels)

    def test_svg_data_url(self, hello_symbol):
        image = render(hello_symbol, 290, fmt="svg")
        url = image.to_data_url()
        assert url.startswith("data:image/svg+xml;base64,")
        assert base64.b64decode(url.split(",", 1)[1]).decode("utf-8") == image.svg


class TestSaving:
    """Test writing images to disk."""

    def test_save_png(self, tmp_path, hello_symbol):
        image = render(hello_symbol, 290)
        path = tmp_path / "out" / "hello.png"
        image.save(str(path))

        loaded = cv2.imread(str(path), cv2.IMREAD_GRAYSCALE)
        assert loaded is not None
        assert np.array_equal(loaded, image.pixels)

    def test_save_svg(self, tmp_path, hello_symbol):
        image = render(hello_symbol, 290, fmt="svg")
        path = tmp_path / "hello.svg"
        image.save(str(path))
        assert path.read_text(encoding="utf-8") == image.svg

    def test_write_png_requires_extension(self, tmp_path, hello_symbol):
        pixels = render_raster(hello_symbol, 100)
        with pytest.raises(RenderError, match=".png"):
            write_png(pixels, str(tmp_path / "nested" / "hello.jpg"))
        assert not (tmp_path / "nested").exists()


class TestQRRenderer:
    """Test the configured renderer."""

    def test_default_config(self, hello_symbol):
        renderer = QRRenderer()
        assert renderer.format is RenderFormat.RASTER
        assert renderer.margin == 4
        assert renderer.render(hello_symbol, 290).width == 290

    def test_custom_config(self, tmp_path, hello_symbol):
        config_path = tmp_path / "renderer.yaml"
        config_path.write_text(
            "renderer:\n"
            "  format: svg\n"
            "  margin: 2\n"
            "  svg:\n"
            "    dark_color: navy\n"
        )
        renderer = QRRenderer(str(config_path))
        image = renderer.render(hello_symbol, 250)
        assert image.format is RenderFormat.SVG
        assert image.margin == 2
        assert image.module_pixel_size == 10
        assert 'fill="navy"' in image.svg

        raster = renderer.render(hello_symbol, 250, margin=0, fmt="raster")
        assert raster.pixels.shape == (231, 231)

    def test_unknown_format_in_config(self, tmp_path):
        config_path = tmp_path / "renderer.yaml"
        config_path.write_text("renderer:\n  format: pdf\n")
        with pytest.raises(RenderConfigurationError):
            QRRenderer(str(config_path))

    def test_missing_config(self, tmp_path):
        with pytest.raises(RenderConfigurationError, match="Failed to load config"):
            QRRenderer(str(tmp_path / "missing.yaml"))

    @pytest.mark.parametrize("body", [
        "renderer:\n  margin: -1\n",
        "renderer:\n  raster:\n    dark_value: 300\n",
        "renderer:\n  raster:\n    dark_value: 90\n    light_value: 90\n",
        "renderer:\n  svg:\n    dark_color: White\n    light_color: white\n",
        "renderer:\n  svg:\n    light_color: '#ffffff'\n    dark_color: '#FFFFFF'\n",
    ])
    def test_invalid_values_rejected_at_construction(self, tmp_path, body):
        """Test bad margins, gray levels and colours fail when the renderer is built."""
        config_path = tmp_path / "renderer.yaml"
        config_path.write_text(body)
        with pytest.raises(RenderConfigurationError, match="Invalid renderer config"):
            QRRenderer(str(config_path))


class TestScannability:
    """Test rendered symbols decode with an independent QR reader."""

    @pytest.mark.parametrize("level", list(EccLevel))
    def test_decode_hello(self, level):
        symbol = encode("HELLO", level)
        image = render(symbol, 400).pixels
        data, points, _ = cv2.QRCodeDetector().detectAndDecode(np.ascontiguousarray(image))
        assert points is not None
        assert data == "HELLO"

    def test_decode_url(self):
        text = "https://example.com/items/42"
        symbol = encode(text, EccLevel.MEDIUM)
        image = render(symbol, 500).pixels
        data, _, _ = cv2.QRCodeDetector().detectAndDecode(np.ascontiguousarray(image))
        assert data == text

    @pytest.mark.parametrize("length, level", [
        (150, EccLevel.QUARTILE),
        (300, EccLevel.MEDIUM),
        (500, EccLevel.HIGH),
        (900, EccLevel.LOW),
    ])
    def test_decode_large_mixed_block_symbols(self, length, level):
        """Test version 7+ symbols with version info and unequal block lengths decode."""
        text = "".join(chr(ord("a") + i % 26) for i in range(length))
        symbol, metadata = encode_with_metadata(text, level)
        assert symbol.version >= 7
        assert len(set(metadata['block_lengths'])) == 2

        image = render(symbol, 1000).pixels
        assert image.shape[0] // (symbol.size + 8) >= 4
        data, points, _ = cv2.QRCodeDetector().detectAndDecode(np.ascontiguousarray(image))
        assert points is not None
        assert data == text
