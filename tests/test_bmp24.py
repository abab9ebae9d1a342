import struct

import pytest

from bmpstudio.bmp8 import BmpError
from bmpstudio.bmp24 import (
    Bmp24Image,
    Channel,
    Pixel,
    compute_equalization_lut,
)


def _image(rows):
    height = len(rows)
    width = len(rows[0]) if rows else 0
    return Bmp24Image(width, height, [[Pixel(*p) for p in row] for row in rows])


def _uniform(width, height, rgb):
    return _image([[rgb] * width for _ in range(height)])


def _sample():
    return _image(
        [
            [(10, 20, 30), (200, 100, 50), (0, 0, 0)],
            [(255, 255, 255), (1, 2, 3), (90, 80, 70)],
        ]
    )


def test_blank_is_black():
    img = Bmp24Image.blank(3, 2)
    assert img.width == 3 and img.height == 2
    assert all(p == Pixel(0, 0, 0) for row in img.data for p in row)


def test_blank_rejects_negative():
    with pytest.raises(ValueError):
        Bmp24Image.blank(-1, 2)


def test_pixel_rejects_out_of_range():
    with pytest.raises(ValueError):
        Pixel(256, 0, 0)


def test_save_load_round_trip(tmp_path):
    img = _sample()
    path = tmp_path / "img.bmp"
    img.save(path)
    loaded = Bmp24Image.load(path)
    assert loaded.width == img.width
    assert loaded.height == img.height
    assert loaded.color_depth == 24
    assert loaded.data == img.data


def test_saved_header_fields(tmp_path):
    img = _uniform(1, 2, (1, 2, 3))
    path = tmp_path / "img.bmp"
    img.save(path)
    content = path.read_bytes()
    assert content[:2] == b"BM"
    (offset,) = struct.unpack_from("<I", content, 10)
    (info_size,) = struct.unpack_from("<I", content, 14)
    (bits,) = struct.unpack_from("<H", content, 28)
    (xres, yres) = struct.unpack_from("<ii", content, 38)
    assert offset == 54
    assert info_size == 40
    assert bits == 24
    assert (xres, yres) == (2835, 2835)
    # one pixel per row padded to four bytes
    assert len(content) == 54 + 4 * 2
    (size,) = struct.unpack_from("<I", content, 2)
    assert size == len(content)


def test_saved_rows_are_bottom_up_bgr(tmp_path):
    img = _image([[(1, 2, 3)], [(4, 5, 6)]])
    path = tmp_path / "img.bmp"
    img.save(path)
    content = path.read_bytes()
    assert content[54:57] == bytes([6, 5, 4])
    assert content[58:61] == bytes([3, 2, 1])


def test_load_missing_file(tmp_path):
    with pytest.raises(BmpError):
        Bmp24Image.load(tmp_path / "missing.bmp")


@pytest.mark.parametrize(
    "offset, fmt, value",
    [(0, "<H", 0x1234), (28, "<H", 8), (30, "<I", 1)],
)
def test_load_rejects_incompatible(tmp_path, offset, fmt, value):
    path = tmp_path / "img.bmp"
    _sample().save(path)
    content = bytearray(path.read_bytes())
    struct.pack_into(fmt, content, offset, value)
    path.write_bytes(bytes(content))
    with pytest.raises(BmpError):
        Bmp24Image.load(path)


def test_load_rejects_truncated_pixels(tmp_path):
    path = tmp_path / "img.bmp"
    _sample().save(path)
    path.write_bytes(path.read_bytes()[:60])
    with pytest.raises(BmpError):
        Bmp24Image.load(path)


def test_describe():
    text = _sample().describe()
    assert "Width: 3" in text
    assert "Height: 2" in text
    assert "Color Depth: 24" in text


def test_negative_twice_is_identity():
    img = _sample()
    original = [row[:] for row in img.data]
    img.negative()
    assert img.data[1][0] == Pixel(0, 0, 0)
    img.negative()
    assert img.data == original


def test_grayscale_equal_channels():
    img = _sample()
    img.grayscale()
    assert img.data[0][0] == Pixel(20, 20, 20)
    assert all(p.red == p.green == p.blue for row in img.data for p in row)


def test_brightness_clamps():
    img = _image([[(250, 5, 100)]])
    img.brightness(10)
    assert img.data[0][0] == Pixel(255, 15, 110)
    img.brightness(-300)
    assert img.data[0][0] == Pixel(0, 0, 0)


def test_outline_on_uniform_interior_is_zero():
    img = _uniform(3, 3, (100, 100, 100))
    img.outline()
    assert img.data[1][1] == Pixel(0, 0, 0)


@pytest.mark.parametrize("method", ["sharpen", "gaussian_blur"])
def test_normalized_kernels_keep_uniform_interior(method):
    img = _uniform(3, 3, (64, 128, 32))
    getattr(img, method)()
    assert img.data[1][1] == Pixel(64, 128, 32)


def test_blur_does_not_change_dimensions():
    img = _sample()
    img.box_blur()
    img.emboss()
    assert img.height == 2
    assert all(len(row) == 3 for row in img.data)


def test_convolution_identity_kernel():
    img = _sample()
    kernel = [[0, 0, 0], [0, 1, 0], [0, 0, 0]]
    assert img.convolution(1, 0, kernel) == Pixel(200, 100, 50)


def test_apply_filter_rejects_even_kernel():
    with pytest.raises(ValueError):
        _sample().apply_filter([[1, 0], [0, 1]])


def test_histograms_count_every_pixel():
    img = _sample()
    for channel in Channel:
        hist = img.histogram(channel)
        assert len(hist) == 256
        assert sum(hist) == 6
    assert img.histogram(Channel.RED)[255] == 1
    assert img.histogram(Channel.BLUE)[0] == 1


def test_equalization_lut_spans_full_range():
    lut = compute_equalization_lut([1] * 256, 256)
    assert lut[0] == 0
    assert lut[255] == 255
    assert all(a <= b for a, b in zip(lut, lut[1:]))


def test_equalization_lut_single_level_is_zero():
    hist = [0] * 256
    hist[40] = 9
    assert compute_equalization_lut(hist, 9) == [0] * 256


def test_equalization_lut_rejects_wrong_length():
    with pytest.raises(ValueError):
        compute_equalization_lut([1, 2, 3], 6)


def test_equalize_keeps_black_and_stretches_range():
    img = _image([[(0, 0, 0), (60, 60, 60)], [(0, 0, 0), (60, 60, 60)]])
    lut = img.equalize()
    assert lut[0] == 0
    assert lut[255] == 255
    assert img.data[0][0] == Pixel(0, 0, 0)
    assert img.data[0][1].red >= 60
    assert all(0 <= c <= 255 for row in img.data for p in row for c in (p.red, p.green, p.blue))