"""24-bit true-colour BMP images: loading, saving, filters and equalization."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass, field
from enum import Enum
from itertools import accumulate
from typing import Sequence

from .bmp8 import (
    BOX_BLUR_KERNEL,
    EMBOSS_KERNEL,
    GAUSSIAN_BLUR_KERNEL,
    OUTLINE_KERNEL,
    SHARPEN_KERNEL,
    BmpError,
)

SIGNATURE = 0x4D42
PIXEL_OFFSET = 54
INFO_HEADER_SIZE = 40
BITS_PER_PIXEL = 24
RESOLUTION = 2835
LEVELS = 256

_FILE_HEADER = struct.Struct("<2sIHHIIiiHHIIiiII")
_MIN_HEADER_BYTES = 34


def _clamp_byte(value: float) -> float:
    return min(max(value, 0.0), 255.0)


def _to_byte(value: float) -> int:
    """Clamp to 0..255 and drop the fractional part."""
    return int(_clamp_byte(value))


def _round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def _row_padding(width: int) -> int:
    return (4 - (width * 3) % 4) % 4


def _validate_kernel(kernel: Sequence[Sequence[float]]) -> list[list[float]]:
    rows = [list(row) for row in kernel]
    size = len(rows)
    if size == 0 or size % 2 == 0:
        raise ValueError("kernel size must be odd")
    if any(len(row) != size for row in rows):
        raise ValueError("kernel must be square")
    return rows


@dataclass(frozen=True)
class Pixel:
    """One RGB pixel with 8-bit channels."""

    red: int = 0
    green: int = 0
    blue: int = 0

    def __post_init__(self) -> None:
        for value in (self.red, self.green, self.blue):
            if not 0 <= value <= 255:
                raise ValueError(f"channel value out of range: {value}")


class Channel(Enum):
    """A colour channel of a pixel."""

    RED = "red"
    GREEN = "green"
    BLUE = "blue"


def compute_equalization_lut(hist: Sequence[int], total: int) -> list[int]:
    """Build a 256-entry equalization lookup table from a histogram."""
    if len(hist) != LEVELS:
        raise ValueError(f"histogram must have {LEVELS} entries")
    cdf = list(accumulate(hist))
    cdf_min = next((count for count in cdf if count != 0), 0)
    denominator = total - cdf_min
    if denominator == 0:
        return [0] * LEVELS
    lut = []
    for count in cdf:
        if count < cdf_min:
            lut.append(0)
        else:
            scaled = (count - cdf_min) / denominator * 255
            lut.append(_round_half_away(_clamp_byte(scaled)))
    return lut


@dataclass
class Bmp24Image:
    """A 24-bit image held as rows of pixels, top row first."""

    width: int
    height: int
    data: list[list[Pixel]] = field(repr=False)
    color_depth: int = BITS_PER_PIXEL

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("image dimensions must not be negative")
        if len(self.data) != self.height or any(
            len(row) != self.width for row in self.data
        ):
            raise ValueError("pixel data does not match the image dimensions")

    @classmethod
    def blank(cls, width: int, height: int) -> "Bmp24Image":
        """Create a black image of the given size."""
        if width < 0 or height < 0:
            raise ValueError("image dimensions must not be negative")
        return cls(width, height, [[Pixel() for _ in range(width)] for _ in range(height)])

    @classmethod
    def load(cls, filename) -> "Bmp24Image":
        """Read an uncompressed 24-bit BMP file."""
        try:
            with open(filename, "rb") as stream:
                content = stream.read()
        except OSError as exc:
            raise BmpError(f"Erreur ouverture fichier {filename}") from exc

        if len(content) < _MIN_HEADER_BYTES:
            raise BmpError("Incompatible file. BMP 24 bits must be uncompressed .")
        (signature,) = struct.unpack_from("<H", content, 0)
        (offset,) = struct.unpack_from("<I", content, 10)
        width, height = struct.unpack_from("<ii", content, 18)
        (bits,) = struct.unpack_from("<H", content, 28)
        (compression,) = struct.unpack_from("<I", content, 30)

        if signature != SIGNATURE or bits != BITS_PER_PIXEL or compression != 0:
            raise BmpError("Incompatible file. BMP 24 bits must be uncompressed .")
        if width < 0 or height < 0:
            raise BmpError("Unsupported image dimensions.")

        row_bytes = width * 3
        stride = row_bytes + _row_padding(width)
        rows: list[list[Pixel]] = [[] for _ in range(height)]
        for stored in range(height):
            start = offset + stored * stride
            chunk = content[start:start + row_bytes]
            if len(chunk) != row_bytes:
                raise BmpError("Failed to read pixel data.")
            rows[height - 1 - stored] = [
                Pixel(red=chunk[i + 2], green=chunk[i + 1], blue=chunk[i])
                for i in range(0, row_bytes, 3)
            ]
        return cls(width, height, rows, bits)

    def save(self, filename) -> None:
        """Write the image as an uncompressed 24-bit BMP file."""
        padding = bytes(_row_padding(self.width))
        size = PIXEL_OFFSET + (self.width * 3 + len(padding)) * self.height
        header = _FILE_HEADER.pack(
            b"BM",
            size,
            0,
            0,
            PIXEL_OFFSET,
            INFO_HEADER_SIZE,
            self.width,
            self.height,
            1,
            BITS_PER_PIXEL,
            0,
            size - PIXEL_OFFSET,
            RESOLUTION,
            RESOLUTION,
            0,
            0,
        )
        try:
            with open(filename, "wb") as stream:
                stream.write(header)
                for row in reversed(self.data):
                    stream.write(
                        bytes(
                            channel
                            for pixel in row
                            for channel in (pixel.blue, pixel.green, pixel.red)
                        )
                    )
                    stream.write(padding)
        except OSError as exc:
            raise BmpError(f"Writing error  {filename}") from exc

    def describe(self) -> str:
        """Return a human-readable summary of the image."""
        return "\n".join(
            [
                "Image Info:",
                f"    Width: {self.width}",
                f"    Height: {self.height}",
                f"    Color Depth: {self.color_depth}",
            ]
        )

    def _map_pixels(self, transform) -> None:
        self.data = [[transform(pixel) for pixel in row] for row in self.data]

    def negative(self) -> None:
        """Invert every channel of every pixel."""
        self._map_pixels(lambda p: Pixel(255 - p.red, 255 - p.green, 255 - p.blue))

    def grayscale(self) -> None:
        """Replace each pixel by the integer mean of its channels."""

        def gray(p: Pixel) -> Pixel:
            level = (p.red + p.green + p.blue) // 3
            return Pixel(level, level, level)

        self._map_pixels(gray)

    def brightness(self, value: int) -> None:
        """Add value to every channel, clamped to 0..255."""
        self._map_pixels(
            lambda p: Pixel(
                _to_byte(p.red + value),
                _to_byte(p.green + value),
                _to_byte(p.blue + value),
            )
        )

    def convolution(self, x: int, y: int, kernel: Sequence[Sequence[float]]) -> Pixel:
        """Return the kernel-weighted pixel at (x, y); outside pixels are ignored."""
        rows = _validate_kernel(kernel)
        n = len(rows) // 2
        red = green = blue = 0.0
        for ky, kernel_row in enumerate(rows, -n):
            py = y + ky
            if not 0 <= py < self.height:
                continue
            image_row = self.data[py]
            for kx, coeff in enumerate(kernel_row, -n):
                px = x + kx
                if 0 <= px < self.width:
                    pixel = image_row[px]
                    red += pixel.red * coeff
                    green += pixel.green * coeff
                    blue += pixel.blue * coeff
        return Pixel(_to_byte(red), _to_byte(green), _to_byte(blue))

    def apply_filter(self, kernel: Sequence[Sequence[float]]) -> None:
        """Convolve the whole image with a square, odd-sized kernel."""
        rows = _validate_kernel(kernel)
        self.data = [
            [self.convolution(x, y, rows) for x in range(self.width)]
            for y in range(self.height)
        ]

    def box_blur(self) -> None:
        self.apply_filter(BOX_BLUR_KERNEL)

    def gaussian_blur(self) -> None:
        self.apply_filter(GAUSSIAN_BLUR_KERNEL)

    def outline(self) -> None:
        self.apply_filter(OUTLINE_KERNEL)

    def emboss(self) -> None:
        self.apply_filter(EMBOSS_KERNEL)

    def sharpen(self) -> None:
        self.apply_filter(SHARPEN_KERNEL)

    def histogram(self, channel: Channel) -> list[int]:
        """Count occurrences of each level of one channel."""
        name = Channel(channel).value
        hist = [0] * LEVELS
        for row in self.data:
            for pixel in row:
                hist[getattr(pixel, name)] += 1
        return hist

    def equalize(self) -> list[int]:
        """Equalize the luminance (Y of YUV) and rebuild RGB.

        Returns the luminance lookup table that was applied.
        """
        size = self.width * self.height
        yuv = []
        hist = [0] * LEVELS
        for row in self.data:
            yuv_row = []
            for p in row:
                r, g, b = float(p.red), float(p.green), float(p.blue)
                luma = 0.299 * r + 0.587 * g + 0.114 * b
                u = -0.14713 * r - 0.28886 * g + 0.436 * b
                v = 0.615 * r - 0.51499 * g - 0.10001 * b
                level = int(_clamp_byte(_round_half_away(luma)))
                hist[level] += 1
                yuv_row.append((level, u, v))
            yuv.append(yuv_row)

        cdf = list(accumulate(hist))
        denominator = size - cdf[0]
        if denominator == 0:
            lut = [0] * LEVELS
        else:
            lut = [
                _round_half_away(_clamp_byte((count - cdf[0]) / denominator * 255.0))
                for count in cdf
            ]

        result = []
        for yuv_row in yuv:
            new_row = []
            for level, u, v in yuv_row:
                y_eq = float(lut[level])
                new_row.append(
                    Pixel(
                        _to_byte(y_eq + 1.13983 * v),
                        _to_byte(y_eq - 0.39465 * u - 0.58060 * v),
                        _to_byte(y_eq + 2.03211 * u),
                    )
                )
            result.append(new_row)
        self.data = result
        return lut