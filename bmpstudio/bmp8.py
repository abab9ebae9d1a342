"""8-bit palette (grayscale) BMP images: loading, saving and filters."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from itertools import accumulate
from typing import Sequence

HEADER_SIZE = 54
COLOR_TABLE_SIZE = 1024
LEVELS = 256

BOX_BLUR_KERNEL = (
    (1 / 9, 1 / 9, 1 / 9),
    (1 / 9, 1 / 9, 1 / 9),
    (1 / 9, 1 / 9, 1 / 9),
)
GAUSSIAN_BLUR_KERNEL = (
    (1 / 16, 2 / 16, 1 / 16),
    (2 / 16, 4 / 16, 2 / 16),
    (1 / 16, 2 / 16, 1 / 16),
)
OUTLINE_KERNEL = (
    (-1, -1, -1),
    (-1, 8, -1),
    (-1, -1, -1),
)
EMBOSS_KERNEL = (
    (-2, -1, 0),
    (-1, 1, 1),
    (0, 1, 2),
)
SHARPEN_KERNEL = (
    (0, -1, 0),
    (-1, 5, -1),
    (0, -1, 0),
)


class BmpError(Exception):
    """Raised when a BMP file cannot be read, written or understood."""


def _round_half_up(value: float) -> int:
    """Round a non-negative value half away from zero."""
    return math.floor(value + 0.5)


def _clamp_byte(value: float) -> float:
    return min(max(value, 0), 255)


def _validate_kernel(kernel: Sequence[Sequence[float]]) -> list[list[float]]:
    rows = [list(row) for row in kernel]
    size = len(rows)
    if size == 0 or size % 2 == 0:
        raise ValueError("kernel size must be odd")
    if any(len(row) != size for row in rows):
        raise ValueError("kernel must be square")
    return rows


def compute_cdf(hist: Sequence[int]) -> list[int]:
    """Return the cumulative distribution of a 256-level histogram."""
    if len(hist) != LEVELS:
        raise ValueError(f"histogram must have {LEVELS} entries")
    return list(accumulate(hist))


@dataclass
class Bmp8Image:
    """An 8-bit BMP image with its raw header, palette and pixel bytes."""

    header: bytes
    color_table: bytes
    data: bytearray
    width: int
    height: int
    color_depth: int = 8

    def __post_init__(self) -> None:
        self.data = bytearray(self.data)

    @property
    def data_size(self) -> int:
        return len(self.data)

    @classmethod
    def load(cls, filename) -> "Bmp8Image":
        """Read an 8-bit BMP file."""
        try:
            with open(filename, "rb") as stream:
                header = stream.read(HEADER_SIZE)
                if len(header) != HEADER_SIZE:
                    raise BmpError("Failed to read BMP header.")
                width, height = struct.unpack_from("<II", header, 18)
                (depth,) = struct.unpack_from("<H", header, 28)
                (size,) = struct.unpack_from("<I", header, 34)
                if depth != 8:
                    raise BmpError("Only 8-bit grayscale BMP files are supported.")
                table = stream.read(COLOR_TABLE_SIZE)
                if len(table) != COLOR_TABLE_SIZE:
                    raise BmpError("Failed to read color palette.")
                if size == 0:
                    size = ((width + 3) // 4) * 4 * height
                data = stream.read(size)
                if len(data) != size:
                    raise BmpError("Failed to read pixel data.")
        except OSError as exc:
            raise BmpError(f"Unable to open file {filename}") from exc
        return cls(
            header=header,
            color_table=table,
            data=bytearray(data),
            width=width,
            height=height,
            color_depth=depth,
        )

    def save(self, filename) -> None:
        """Write header, palette and pixel bytes to a file."""
        try:
            with open(filename, "wb") as stream:
                stream.write(self.header)
                stream.write(self.color_table)
                stream.write(self.data)
        except OSError as exc:
            raise BmpError(f"Unable to save to {filename}") from exc

    def describe(self) -> str:
        """Return a human-readable summary of the image."""
        return "\n".join(
            [
                "Image information:",
                f"Width        : {self.width} pixels",
                f"Height       : {self.height} pixels",
                f"Color Depth  : {self.color_depth} bits",
                f"Image Size   : {self.data_size} bytes",
            ]
        )

    def negative(self) -> None:
        """Invert every pixel intensity."""
        self.data[:] = bytes(255 - value for value in self.data)

    def brightness(self, value: int) -> None:
        """Add value to every pixel, clamped to 0..255."""
        self.data[:] = bytes(int(_clamp_byte(pixel + value)) for pixel in self.data)

    def threshold(self, threshold: int) -> None:
        """Turn pixels at or above threshold white and the rest black."""
        self.data[:] = bytes(255 if pixel >= threshold else 0 for pixel in self.data)

    def apply_filter(self, kernel: Sequence[Sequence[float]]) -> None:
        """Convolve the image with a square, odd-sized kernel."""
        rows = _validate_kernel(kernel)
        n = len(rows) // 2
        width, height = self.width, self.height
        if width * height > len(self.data):
            raise BmpError("pixel data is smaller than the image dimensions")
        source = bytes(self.data)
        result = bytearray(self.data)
        for y in range(height):
            for x in range(width):
                total = 0.0
                for ky, row in enumerate(rows, -n):
                    iy = y + ky
                    if not 0 <= iy < height:
                        continue
                    base = iy * width
                    for kx, coeff in enumerate(row, -n):
                        ix = x + kx
                        if 0 <= ix < width:
                            total += source[base + ix] * coeff
                result[y * width + x] = _round_half_up(_clamp_byte(total))
        self.data[:] = result

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

    def histogram(self) -> list[int]:
        """Count occurrences of each of the 256 intensity levels."""
        hist = [0] * LEVELS
        for value in self.data:
            hist[value] += 1
        return hist

    def equalize(self, cdf: Sequence[int]) -> list[int]:
        """Equalize intensities using a cumulative distribution.

        Returns the lookup table that was applied.
        """
        if len(cdf) != LEVELS:
            raise ValueError(f"cdf must have {LEVELS} entries")
        total = self.width * self.height
        cdf_min = next((count for count in cdf if count != 0), 0)
        denominator = total - cdf_min
        lut = []
        for count in cdf:
            if denominator <= 0 or count < cdf_min:
                lut.append(0)
            else:
                scaled = (count - cdf_min) / denominator * 255.0
                lut.append(_round_half_up(_clamp_byte(scaled)))
        self.data[:] = bytes(lut[value] for value in self.data)
        return lut