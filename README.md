# bmpstudio

A small raster editor for uncompressed BMP files, with no dependencies beyond
the standard library. It handles two kinds of image:

- **8-bit** palette (grayscale) BMPs with a 1024-byte colour table, in
  `bmpstudio.bmp8` as `Bmp8Image`
- **24-bit** uncompressed colour BMPs, in `bmpstudio.bmp24` as `Bmp24Image`

Both support negative, brightness and 3×3 convolution filters (box blur,
Gaussian blur, outline, emboss, sharpen) and histogram equalization. 8-bit
images also have a threshold filter. 24-bit images also have a grayscale
filter and per-channel histograms.

## Installation

```
pip install .
```

## Interactive use

```
bmpstudio
```

This reads commands from standard input and shows a menu:

1. Open an 8-bit grayscale image
2. Open a 24-bit color image
3. Save current image
4. Apply a filter
5. Display image info
6. Quit

File paths and values such as brightness or threshold are typed at the
prompts. The session ends on "6" or at the end of input. One image is held at
a time; opening another replaces it. The same loop is available from code as
`bmpstudio.cli.Session(stdin, stdout).run()`.

## Library use

```python
from bmpstudio.bmp8 import Bmp8Image, compute_cdf
from bmpstudio.bmp24 import Bmp24Image, Channel

gray = Bmp8Image.load("gray.bmp")
gray.gaussian_blur()
lut = gray.equalize(compute_cdf(gray.histogram()))  # returns the applied table
gray.save("gray_eq.bmp")

color = Bmp24Image.load("photo.bmp")
color.brightness(30)
color.sharpen()
red_hist = color.histogram(Channel.RED)  # 256 counts
color.equalize()                          # equalizes luminance, returns the table
color.save("photo_out.bmp")
print(color.describe())
```

`Bmp24Image.blank(width, height)` creates a black image. Its pixels are rows
of immutable `Pixel(red, green, blue)` values, top row first, each channel in
0..255. `Bmp24Image.convolution(x, y, kernel)` returns the filtered value of
one pixel; pixels outside the image are left out of the sum.

A custom kernel is a square, odd-sized sequence of rows; anything else raises
`ValueError`:

```python
color.apply_filter([[0, -1, 0], [-1, 5, -1], [0, -1, 0]])
```

`bmpstudio.bmp24.compute_equalization_lut(hist, total)` builds a 256-entry
equalization table from any histogram.

If a file cannot be opened, is truncated or is not in a supported format,
loading raises `bmpstudio.bmp8.BmpError`; saving raises it when the file
cannot be written.

## Limitations

- Only 8-bit and uncompressed 24-bit BMPs are read. Compressed files, other
  bit depths and top-down 24-bit files (negative height) are rejected.
- 8-bit images are saved with the header and colour table exactly as they
  were loaded; their filters treat the pixel bytes as rows of `width` bytes
  with no row padding.
- There is no display of images: the package reads, changes and writes files.

## Running the tests

```
pip install .[test]
pytest
```