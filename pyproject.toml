[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bmpstudio"
version = "0.1.0"
description = "Load, filter, equalize and save 8-bit grayscale and 24-bit colour BMP images"
requires-python = ">=3.10"
dependencies = []
keywords = ["bmp", "image", "filter", "convolution", "histogram", "equalization"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics :: Editors :: Raster-Based",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
bmpstudio = "bmpstudio.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["bmpstudio"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
