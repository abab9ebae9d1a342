"""Interactive menu-driven editor for 8-bit and 24-bit BMP images."""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Optional, TextIO, Union

from .bmp8 import Bmp8Image, BmpError
from .bmp24 import Bmp24Image

MAIN_MENU = """
Main Menu:
1. Open an 8-bit grayscale image
2. Open a 24-bit color image
3. Save current image
4. Apply a filter
5. Display image info
6. Quit
>>> Your choice: """

FILTER_MENU_8 = """
8-bit Filters:
1. Negative
2. Brightness
3. Black and white (Threshold)
4. Box Blur
5. Gaussian blur
6. Sharpness
7. Outline
8. Emboss
9. Return to previous menu
>>> Your choice: """

FILTER_MENU_24 = """
24-bit Filters:
1. Negative
2. Grayscale
3. Brightness
4. Box Blur
5. Gaussian Blur
6. Outline
7. Emboss
8. Sharpen
9. Histogram Equalization
10. Return to previous menu
>>> Your choice: """

_RETURN_8 = 9


class _EndOfInput(Exception):
    """Raised internally when the input stream is exhausted."""


class Session:
    """One interactive editing session reading commands from a text stream."""

    def __init__(self, stdin: TextIO, stdout: TextIO) -> None:
        self.stdin = stdin
        self.stdout = stdout
        self.image: Optional[Union[Bmp8Image, Bmp24Image]] = None

    def _write(self, text: str) -> None:
        self.stdout.write(text)

    def _say(self, text: str) -> None:
        self.stdout.write(text + "\n")

    def _read_line(self) -> str:
        line = self.stdin.readline()
        if not line:
            raise _EndOfInput
        return line

    def _read_int(self) -> Optional[int]:
        """Read the next integer, skipping blank lines; None if not a number."""
        while True:
            text = self._read_line().strip()
            if text:
                break
        try:
            return int(text.split()[0])
        except ValueError:
            return None

    def _read_path(self, prompt: str) -> str:
        self._write(prompt)
        return self._read_line().rstrip("\r\n")

    def run(self) -> int:
        """Run the menu loop until the user quits or input ends."""
        actions: dict[int, Callable[[], None]] = {
            1: self._open_8,
            2: self._open_24,
            3: self._save,
            4: self._filter,
            5: self._info,
        }
        try:
            while True:
                self._write(MAIN_MENU)
                choice = self._read_int()
                if choice == 6:
                    break
                action = actions.get(choice) if choice is not None else None
                if action is None:
                    self._say("Invalid option.")
                else:
                    action()
        except _EndOfInput:
            pass
        self.image = None
        return 0

    def _open_8(self) -> None:
        self.image = None
        path = self._read_path("Enter 8-bit image path: ")
        try:
            self.image = Bmp8Image.load(path)
        except BmpError as exc:
            self._say(str(exc))
            self._say("Failed to load image.")
            return
        self._say("Image loaded.")

    def _open_24(self) -> None:
        self.image = None
        path = self._read_path("Enter 24-bit image path: ")
        try:
            image = Bmp24Image.load(path)
        except BmpError as exc:
            self._say(str(exc))
            self._say("Failed to load image.")
            return
        self.image = image
        self._say(f"Image loaded : {image.width}x{image.height}")
        self._say("Image loaded.")

    def _save(self) -> None:
        path = self._read_path("Enter save path: ")
        if self.image is None:
            self._say("No image loaded.")
            return
        try:
            self.image.save(path)
        except BmpError as exc:
            self._say(str(exc))
            return
        self._say(f"Image save successfully in {path}")

    def _info(self) -> None:
        if isinstance(self.image, Bmp8Image):
            self._say("")
            self._say(self.image.describe())
        elif isinstance(self.image, Bmp24Image):
            self._say(self.image.describe())
        else:
            self._say("No image loaded.")

    def _filter(self) -> None:
        if isinstance(self.image, Bmp24Image):
            self._filter_24(self.image)
        elif isinstance(self.image, Bmp8Image):
            self._filter_8(self.image)
        else:
            self._say("No image loaded.")

    def _ask_value(self, prompt: str) -> Optional[int]:
        self._write(prompt)
        value = self._read_int()
        if value is None:
            self._say("Invalid value.")
        return value

    def _filter_24(self, image: Bmp24Image) -> None:
        self._write(FILTER_MENU_24)
        choice = self._read_int()
        simple = {
            1: image.negative,
            2: image.grayscale,
            4: image.box_blur,
            5: image.gaussian_blur,
            6: image.outline,
            7: image.emboss,
            8: image.sharpen,
        }
        if choice in simple:
            simple[choice]()
        elif choice == 3:
            value = self._ask_value("Brightness (-255 to 255): ")
            if value is not None:
                image.brightness(value)
        elif choice == 9:
            image.equalize()
            self._say("Histogram Equalization (Y-channel) applied successfully.")
        self._say("Filter applied.")

    def _filter_8(self, image: Bmp8Image) -> None:
        simple = {
            1: image.negative,
            4: image.box_blur,
            5: image.gaussian_blur,
            6: image.sharpen,
            7: image.outline,
            8: image.emboss,
        }
        while True:
            self._write(FILTER_MENU_8)
            choice = self._read_int()
            if choice == _RETURN_8:
                return
            if choice in simple:
                simple[choice]()
            elif choice == 2:
                value = self._ask_value("Brightness: ")
                if value is not None:
                    image.brightness(value)
            elif choice == 3:
                value = self._ask_value("Threshold (0-255): ")
                if value is not None:
                    image.threshold(value)
            else:
                self._say("Invalid choice.")
            self._say("Filter applied.")


def main(argv=None) -> int:
    """Start an interactive session on standard input and output."""
    parser = argparse.ArgumentParser(
        prog="bmpstudio",
        description="Interactive editor for 8-bit and 24-bit BMP images.",
    )
    parser.parse_args(argv)
    return Session(sys.stdin, sys.stdout).run()


if __name__ == "__main__":
    sys.exit(main())