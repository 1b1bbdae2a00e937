"""
RGBA raster buffer shared by the decoder, the encoder and their collaborators.
"""

from typing import Tuple

import numpy as np
from PIL import Image


class RasterImage:
    """Width x height buffer of 8-bit RGBA pixels, row-major, origin top-left.

    Pixels live in a numpy ``uint8`` array of shape ``(height, width, 4)``.
    Alpha is straight (not premultiplied).
    """

    def __init__(self, pixels: np.ndarray):
        arr = np.asarray(pixels, dtype=np.uint8)
        if arr.ndim != 3 or arr.shape[2] != 4:
            raise ValueError(f"expected an (height, width, 4) array, got shape {arr.shape}")
        if arr.shape[0] < 1 or arr.shape[1] < 1:
            raise ValueError("raster must be at least 1x1")
        self.pixels = np.ascontiguousarray(arr)

    @classmethod
    def new(cls, width: int, height: int, fill: Tuple[int, int, int, int] = (0, 0, 0, 0)) -> "RasterImage":
        arr = np.empty((height, width, 4), dtype=np.uint8)
        arr[:, :] = fill
        return cls(arr)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterImage":
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        # np.array copies; np.asarray would hand back a read-only view
        return cls(np.array(image, dtype=np.uint8))

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_square(self) -> bool:
        return self.width == self.height

    def pixel(self, x: int, y: int) -> Tuple[int, int, int, int]:
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def tobytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other):
        if not isinstance(other, RasterImage):
            return NotImplemented
        return self.size == other.size and np.array_equal(self.pixels, other.pixels)

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height})"
