"""
Implements the class :class:`.PixelBuffer`, the owned and mutable pixel store
all of ImageFun's transforms operate on.
"""

from __future__ import annotations

from typing import Iterable

import PIL.Image
import numpy as np

CHANNELS = 4
"Number of channels per pixel (R, G, B, A)"

RED, GREEN, BLUE, ALPHA = 0, 1, 2, 3
"Channel indices within the pixel array's last axis"


class PixelBuffer:
    """
    A rectangular block of 8-bit RGBA pixels.

    The data is stored as a numpy array of shape (height, width, 4) in R, G,
    B, A channel order. Transforms borrow the buffer and modify
    :attr:`pixels` in place, the dimensions never change during the
    buffer's lifetime.

    Pixels can be exchanged as packed 32-bit ARGB values via
    :meth:`from_argb` and :meth:`to_argb`.
    """

    def __init__(self, pixels: np.ndarray):
        """
        :param pixels: The pixel data as uint8 array of shape (H, W, 4). The
            array is referenced, not copied.

        Raises a ValueError if the array is not a non-empty RGBA uint8 array
        """
        if not isinstance(pixels, np.ndarray):
            raise ValueError("Pixel data has to be a numpy array")
        if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
            raise ValueError(f"Expected RGBA pixels (H, W, 4), got shape {pixels.shape}")
        if pixels.dtype != np.uint8:
            raise ValueError(f"Expected uint8 dtype, got {pixels.dtype}")
        if pixels.shape[0] <= 0 or pixels.shape[1] <= 0:
            raise ValueError("Width and height have to be greater than zero")
        self._pixels: np.ndarray | None = pixels
        self._width = pixels.shape[1]
        self._height = pixels.shape[0]

    @classmethod
    def allocate(
        cls, width: int, height: int, fill: tuple[int, int, int, int] = (0, 0, 0, 0)
    ) -> PixelBuffer:
        """
        Allocates a new buffer

        :param width: The width in pixels
        :param height: The height in pixels
        :param fill: The initial color as (r, g, b, a) tuple
        :return: The new buffer
        """
        if width <= 0 or height <= 0:
            raise ValueError("Width and height have to be greater than zero")
        pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        pixels[:, :] = np.asarray(fill, dtype=np.uint8)
        return cls(pixels)

    @classmethod
    def from_argb(cls, values: Iterable[int] | np.ndarray, width: int, height: int) -> PixelBuffer:
        """
        Creates a buffer from packed 32-bit ARGB values in row-major order

        :param values: width * height ARGB values
        :param width: The width in pixels
        :param height: The height in pixels
        :return: The new buffer
        """
        argb = np.asarray(list(values) if not isinstance(values, np.ndarray) else values)
        argb = argb.astype(np.uint32).reshape(-1)
        if width <= 0 or height <= 0:
            raise ValueError("Width and height have to be greater than zero")
        if argb.size != width * height:
            raise ValueError(
                f"Expected {width * height} ARGB values for {width}x{height}, got {argb.size}"
            )
        pixels = np.empty((height, width, CHANNELS), dtype=np.uint8)
        flat = pixels.reshape(-1, CHANNELS)
        flat[:, RED] = (argb >> 16) & 0xFF
        flat[:, GREEN] = (argb >> 8) & 0xFF
        flat[:, BLUE] = argb & 0xFF
        flat[:, ALPHA] = (argb >> 24) & 0xFF
        return cls(pixels)

    @classmethod
    def from_pil(cls, image: PIL.Image.Image) -> PixelBuffer:
        """
        Copies a PIL image into a freshly allocated RGBA buffer.

        Whatever the decoded mode (palette, grayscale, RGB, 16 bit etc.) the
        result always is a uniform, independent 8-bit RGBA copy.

        :param image: The source image
        :return: The new buffer
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(np.array(image, dtype=np.uint8, copy=True))

    @property
    def pixels(self) -> np.ndarray:
        """
        The pixel data, shape (height, width, 4)

        Raises a ValueError if the buffer was released
        """
        if self._pixels is None:
            raise ValueError("Pixel buffer was released")
        return self._pixels

    @property
    def width(self) -> int:
        "The buffer's width in pixels"
        return self._width

    @property
    def height(self) -> int:
        "The buffer's height in pixels"
        return self._height

    @property
    def size(self) -> tuple[int, int]:
        """
        Returns the buffer's size in pixels

        :return: The size as tuple (width, height)
        """
        return self._width, self._height

    @property
    def is_released(self) -> bool:
        """True once the pixel storage was dropped via :meth:`release`."""
        return self._pixels is None

    def release(self) -> None:
        """Drops the pixel storage. Further pixel access raises a ValueError."""
        self._pixels = None

    def to_argb(self) -> np.ndarray:
        """
        Returns the pixels as packed ARGB values

        :return: uint32 array of length width * height in row-major order
        """
        flat = self.pixels.reshape(-1, CHANNELS).astype(np.uint32)
        return (
            (flat[:, ALPHA] << 24)
            | (flat[:, RED] << 16)
            | (flat[:, GREEN] << 8)
            | flat[:, BLUE]
        )

    def get_argb(self, x: int, y: int) -> int:
        """
        Returns a single pixel as packed ARGB value

        :param x: The x coordinate
        :param y: The y coordinate
        :return: The value 0xAARRGGBB
        """
        a, r, g, b = self.get_channels(x, y)
        return (a << 24) | (r << 16) | (g << 8) | b

    def get_channels(self, x: int, y: int) -> tuple[int, int, int, int]:
        """
        Returns a single pixel's channels

        :param x: The x coordinate
        :param y: The y coordinate
        :return: The channels as (alpha, red, green, blue)
        """
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"Pixel ({x}, {y}) out of bounds")
        r, g, b, a = (int(v) for v in self.pixels[y, x])
        return a, r, g, b

    def to_pil(self) -> PIL.Image.Image:
        """
        Returns a PIL RGBA copy of the pixels

        :return: The PIL image
        """
        return PIL.Image.fromarray(self.pixels.copy())

    def copy(self) -> PixelBuffer:
        """
        Returns an independent copy of this buffer

        :return: The copy
        """
        return PixelBuffer(self.pixels.copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        if self.size != other.size:
            return False
        return bool(np.array_equal(self.pixels, other.pixels))

    __hash__ = None

    def __repr__(self) -> str:
        state = " released" if self.is_released else ""
        return f"PixelBuffer ({self._width}x{self._height} RGBA{state})"


__all__ = ["PixelBuffer", "CHANNELS", "RED", "GREEN", "BLUE", "ALPHA"]
