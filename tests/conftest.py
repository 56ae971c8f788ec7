"""
Pytest fixtures for ImageFun tests
"""

import io
import struct
import zlib

import numpy as np
import PIL.Image
import pytest

from imagefun.font_registry import FontRegistry
from imagefun.pixel_buffer import PixelBuffer


def encode_image(image: PIL.Image.Image, format: str = "png") -> bytes:
    """
    Encodes a PIL image
    :param image: The image
    :param format: The PIL format name
    :return: The encoded data
    """
    stream = io.BytesIO()
    image.save(stream, format=format)
    return stream.getvalue()


def gradient_image(width: int, height: int) -> PIL.Image.Image:
    """
    Creates an RGB image with a horizontal red and a vertical green gradient
    :param width: The width
    :param height: The height
    :return: The image
    """
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :, 0] = (np.arange(width) * 255 // max(width - 1, 1)).reshape(1, width)
    pixels[:, :, 1] = (np.arange(height) * 255 // max(height - 1, 1)).reshape(height, 1)
    pixels[:, :, 2] = 128
    return PIL.Image.fromarray(pixels)


def png_header_only(width: int, height: int) -> bytes:
    """
    Creates a PNG declaring the given size but carrying no pixel data
    :param width: The declared width
    :param height: The declared height
    :return: The PNG data
    """

    def chunk(kind: bytes, payload: bytes) -> bytes:
        return (struct.pack(">I", len(payload)) + kind + payload
                + struct.pack(">I", zlib.crc32(kind + payload)))

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header)
            + chunk(b"IDAT", b"") + chunk(b"IEND", b""))


@pytest.fixture(autouse=True)
def clear_font_cache():
    FontRegistry.clear_cache()
    yield
    FontRegistry.clear_cache()


@pytest.fixture
def rgba_buffer() -> PixelBuffer:
    """
    Returns a colorful, semi-transparent 30x20 buffer
    :return: The buffer
    """
    pixels = np.zeros((20, 30, 4), dtype=np.uint8)
    pixels[:, :, 0] = (np.arange(30) * 8).reshape(1, 30)
    pixels[:, :, 1] = (np.arange(20) * 12).reshape(20, 1)
    pixels[:, :, 2] = 200
    pixels[:, :, 3] = 180
    pixels[0, 0] = (255, 255, 255, 255)
    pixels[0, 1] = (1, 1, 2, 0)
    return PixelBuffer(pixels)


@pytest.fixture
def png_data() -> bytes:
    """
    Returns a 400x300 RGB gradient as PNG
    :return: The PNG data
    """
    return encode_image(gradient_image(400, 300), "png")


@pytest.fixture
def jpeg_data() -> bytes:
    """
    Returns a 800x600 RGB gradient as JPEG
    :return: The JPEG data
    """
    return encode_image(gradient_image(800, 600), "jpeg")


@pytest.fixture
def image_file(tmp_path, png_data):
    """
    Writes the PNG gradient to a temporary file
    :return: The file's path
    """
    path = tmp_path / "gradient.png"
    path.write_bytes(png_data)
    return path
