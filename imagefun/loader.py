"""
Loading of image sources into mutable pixel buffers.

A source is decoded at a reduced resolution chosen by
:mod:`imagefun.sampling` and then copied into a freshly allocated
:class:`~imagefun.pixel_buffer.PixelBuffer`, so every transform can rely on
8-bit RGBA pixels independent of the source's own color format.
"""

from __future__ import annotations

import io
import logging
import math
from pathlib import Path
from typing import BinaryIO, Union
from urllib.error import URLError
from urllib.parse import unquote, urlparse
from urllib.request import urlopen

import PIL.Image
import filetype

from .config import settings
from .errors import DecodeFailure, ProbeFailure
from .pixel_buffer import PixelBuffer
from .sampling import decide_sampling

logger = logging.getLogger(__name__)

HTTP_PROTOCOL_URL_HEADER = "http://"
HTTPS_PROTOCOL_URL_HEADER = "https://"
FILE_PROTOCOL_URL_HEADER = "file://"

REDUCIBLE_MODES = {"L", "RGB", "RGBA"}
"Modes Image.reduce handles directly, all others are converted to RGBA first"

ImageSourceTypes = Union[str, Path, bytes, bytearray, BinaryIO]
"The valid source types for loading an image"


def read_source(source: ImageSourceTypes) -> bytes:
    """
    Reads the encoded image data from a file path, URL, bytes or stream

    :param source: The image source
    :return: The encoded data
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if hasattr(source, "read"):
        try:
            data = source.read()
        except OSError as e:
            raise ProbeFailure(f"Cannot read image stream: {e}") from e
        if not isinstance(data, bytes):
            raise ProbeFailure("Image stream has to be opened in binary mode")
        return data
    if isinstance(source, str) and source.startswith(
        (HTTP_PROTOCOL_URL_HEADER, HTTPS_PROTOCOL_URL_HEADER)
    ):
        try:
            with urlopen(source, timeout=settings.URL_TIMEOUT) as response:
                return response.read()
        except (URLError, OSError) as e:
            raise ProbeFailure(f"Image data could not be received from {source}: {e}") from e
    if isinstance(source, str) and source.startswith(FILE_PROTOCOL_URL_HEADER):
        source = unquote(urlparse(source).path)
    path = Path(source)
    try:
        return path.read_bytes()
    except OSError as e:
        raise ProbeFailure(f"Cannot open {path}: {e}") from e


def sniff_mime_type(data: bytes) -> str:
    """
    Detects the MIME type from the data's magic bytes

    :param data: Raw image bytes
    :returns: MIME type string
    """
    kind = filetype.guess(data)
    if kind is None:
        return "application/octet-stream"
    return kind.mime


def load_mutable_buffer(source: ImageSourceTypes, sample_factor: int = 1) -> PixelBuffer:
    """
    Decodes an image reduced by the given factor into a new pixel buffer.

    The decoded image is always copied into a fresh RGBA buffer, also if the
    decoder's result already would be RGBA. The resulting size is
    ceil(source_size / sample_factor) in both dimensions.

    :param source: The image source, see :func:`read_source`
    :param sample_factor: The power of two to reduce the resolution by
    :return: The new buffer

    Raises a DecodeFailure if the source can not be read or decoded
    """
    if sample_factor < 1:
        raise ValueError(f"Sample factor has to be at least 1, got {sample_factor}")
    try:
        data = read_source(source)
    except ProbeFailure as e:
        raise DecodeFailure(str(e)) from e
    try:
        with PIL.Image.open(io.BytesIO(data)) as image:
            decoded = _decode_reduced(image, sample_factor)
            return PixelBuffer.from_pil(decoded)
    except PIL.UnidentifiedImageError as e:
        raise DecodeFailure(f"Unsupported or damaged image data ({sniff_mime_type(data)})") from e
    except PIL.Image.DecompressionBombError as e:
        raise DecodeFailure(f"Image too large: {e}") from e
    except MemoryError as e:
        raise DecodeFailure("Not enough memory to decode image") from e
    except (OSError, ValueError) as e:
        raise DecodeFailure(f"Cannot decode image: {e}") from e


def _decode_reduced(image: PIL.Image.Image, sample_factor: int) -> PIL.Image.Image:
    """
    Decodes the opened image, reduced by sample_factor.

    JPEG images are scaled while decoding via draft mode, the remaining
    factor is applied with Image.reduce.
    """
    if sample_factor == 1:
        image.load()
        return image
    width, height = image.size
    target = (math.ceil(width / sample_factor), math.ceil(height / sample_factor))
    image.draft(image.mode, target)
    remaining = max(1, sample_factor // _draft_scale((width, height), image.size))
    image.load()
    if remaining == 1:
        return image
    if image.mode not in REDUCIBLE_MODES:
        image = image.convert("RGBA")
    return image.reduce(remaining)


def _draft_scale(source_size: tuple[int, int], draft_size: tuple[int, int]) -> int:
    """The power of two the decoder scaled the image down by, 1 if it did not."""
    for scale in (1, 2, 4, 8):
        if all(math.ceil(s / scale) == d for s, d in zip(source_size, draft_size)):
            return scale
    return 1


def open_image(source: ImageSourceTypes, target_width: int, target_height: int) -> PixelBuffer:
    """
    Loads an image so that it fits into the given display bounds.

    :param source: The image source, see :func:`read_source`
    :param target_width: The display width
    :param target_height: The display height
    :return: The new buffer

    Raises a ProbeFailure if the source can not be read at all and a
    DecodeFailure if its data can not be decoded
    """
    data = read_source(source)
    decision = decide_sampling(data, target_width, target_height)
    logger.debug(
        f"Loading {sniff_mime_type(data)} image {decision.source_width}x"
        f"{decision.source_height} with sample factor {decision.sample_factor}"
    )
    return load_mutable_buffer(data, decision.sample_factor)


__all__ = [
    "ImageSourceTypes",
    "read_source",
    "sniff_mime_type",
    "load_mutable_buffer",
    "open_image",
]
