"""
Lossless export of pixel buffers.
"""

from __future__ import annotations

import io
import logging
import time
from pathlib import Path

from .errors import EncodeFailure, WriteFailure
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

PNG_MIME_TYPE = "image/png"
"MIME type of exported images"

PNG_EXTENSION = ".png"


def export_buffer(buffer: PixelBuffer) -> bytes:
    """
    Encodes the buffer as PNG

    :param buffer: The buffer to encode
    :return: The PNG data
    """
    output_stream = io.BytesIO()
    try:
        buffer.to_pil().save(output_stream, format="png")
    except (OSError, ValueError) as e:
        raise EncodeFailure(f"Cannot encode image: {e}") from e
    data = output_stream.getvalue()
    if len(data) == 0:
        raise EncodeFailure("Encoder returned no data")
    return data


def make_filename(prefix: str = "ImageFun_", now: float | None = None) -> str:
    """
    Creates a file name containing the current time in milliseconds

    :param prefix: The file name's prefix
    :param now: The timestamp in seconds since the epoch, the current time by default
    :return: The file name, e.g. ImageFun_1700000000000.png
    """
    if now is None:
        now = time.time()
    return f"{prefix}{int(now * 1000)}{PNG_EXTENSION}"


def write_export(buffer: PixelBuffer, directory: str | Path, prefix: str = "ImageFun_") -> Path:
    """
    Encodes the buffer and stores it under a new, timestamped file name

    :param buffer: The buffer to store
    :param directory: The target directory, created if necessary
    :param prefix: The file name's prefix
    :return: The path of the written file
    """
    data = export_buffer(buffer)
    directory = Path(directory)
    target = directory / make_filename(prefix)
    try:
        directory.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
    except OSError as e:
        raise WriteFailure(f"Cannot write {target}: {e}") from e
    logger.debug(f"Wrote {len(data)} bytes to {target}")
    return target


__all__ = ["PNG_MIME_TYPE", "export_buffer", "make_filename", "write_export"]
