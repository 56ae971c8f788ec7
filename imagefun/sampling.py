"""
Decode-time downsampling policy.

Images are decoded at a reduced resolution so the resulting pixel buffer
never exceeds the display bounds. Decoders only support power-of-two
reductions, so the factor is found by doubling rather than by division.
"""

from __future__ import annotations

import io
import logging
import math
from numbers import Integral
from dataclasses import dataclass

import PIL.Image

from .errors import ProbeFailure

logger = logging.getLogger(__name__)


def compute_sample_factor(
    source_width: int, source_height: int, target_width: int, target_height: int
) -> int:
    """
    Returns the smallest power of two f with source_width <= target_width * f
    and source_height <= target_height * f.

    :param source_width: The source image's width
    :param source_height: The source image's height
    :param target_width: The display width
    :param target_height: The display height
    :return: The sample factor (1, 2, 4, ...)
    """
    for name, value in (
        ("source_width", source_width),
        ("source_height", source_height),
        ("target_width", target_width),
        ("target_height", target_height),
    ):
        if not isinstance(value, Integral) or value <= 0:
            raise ValueError(f"{name} has to be a positive integer, got {value!r}")
    factor = 1
    while source_width > target_width * factor or source_height > target_height * factor:
        factor *= 2
    return factor


@dataclass(frozen=True)
class SamplingDecision:
    """The sample factor chosen for one image load."""

    source_width: int
    source_height: int
    target_width: int
    target_height: int
    sample_factor: int = 1

    @property
    def sampled_size(self) -> tuple[int, int]:
        """Size of the decoded image, (width, height)."""
        return (
            math.ceil(self.source_width / self.sample_factor),
            math.ceil(self.source_height / self.sample_factor),
        )


def probe_bounds(data: bytes) -> tuple[int, int]:
    """
    Reads an image's dimensions from its header without decoding the pixels

    :param data: The encoded image
    :return: The size as tuple (width, height)

    Raises a ProbeFailure if the data is no image or exceeds Pillow's
    decompression bomb limit
    """
    try:
        with PIL.Image.open(io.BytesIO(data)) as image:
            width, height = image.size
    except (PIL.UnidentifiedImageError, OSError, ValueError) as e:
        raise ProbeFailure(f"Cannot determine image size: {e}") from e
    except PIL.Image.DecompressionBombError as e:
        raise ProbeFailure(f"Image too large: {e}") from e
    if width <= 0 or height <= 0:
        raise ProbeFailure(f"Invalid image size {width}x{height}")
    return width, height


def decide_sampling(data: bytes, target_width: int, target_height: int) -> SamplingDecision:
    """
    Probes the image and chooses its sample factor.

    If the probe fails a factor of 1 is used and the failure is left to the
    subsequent decode.

    :param data: The encoded image
    :param target_width: The display width
    :param target_height: The display height
    :return: The decision
    """
    try:
        width, height = probe_bounds(data)
    except ProbeFailure as e:
        logger.error(f"cannot get image size: {e}")
        return SamplingDecision(0, 0, target_width, target_height, 1)
    factor = compute_sample_factor(width, height, target_width, target_height)
    logger.debug(f"Sampling {width}x{height} by {factor} for {target_width}x{target_height}")
    return SamplingDecision(width, height, target_width, target_height, factor)


__all__ = ["compute_sample_factor", "SamplingDecision", "probe_bounds", "decide_sampling"]
