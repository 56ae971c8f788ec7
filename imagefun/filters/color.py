# ImageFun Filters - Color
"""
Per-pixel color filters.

Every filter visits each pixel exactly once, keeps the alpha channel and
modifies the buffer in place. All of them are idempotent.

Usage:
    from imagefun.filters.color import grayscale, isolate_red

    grayscale(buffer)
    isolate_red(buffer)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import numpy as np

from imagefun.pixel_buffer import PixelBuffer, RED, GREEN, BLUE
from .base import Filter, register_filter, register_alias


# ============================================================================
# Functions
# ============================================================================

def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """Convert to grayscale using the channel average.

    avg = (R + G + B) // 3, the result is (A, avg, avg, avg).

    Args:
        buffer: The buffer to modify

    Returns:
        The same buffer
    """
    pixels = buffer.pixels
    total = pixels[:, :, :3].sum(axis=2, dtype=np.uint16)
    avg = (total // 3).astype(np.uint8)
    pixels[:, :, RED] = avg
    pixels[:, :, GREEN] = avg
    pixels[:, :, BLUE] = avg
    return buffer


def isolate_channel(buffer: PixelBuffer, channel: int) -> PixelBuffer:
    """Zero all color channels except the given one.

    Args:
        buffer: The buffer to modify
        channel: RED, GREEN or BLUE

    Returns:
        The same buffer
    """
    if channel not in (RED, GREEN, BLUE):
        raise ValueError(f"Invalid color channel index {channel}")
    pixels = buffer.pixels
    for index in (RED, GREEN, BLUE):
        if index != channel:
            pixels[:, :, index] = 0
    return buffer


def isolate_red(buffer: PixelBuffer) -> PixelBuffer:
    """Keep only the red channel: (A, R, 0, 0)."""
    return isolate_channel(buffer, RED)


def isolate_green(buffer: PixelBuffer) -> PixelBuffer:
    """Keep only the green channel: (A, 0, G, 0)."""
    return isolate_channel(buffer, GREEN)


def isolate_blue(buffer: PixelBuffer) -> PixelBuffer:
    """Keep only the blue channel: (A, 0, 0, B)."""
    return isolate_channel(buffer, BLUE)


# ============================================================================
# Filter classes
# ============================================================================

@register_filter
@dataclass
class Grayscale(Filter):
    """Convert to grayscale by averaging red, green and blue."""

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return grayscale(buffer)


@dataclass
class ChannelIsolate(Filter):
    """Base class of the filters keeping a single color channel."""

    _channel: ClassVar[int] = RED

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return isolate_channel(buffer, self._channel)


@register_filter
@dataclass
class RedIsolate(ChannelIsolate):
    """Filter all colors except red."""

    _channel: ClassVar[int] = RED


@register_filter
@dataclass
class GreenIsolate(ChannelIsolate):
    """Filter all colors except green."""

    _channel: ClassVar[int] = GREEN


@register_filter
@dataclass
class BlueIsolate(ChannelIsolate):
    """Filter all colors except blue."""

    _channel: ClassVar[int] = BLUE


register_alias('gray', Grayscale)
register_alias('grey', Grayscale)
register_alias('red', RedIsolate)
register_alias('green', GreenIsolate)
register_alias('blue', BlueIsolate)


__all__ = [
    'grayscale', 'isolate_channel', 'isolate_red', 'isolate_green', 'isolate_blue',
    'Grayscale', 'ChannelIsolate', 'RedIsolate', 'GreenIsolate', 'BlueIsolate',
]
