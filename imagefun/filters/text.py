# ImageFun Filters - Text
"""
Text watermark overlay.

The text is drawn on top of the existing pixels, anything outside of the
buffer is clipped. Unlike the color filters drawing is not idempotent:
applying the overlay twice draws the text twice.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from PIL import ImageColor, ImageDraw, ImageFont
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from imagefun.font_registry import FontRegistry
from imagefun.pixel_buffer import PixelBuffer
from .base import Filter, register_filter, register_alias

logger = logging.getLogger(__name__)

WATERMARK_POSITION = (50, 50)
"Left end of the text baseline"
WATERMARK_FONT_SIZE = 30
WATERMARK_COLOR = '#ff0000'


class WatermarkRequest(BaseModel):
    """A single request to draw text onto a buffer."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    x: int = WATERMARK_POSITION[0]
    y: int = WATERMARK_POSITION[1]
    size: int = Field(default=WATERMARK_FONT_SIZE, gt=0)
    color: str = WATERMARK_COLOR

    def rgba(self) -> tuple[int, int, int, int]:
        """The color as opaque or translucent (r, g, b, a) tuple."""
        color = ImageColor.getrgb(self.color)
        if len(color) == 3:
            return color[0], color[1], color[2], 255
        return color


def overlay_text(buffer: PixelBuffer, request: WatermarkRequest | str) -> PixelBuffer:
    """Draw text onto the buffer.

    Args:
        buffer: The buffer to modify
        request: The text or a full request with position, size and color

    Returns:
        The same buffer
    """
    if isinstance(request, str):
        request = WatermarkRequest(text=request)
    font = FontRegistry.get_font(request.size)
    image = buffer.to_pil()
    draw = ImageDraw.Draw(image)
    if isinstance(font, ImageFont.FreeTypeFont):
        draw.text((request.x, request.y), request.text, font=font, fill=request.rgba(), anchor='ls')
    else:
        # Bitmap fonts only support top-left anchoring
        top = request.y - font.getbbox(request.text)[3]
        draw.text((request.x, top), request.text, font=font, fill=request.rgba())
    buffer.pixels[...] = np.asarray(image)
    return buffer


@register_filter
@dataclass
class TextOverlay(Filter):
    """Draw a text watermark, opaque red and 30 px by default.

    :param text: The text to draw, must not be empty
    :param x: Left end of the baseline
    :param y: Vertical position of the baseline
    :param size: Font size in pixels
    :param color: Text color, e.g. '#ff0000' or 'red'
    """

    _idempotent = False

    text: str = ''
    x: int = WATERMARK_POSITION[0]
    y: int = WATERMARK_POSITION[1]
    size: int = WATERMARK_FONT_SIZE
    color: str = WATERMARK_COLOR

    def __post_init__(self):
        self.text = str(self.text)

    def to_request(self) -> WatermarkRequest:
        """Validate the parameters.

        Raises a ValueError if the text is empty or the size invalid
        """
        try:
            return WatermarkRequest(
                text=self.text, x=self.x, y=self.y, size=self.size, color=self.color
            )
        except ValidationError as e:
            raise ValueError(f"Invalid watermark: {e}") from e

    def apply(self, buffer: PixelBuffer) -> PixelBuffer:
        return overlay_text(buffer, self.to_request())


register_alias('watermark', TextOverlay)
register_alias('text', TextOverlay)


__all__ = [
    'WatermarkRequest', 'overlay_text', 'TextOverlay',
    'WATERMARK_POSITION', 'WATERMARK_FONT_SIZE', 'WATERMARK_COLOR',
]
