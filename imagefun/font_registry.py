"""
Font registry for the fonts used to draw watermarks.

This module provides a font registry that:
1. Uses a TrueType font configured via ``IMAGEFUN_FONT_PATH``
2. Falls back to Pillow's bundled default font if none is configured or it
   can not be loaded
3. Caches fonts for performance
"""

from __future__ import annotations

import logging
from pathlib import Path
from threading import RLock

from PIL import ImageFont

from .config import settings

logger = logging.getLogger(__name__)

FontHandle = ImageFont.FreeTypeFont | ImageFont.ImageFont
"A font usable by PIL.ImageDraw"


class FontRegistry:
    """
    Manages the fonts which can be used for drawing text.
    """

    access_lock = RLock()
    "Multi-thread access lock"
    _cached_fonts: dict[tuple[str | None, int], FontHandle] = {}
    "Fonts by (path, size)"

    @classmethod
    def get_font(cls, size: int, path: str | Path | None = None) -> FontHandle:
        """
        Returns a font of given size

        :param size: The font size in pixels
        :param path: A TrueType font file. settings.FONT_PATH by default
        :return: The font handle
        """
        if size <= 0:
            raise ValueError(f"Font size has to be positive, got {size}")
        if path is None:
            path = settings.FONT_PATH
        key = (str(path) if path is not None else None, size)
        with cls.access_lock:
            font = cls._cached_fonts.get(key)
            if font is None:
                font = cls._load(path, size)
                cls._cached_fonts[key] = font
            return font

    @staticmethod
    def _load(path: str | Path | None, size: int) -> FontHandle:
        if path is not None:
            try:
                return ImageFont.truetype(str(path), size)
            except OSError as e:
                logger.warning(f"Failed to load font from {path}: {e}")
        return ImageFont.load_default(size=size)

    @classmethod
    def clear_cache(cls) -> None:
        """Forgets all loaded fonts."""
        with cls.access_lock:
            cls._cached_fonts.clear()


__all__ = ["FontRegistry", "FontHandle"]
