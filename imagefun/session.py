"""
Implements :class:`.EditorSession`, the state of one editing session: the
currently opened image and what was last saved.

The session is the boundary at which load, encode and write failures are
caught and logged. Its operations report failure via their return value and
leave the session usable.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Protocol

from .config import settings
from .errors import DecodeFailure, EncodeFailure, ProbeFailure, WriteFailure
from .export import PNG_MIME_TYPE, write_export
from .filters import (
    BlueIsolate,
    Filter,
    FilterPipeline,
    GreenIsolate,
    Grayscale,
    RedIsolate,
    TextOverlay,
)
from .loader import ImageSourceTypes, open_image
from .pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

MediaListener = Callable[[Path], None]
"Called with the path of each newly saved image"


class ShareTarget(Protocol):
    """Receiver of images the user wants to share."""

    def send(self, path: Path, mime_type: str) -> None:
        ...


class EditorSession:
    """
    Holds the image being edited.

    Example::

        with EditorSession(pictures_dir="out") as session:
            if session.open("photo.jpg"):
                session.grayscale()
                session.watermark("Hello")
                path = session.save()
    """

    def __init__(
        self,
        display_width: int | None = None,
        display_height: int | None = None,
        pictures_dir: str | Path | None = None,
        share_target: ShareTarget | None = None,
        keep_image_on_failed_load: bool | None = None,
        filename_prefix: str | None = None,
    ):
        """
        :param display_width: The width opened images are fit into.
            settings.DISPLAY_WIDTH by default
        :param display_height: The height opened images are fit into.
            settings.DISPLAY_HEIGHT by default
        :param pictures_dir: Where saved images are stored.
            settings.PICTURES_DIR by default
        :param share_target: Receives shared images
        :param keep_image_on_failed_load: Keep the current image if opening
            another one fails. settings.KEEP_IMAGE_ON_FAILED_LOAD by default
        :param filename_prefix: Prefix of saved files.
            settings.FILENAME_PREFIX by default
        """
        self.display_width = display_width or settings.DISPLAY_WIDTH
        self.display_height = display_height or settings.DISPLAY_HEIGHT
        self.pictures_dir = Path(pictures_dir or settings.PICTURES_DIR)
        self.share_target = share_target
        self.keep_image_on_failed_load = (
            settings.KEEP_IMAGE_ON_FAILED_LOAD
            if keep_image_on_failed_load is None
            else keep_image_on_failed_load
        )
        self.filename_prefix = (
            filename_prefix if filename_prefix is not None else settings.FILENAME_PREFIX
        )
        self.buffer: PixelBuffer | None = None
        "The image being edited"
        self.source: ImageSourceTypes | None = None
        "Where the current image was loaded from"
        self.saved_path: Path | None = None
        "The most recently saved file"
        self.media_listeners: list[MediaListener] = []
        "Notified about every saved file"

    def __enter__(self) -> EditorSession:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    @property
    def has_image(self) -> bool:
        return self.buffer is not None and not self.buffer.is_released

    def open(self, source: ImageSourceTypes) -> bool:
        """
        Opens a new image, downsampled to fit the display bounds

        :param source: File name, URL, bytes or binary stream
        :return: True on success. On failure the previous image is kept if
            keep_image_on_failed_load is set, otherwise the session is empty
        """
        if not self.keep_image_on_failed_load:
            self.close()
        try:
            buffer = open_image(source, self.display_width, self.display_height)
        except ProbeFailure as e:
            logger.error(f"cannot open image: {e}")
            return False
        except DecodeFailure as e:
            logger.error(f"cannot make mutable bitmap: {e}")
            return False
        self.close()
        self.buffer = buffer
        self.source = source
        logger.info(f"Opened {buffer.width}x{buffer.height} image")
        return True

    def apply(self, filter: Filter | str) -> bool:
        """
        Applies a filter to the current image

        :param filter: The filter or a filter string such as "gray|red"
        :return: True if a filter was applied, False if there is no image or
            the filter is invalid
        """
        if not self.has_image:
            logger.debug("No image opened, ignoring filter")
            return False
        try:
            if isinstance(filter, str):
                filter = FilterPipeline.parse(filter)
            filter.apply(self.buffer)
        except ValueError as e:
            logger.error(f"cannot apply filter: {e}")
            return False
        return True

    def grayscale(self) -> bool:
        return self.apply(Grayscale())

    def red_filter(self) -> bool:
        return self.apply(RedIsolate())

    def green_filter(self) -> bool:
        return self.apply(GreenIsolate())

    def blue_filter(self) -> bool:
        return self.apply(BlueIsolate())

    def watermark(self, text: str) -> bool:
        """
        Puts the given text into the image

        :param text: The text. Nothing happens if it is empty
        :return: True if the text was drawn
        """
        if not text:
            return False
        return self.apply(TextOverlay(text=text))

    def save(self) -> Path | None:
        """
        Saves the current image as PNG into the pictures directory and
        notifies the media listeners

        :return: The file's path, None if there is no image or it could not
            be saved
        """
        if not self.has_image:
            return None
        try:
            path = write_export(self.buffer, self.pictures_dir, self.filename_prefix)
        except (EncodeFailure, WriteFailure) as e:
            logger.error(f"cannot save bitmap: {e}")
            return None
        self.saved_path = path
        logger.info(f"Saved image to {path}")
        for listener in self.media_listeners:
            try:
                listener(path)
            except Exception as e:
                logger.error(f"Media listener failed for {path}: {e}")
        return path

    def share(self) -> Path | None:
        """
        Saves the current image and hands the file to the share target

        :return: The shared file's path, None if nothing was saved
        """
        path = self.save()
        if path is None:
            return None
        if self.share_target is None:
            logger.warning("No share target configured")
            return path
        self.share_target.send(path, PNG_MIME_TYPE)
        return path

    def close(self) -> None:
        """Releases the current image."""
        if self.buffer is not None:
            self.buffer.release()
            self.buffer = None
            self.source = None

    def __repr__(self) -> str:
        return f"EditorSession ({self.buffer!r}, {self.display_width}x{self.display_height})"


__all__ = ["EditorSession", "ShareTarget", "MediaListener"]
