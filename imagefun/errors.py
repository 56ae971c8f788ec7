"""
Exception types raised by the ImageFun core.

Loading and encoding functions raise these; :class:`~imagefun.session.EditorSession`
is the boundary which catches and logs them.
"""


class ImageFunError(Exception):
    """Base class of all ImageFun errors."""


class ProbeFailure(ImageFunError, ValueError):
    """The image source could not be read or its bounds could not be determined."""


class DecodeFailure(ImageFunError, ValueError):
    """The image data could not be decoded into pixels."""


class EncodeFailure(ImageFunError, ValueError):
    """The pixel buffer could not be encoded."""


class WriteFailure(ImageFunError, OSError):
    """Encoded image data could not be written to storage."""


__all__ = [
    "ImageFunError",
    "ProbeFailure",
    "DecodeFailure",
    "EncodeFailure",
    "WriteFailure",
]
