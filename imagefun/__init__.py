"""
ImageFun - Load, filter, watermark, save and share images
"""

from .pixel_buffer import PixelBuffer
from .sampling import compute_sample_factor, SamplingDecision, decide_sampling, probe_bounds
from .loader import ImageSourceTypes, load_mutable_buffer, open_image, read_source
from .export import PNG_MIME_TYPE, export_buffer, make_filename, write_export
from .errors import (
    ImageFunError,
    ProbeFailure,
    DecodeFailure,
    EncodeFailure,
    WriteFailure,
)
from .filters import (
    Filter,
    FilterPipeline,
    Grayscale,
    RedIsolate,
    GreenIsolate,
    BlueIsolate,
    TextOverlay,
    WatermarkRequest,
)
from .session import EditorSession, ShareTarget

__all__ = [
    # Pixel data
    "PixelBuffer",
    # Sampling
    "compute_sample_factor",
    "SamplingDecision",
    "decide_sampling",
    "probe_bounds",
    # Loading
    "ImageSourceTypes",
    "load_mutable_buffer",
    "open_image",
    "read_source",
    # Export
    "PNG_MIME_TYPE",
    "export_buffer",
    "make_filename",
    "write_export",
    # Errors
    "ImageFunError",
    "ProbeFailure",
    "DecodeFailure",
    "EncodeFailure",
    "WriteFailure",
    # Filters
    "Filter",
    "FilterPipeline",
    "Grayscale",
    "RedIsolate",
    "GreenIsolate",
    "BlueIsolate",
    "TextOverlay",
    "WatermarkRequest",
    # Session
    "EditorSession",
    "ShareTarget",
]

__version__ = "0.1.0"
