# ImageFun Filters Module
"""
Dataclass-based filter system for pixel buffers.

All filters modify the buffer in place, are JSON-serializable and can be
chained with FilterPipeline.
"""

from .base import (
    Filter,
    FILTER_REGISTRY,
    FILTER_ALIASES,
    register_filter,
    register_alias,
    get_filter_aliases,
    lookup_filter,
)

from .color import (
    grayscale,
    isolate_channel,
    isolate_red,
    isolate_green,
    isolate_blue,
    Grayscale,
    ChannelIsolate,
    RedIsolate,
    GreenIsolate,
    BlueIsolate,
)

from .text import (
    WatermarkRequest,
    overlay_text,
    TextOverlay,
)

from .pipeline import FilterPipeline

__all__ = [
    # Base
    'Filter',
    'FILTER_REGISTRY',
    'FILTER_ALIASES',
    'register_filter',
    'register_alias',
    'get_filter_aliases',
    'lookup_filter',
    # Color
    'grayscale',
    'isolate_channel',
    'isolate_red',
    'isolate_green',
    'isolate_blue',
    'Grayscale',
    'ChannelIsolate',
    'RedIsolate',
    'GreenIsolate',
    'BlueIsolate',
    # Text
    'WatermarkRequest',
    'overlay_text',
    'TextOverlay',
    # Pipeline
    'FilterPipeline',
]
