# ImageFun Filters - Pipeline
"""
FilterPipeline for applying several filters in a row.

The filters run strictly one after another on the same buffer, each one
returning before the next one starts. In the compact form the filters are
separated by ``|`` or ``;``, e.g. ``gray|watermark "Hello"``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterator, TYPE_CHECKING

from .base import Filter

if TYPE_CHECKING:
    from imagefun.pixel_buffer import PixelBuffer

_STAGE_PATTERN = re.compile(r"""(?:[^|;"']+|"[^"]*"|'[^']*')+""")
"A single filter of a pipeline string, separators inside quotes included"


@dataclass
class FilterPipeline(Filter):
    """An ordered chain of filters.

    Example:
        pipeline = FilterPipeline([Grayscale()]).append(TextOverlay(text="Hi"))
        pipeline.apply(buffer)
    """

    filters: list[Filter] = field(default_factory=list)

    def apply(self, buffer: 'PixelBuffer') -> 'PixelBuffer':
        for stage in self.filters:
            buffer = stage.apply(buffer)
        return buffer

    def append(self, filter: Filter) -> 'FilterPipeline':
        self.filters.append(filter)
        return self

    def extend(self, filters: list[Filter]) -> 'FilterPipeline':
        self.filters.extend(filters)
        return self

    def is_idempotent(self) -> bool:
        """A pipeline is only considered idempotent if all of its filters are."""
        return all(stage.is_idempotent() for stage in self.filters)

    def __len__(self) -> int:
        return len(self.filters)

    def __iter__(self) -> Iterator[Filter]:
        return iter(self.filters)

    def __getitem__(self, index: int) -> Filter:
        return self.filters[index]

    def to_dict(self) -> dict[str, Any]:
        return {'type': self.type, 'filters': [stage.to_dict() for stage in self.filters]}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'FilterPipeline':
        return cls(filters=[Filter.from_dict(entry) for entry in data.get('filters', [])])

    @classmethod
    def parse(cls, text: str) -> 'FilterPipeline':
        """Create a pipeline from its compact form.

        Examples:
            'gray|red'
            'blue; watermark "Hello World"'

        :param text: The filters, separated by | or ;
        :returns: The pipeline, empty if text contains no filter
        """
        stages = (stage.strip() for stage in _STAGE_PATTERN.findall(text or ''))
        return cls(filters=[Filter.parse(stage) for stage in stages if stage])

    def to_string(self) -> str:
        return '|'.join(stage.to_string() for stage in self.filters)
