# ImageFun Filters - Base Classes
"""
Base classes for the filter system.

A filter is a dataclass whose fields are its parameters. It borrows a
:class:`~imagefun.pixel_buffer.PixelBuffer`, modifies the pixels in place
and returns the very same buffer.

Filters can be written down in a compact form: the filter's name or alias
followed by positional or ``key=value`` arguments, e.g.
``watermark "Hello World" size=20``.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, MISSING
from typing import Any, ClassVar, TYPE_CHECKING

if TYPE_CHECKING:
    from imagefun.pixel_buffer import PixelBuffer


FILTER_REGISTRY: dict[str, type['Filter']] = {}
"Filter classes by class name and by lower case class name"
FILTER_ALIASES: dict[str, type['Filter']] = {}
"Filter classes by short name, e.g. 'gray'"

_QUOTES = '"\''
_TOKEN_PATTERN = re.compile(r"""(?:[^\s"']+|"[^"]*"|'[^']*')+""")


def register_filter(cls: type['Filter']) -> type['Filter']:
    """Class decorator making a filter available to parse and from_dict."""
    for name in (cls.__name__, cls.__name__.lower()):
        FILTER_REGISTRY[name] = cls
    return cls


def register_alias(alias: str, cls: type['Filter']) -> None:
    """Make a filter class parseable by a short name, e.g. 'gray'."""
    FILTER_ALIASES[alias.lower()] = cls


def lookup_filter(name: str) -> type['Filter']:
    """Find a filter class by alias, class name or lower case class name.

    :param name: The name
    :returns: The filter class
    """
    filter_cls = (
        FILTER_ALIASES.get(name.lower())
        or FILTER_REGISTRY.get(name)
        or FILTER_REGISTRY.get(name.lower())
    )
    if filter_cls is None:
        raise ValueError(f"Unknown filter: {name}")
    return filter_cls


@dataclass
class Filter(ABC):
    """Base class for all filters.

    Example:
        @register_filter
        @dataclass
        class Invert(Filter):
            def apply(self, buffer: PixelBuffer) -> PixelBuffer:
                buffer.pixels[:, :, :3] = 255 - buffer.pixels[:, :, :3]
                return buffer
    """

    _idempotent: ClassVar[bool] = True
    "True if applying the filter twice gives the same result as applying it once"

    @abstractmethod
    def apply(self, buffer: 'PixelBuffer') -> 'PixelBuffer':
        """Modify the buffer in place.

        :param buffer: The buffer to modify.
        :returns: The same buffer.
        """

    def __call__(self, buffer: 'PixelBuffer') -> 'PixelBuffer':
        return self.apply(buffer)

    @classmethod
    def is_idempotent(cls) -> bool:
        return cls._idempotent

    @property
    def type(self) -> str:
        """The name the filter is stored under."""
        return type(self).__name__

    @classmethod
    def parameter_names(cls) -> list[str]:
        """The filter's parameters in declaration order."""
        return [f.name for f in fields(cls) if not f.name.startswith('_')]

    def to_dict(self) -> dict[str, Any]:
        """The filter's type and parameters as JSON compatible dict."""
        data = {name: getattr(self, name) for name in self.parameter_names()}
        data['type'] = self.type
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Filter':
        """Create a filter from the output of :meth:`to_dict`."""
        params = {key: value for key, value in data.items() if key != 'type'}
        filter_type = data.get('type', cls.__name__)
        filter_cls = FILTER_REGISTRY.get(filter_type) or FILTER_REGISTRY.get(filter_type.lower())
        if filter_cls is None:
            raise ValueError(f"Unknown filter type: {filter_type}")
        return filter_cls(**params)

    @classmethod
    def from_json(cls, json_str: str) -> 'Filter':
        return cls.from_dict(json.loads(json_str))

    @classmethod
    def parse(cls, text: str) -> 'Filter':
        """Create a filter from its compact form.

        Examples:
            'gray'
            'red'
            'watermark "Hello World"'
            'textoverlay text=Hi x=10 y=40'

        :param text: The filter name followed by its arguments
        :returns: The filter
        """
        tokens = _TOKEN_PATTERN.findall(text)
        if not tokens:
            raise ValueError(f"Invalid filter format: {text!r}")
        filter_cls = lookup_filter(tokens[0])
        names = filter_cls.parameter_names()

        params: dict[str, Any] = {}
        positional: list[Any] = []
        for token in tokens[1:]:
            key, sep, value = token.partition('=')
            if sep and key and key[0] not in _QUOTES + '#':
                params[key] = _parse_value(value)
            else:
                positional.append(_parse_value(token))

        if len(positional) > len(names):
            raise ValueError(
                f"Too many positional arguments for {filter_cls.__name__}: "
                f"got {len(positional)}, accepts {len(names)}"
            )
        for name, value in zip(names, positional):
            params.setdefault(name, value)

        try:
            return filter_cls(**params)
        except TypeError as e:
            raise ValueError(f"Invalid arguments for {filter_cls.__name__}: {e}") from e

    def to_string(self) -> str:
        """The compact form, listing only parameters differing from their defaults.

        Examples:
            'grayscale'
            "textoverlay text='Hello World'"
        """
        parts = [self.type.lower()]
        for f in fields(self):
            if f.name.startswith('_'):
                continue
            value = getattr(self, f.name)
            if f.default is not MISSING and value == f.default:
                continue
            parts.append(f"{f.name}={_format_value(value)}")
        return ' '.join(parts)


def get_filter_aliases() -> dict[str, list[str]]:
    """All registered filters with their aliases.

    :returns: Sorted alias lists by filter class name
    """
    result = {cls.__name__: [] for cls in FILTER_REGISTRY.values()}
    for alias, cls in FILTER_ALIASES.items():
        result.setdefault(cls.__name__, []).append(alias)
    return {name: sorted(result[name]) for name in sorted(result)}


def _parse_value(token: str) -> int | float | bool | str:
    """Convert an argument to bool, int or float where possible.

    Quoted arguments always stay strings, without their quotes.
    """
    if len(token) >= 2 and token[0] in _QUOTES and token[-1] == token[0]:
        return token[1:-1]
    if token.lower() in ('true', 'false'):
        return token.lower() == 'true'
    for convert in (int, float):
        try:
            return convert(token)
        except ValueError:
            continue
    return token


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, str) and "'" in value:
        return f'"{value}"'
    if isinstance(value, str) and (not value or any(c.isspace() or c in '=|;' for c in value)):
        return f"'{value}'"
    return str(value)
