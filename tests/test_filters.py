"""
Tests for the ImageFun color filters and the filter system.

Tests verify actual pixel values to ensure filters work correctly.
"""

import json

import numpy as np
import pytest

from imagefun.filters import (
    Filter,
    FILTER_REGISTRY,
    FilterPipeline,
    Grayscale,
    RedIsolate,
    GreenIsolate,
    BlueIsolate,
    TextOverlay,
    get_filter_aliases,
    grayscale,
    isolate_channel,
    isolate_red,
)

COLOR_FILTERS = [Grayscale, RedIsolate, GreenIsolate, BlueIsolate]


class TestGrayscale:
    """Test grayscale conversion by channel average."""

    def test_average_truncates(self, rgba_buffer):
        """(1 + 1 + 2) / 3 = 1.33 truncates to 1."""
        grayscale(rgba_buffer)
        assert rgba_buffer.get_channels(1, 0) == (0, 1, 1, 1)

    def test_white_stays_white(self, rgba_buffer):
        grayscale(rgba_buffer)
        assert rgba_buffer.get_channels(0, 0) == (255, 255, 255, 255)

    def test_no_overflow(self):
        from imagefun.pixel_buffer import PixelBuffer

        buffer = PixelBuffer.allocate(2, 2, fill=(250, 251, 252, 255))
        grayscale(buffer)
        assert buffer.get_channels(0, 0) == (255, 251, 251, 251)

    def test_matches_reference(self, rgba_buffer):
        original = rgba_buffer.pixels.astype(np.int32)
        expected = (original[:, :, 0] + original[:, :, 1] + original[:, :, 2]) // 3
        grayscale(rgba_buffer)
        assert np.array_equal(rgba_buffer.pixels[:, :, 0], expected)

    def test_r_equals_g_equals_b_alpha_kept(self, rgba_buffer):
        alpha = rgba_buffer.pixels[:, :, 3].copy()
        result = Grayscale().apply(rgba_buffer)
        assert result is rgba_buffer
        assert np.array_equal(result.pixels[:, :, 0], result.pixels[:, :, 1])
        assert np.array_equal(result.pixels[:, :, 1], result.pixels[:, :, 2])
        assert np.array_equal(result.pixels[:, :, 3], alpha)


class TestChannelIsolation:
    """Test red, green and blue isolation."""

    def test_red(self, rgba_buffer):
        original = rgba_buffer.pixels.copy()
        RedIsolate().apply(rgba_buffer)
        assert np.all(rgba_buffer.pixels[:, :, 1] == 0)
        assert np.all(rgba_buffer.pixels[:, :, 2] == 0)
        assert np.array_equal(rgba_buffer.pixels[:, :, 0], original[:, :, 0])
        assert np.array_equal(rgba_buffer.pixels[:, :, 3], original[:, :, 3])

    def test_green(self, rgba_buffer):
        original = rgba_buffer.pixels.copy()
        GreenIsolate().apply(rgba_buffer)
        assert rgba_buffer.get_channels(0, 5) == (180, 0, 60, 0)
        assert np.array_equal(rgba_buffer.pixels[:, :, 1], original[:, :, 1])

    def test_blue(self, rgba_buffer):
        BlueIsolate().apply(rgba_buffer)
        assert rgba_buffer.get_channels(3, 3) == (180, 0, 0, 200)

    def test_argb_values(self):
        from imagefun.pixel_buffer import PixelBuffer

        buffer = PixelBuffer.from_argb([0x80123456], 1, 1)
        isolate_red(buffer)
        assert buffer.get_argb(0, 0) == 0x80120000

    def test_invalid_channel(self, rgba_buffer):
        with pytest.raises(ValueError):
            isolate_channel(rgba_buffer, 3)


class TestFilterProperties:
    """Properties shared by all color filters."""

    @pytest.mark.parametrize("filter_cls", COLOR_FILTERS)
    def test_idempotent(self, rgba_buffer, filter_cls):
        once = filter_cls().apply(rgba_buffer.copy())
        twice = filter_cls().apply(filter_cls().apply(rgba_buffer.copy()))
        assert once == twice
        assert filter_cls.is_idempotent()

    @pytest.mark.parametrize("filter_cls", COLOR_FILTERS + [TextOverlay])
    def test_dimensions_unchanged(self, rgba_buffer, filter_cls):
        instance = filter_cls(text="Hi") if filter_cls is TextOverlay else filter_cls()
        result = instance(rgba_buffer)
        assert result is rgba_buffer
        assert result.size == (30, 20)
        assert result.pixels.shape == (20, 30, 4)

    def test_released_buffer_rejected(self, rgba_buffer):
        rgba_buffer.release()
        with pytest.raises(ValueError):
            Grayscale().apply(rgba_buffer)


class TestRegistry:
    """Test filter registration, parsing and serialization."""

    def test_registered(self):
        for filter_cls in COLOR_FILTERS + [TextOverlay]:
            assert FILTER_REGISTRY[filter_cls.__name__] is filter_cls
            assert FILTER_REGISTRY[filter_cls.__name__.lower()] is filter_cls

    @pytest.mark.parametrize(
        "text,filter_cls",
        [
            ("gray", Grayscale),
            ("grey", Grayscale),
            ("Grayscale", Grayscale),
            ("red", RedIsolate),
            ("green", GreenIsolate),
            ("blue", BlueIsolate),
        ],
    )
    def test_parse_aliases(self, text, filter_cls):
        assert isinstance(Filter.parse(text), filter_cls)

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown filter"):
            Filter.parse("sepia")

    def test_parse_empty(self):
        with pytest.raises(ValueError):
            Filter.parse("   ")

    def test_parse_too_many_args(self):
        with pytest.raises(ValueError, match="Too many positional"):
            Filter.parse("gray 1")

    def test_dict_roundtrip(self):
        data = RedIsolate().to_dict()
        assert data == {'type': 'RedIsolate'}
        assert isinstance(Filter.from_dict(data), RedIsolate)

    def test_json(self):
        text = TextOverlay(text="Hello").to_json()
        assert json.loads(text)['text'] == "Hello"
        restored = Filter.from_json(text)
        assert restored == TextOverlay(text="Hello")

    def test_from_dict_unknown(self):
        with pytest.raises(ValueError, match="Unknown filter type"):
            Filter.from_dict({'type': 'Sepia'})

    def test_to_string(self):
        assert Grayscale().to_string() == 'grayscale'
        assert TextOverlay(text="a b").to_string() == "textoverlay text='a b'"

    def test_aliases_listing(self):
        aliases = get_filter_aliases()
        assert aliases['Grayscale'] == ['gray', 'grey']
        assert aliases['TextOverlay'] == ['text', 'watermark']
        assert 'FilterPipeline' not in aliases


class TestPipeline:
    """Test chaining filters."""

    def test_applied_in_order(self, rgba_buffer):
        """Red isolation after grayscale keeps the average in red only."""
        expected = rgba_buffer.copy()
        grayscale(expected)
        isolate_red(expected)
        pipeline = FilterPipeline([Grayscale(), RedIsolate()])
        assert pipeline.apply(rgba_buffer) is rgba_buffer
        assert rgba_buffer == expected

    def test_parse(self):
        pipeline = FilterPipeline.parse('gray|red; watermark "a|b; c"')
        assert [type(f) for f in pipeline] == [Grayscale, RedIsolate, TextOverlay]
        assert pipeline[2].text == "a|b; c"

    def test_parse_empty(self):
        assert len(FilterPipeline.parse('')) == 0
        assert len(FilterPipeline.parse(' | ')) == 0

    def test_serialization(self):
        pipeline = FilterPipeline.parse('blue|watermark Hi')
        restored = FilterPipeline.from_dict(pipeline.to_dict())
        assert restored == pipeline
        assert pipeline.to_string() == 'blueisolate|textoverlay text=Hi'

    def test_idempotence(self):
        assert FilterPipeline([Grayscale(), BlueIsolate()]).is_idempotent()
        assert not FilterPipeline([Grayscale(), TextOverlay(text="x")]).is_idempotent()
