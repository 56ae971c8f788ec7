"""
Tests for the editing session.
"""

import logging

import numpy as np
import PIL.Image
import pytest

from conftest import png_header_only
from imagefun.errors import WriteFailure
from imagefun.export import PNG_MIME_TYPE
from imagefun.filters import Grayscale
from imagefun.session import EditorSession


class RecordingShareTarget:
    def __init__(self):
        self.sent = []

    def send(self, path, mime_type):
        self.sent.append((path, mime_type))


@pytest.fixture
def session(tmp_path):
    with EditorSession(
        display_width=100,
        display_height=100,
        pictures_dir=tmp_path / "Pictures",
        share_target=RecordingShareTarget(),
    ) as session:
        yield session


def test_open_downsamples_to_display(session, image_file):
    assert session.open(image_file)
    assert session.has_image
    assert session.buffer.size == (100, 75)
    assert session.source == image_file


def test_open_missing_file(session, tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        assert not session.open(tmp_path / "missing.png")
    assert not session.has_image
    assert "cannot open image" in caplog.text


def test_open_corrupt_data(session, caplog):
    with caplog.at_level(logging.ERROR):
        assert not session.open(b"definitely not an image")
    assert "cannot make mutable bitmap" in caplog.text


def test_failed_open_keeps_image(session, image_file, png_data):
    assert session.open(image_file)
    buffer = session.buffer
    assert not session.open(png_data[:40])
    assert session.buffer is buffer
    assert session.has_image



def test_oversized_image_is_rejected(session, image_file, caplog):
    assert session.open(image_file)
    buffer = session.buffer
    with caplog.at_level(logging.ERROR):
        assert not session.open(png_header_only(20000, 20000))
    assert "cannot make mutable bitmap" in caplog.text
    assert session.buffer is buffer
    assert session.has_image

def test_failed_open_discards_image(tmp_path, image_file):
    with EditorSession(
        display_width=100,
        display_height=100,
        pictures_dir=tmp_path,
        keep_image_on_failed_load=False,
    ) as session:
        assert session.open(image_file)
        buffer = session.buffer
        assert not session.open(b"broken")
        assert session.buffer is None
        assert buffer.is_released


def test_reopen_releases_previous(session, image_file, png_data):
    assert session.open(image_file)
    first = session.buffer
    assert session.open(png_data)
    assert first.is_released
    assert session.buffer is not first


def test_operations_without_image(session):
    assert not session.grayscale()
    assert not session.red_filter()
    assert not session.green_filter()
    assert not session.blue_filter()
    assert not session.watermark("Hello")
    assert session.save() is None
    assert session.share() is None
    assert session.share_target.sent == []


def test_filters(session, image_file):
    assert session.open(image_file)
    assert session.grayscale()
    pixels = session.buffer.pixels
    assert np.array_equal(pixels[:, :, 0], pixels[:, :, 1])

    assert session.open(image_file)
    assert session.blue_filter()
    assert np.all(session.buffer.pixels[:, :, :2] == 0)


def test_apply_filter_string(session, image_file):
    assert session.open(image_file)
    assert session.apply("gray|green")
    pixels = session.buffer.pixels
    assert np.all(pixels[:, :, 0] == 0)
    assert np.all(pixels[:, :, 2] == 0)
    assert np.any(pixels[:, :, 1] > 0)



def test_apply_invalid_filter_string(session, png_data, caplog):
    assert session.open(png_data)
    original = session.buffer.copy()
    with caplog.at_level(logging.ERROR):
        assert not session.apply("sepia")
        assert not session.apply("gray 1")
        assert not session.apply('watermark text=""')
    assert "cannot apply filter" in caplog.text
    assert session.buffer == original
    assert session.has_image

def test_empty_watermark_is_ignored(session, image_file):
    assert session.open(image_file)
    original = session.buffer.copy()
    assert not session.watermark("")
    assert session.buffer == original


def test_save(session, image_file, tmp_path):
    saved = []
    session.media_listeners.append(saved.append)
    assert session.open(image_file)
    session.red_filter()
    path = session.save()
    assert path is not None
    assert path.parent == tmp_path / "Pictures"
    assert path.name.startswith("ImageFun_") and path.suffix == ".png"
    assert session.saved_path == path
    assert saved == [path]
    with PIL.Image.open(path) as image:
        assert image.size == (100, 75)
        assert np.array_equal(np.asarray(image), session.buffer.pixels)



def test_failing_media_listener(session, image_file, caplog):
    def broken(path):
        raise RuntimeError("media index unavailable")

    saved = []
    session.media_listeners.extend([broken, saved.append])
    assert session.open(image_file)
    with caplog.at_level(logging.ERROR):
        path = session.share()
    assert path is not None and path.exists()
    assert saved == [path]
    assert "media index unavailable" in caplog.text
    assert session.share_target.sent == [(path, PNG_MIME_TYPE)]

def test_save_failure(session, image_file, monkeypatch, caplog):
    def fail(*args, **kwargs):
        raise WriteFailure("disk full")

    monkeypatch.setattr("imagefun.session.write_export", fail)
    assert session.open(image_file)
    with caplog.at_level(logging.ERROR):
        assert session.save() is None
    assert "cannot save bitmap" in caplog.text
    assert session.saved_path is None
    assert session.has_image


def test_share(session, image_file):
    assert session.open(image_file)
    path = session.share()
    assert path is not None and path.exists()
    assert session.share_target.sent == [(path, PNG_MIME_TYPE)]


def test_share_without_target(tmp_path, image_file, caplog):
    with EditorSession(pictures_dir=tmp_path) as session:
        assert session.open(image_file)
        with caplog.at_level(logging.WARNING):
            path = session.share()
    assert path is not None
    assert "No share target" in caplog.text


def test_close(session, image_file):
    assert session.open(image_file)
    buffer = session.buffer
    session.close()
    assert buffer.is_released
    assert not session.has_image
    assert not session.apply(Grayscale())
