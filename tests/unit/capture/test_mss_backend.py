"""Unit tests for the mss frame source backend (mss is mocked)."""

from unittest.mock import MagicMock, patch

import pytest
from mss.exception import ScreenShotError

from screenlapse.capture.mss_backend import MSS_CHANNEL_ORDER, MssFrameSource, MssSourceProvider
from screenlapse.capture.transcode import transcode
from screenlapse.core.errors import NoDisplaysFoundError, SourceFatalError


def _mock_mss(monitors=None, shot=None, grab_error=None):
    sct = MagicMock()
    sct.monitors = monitors if monitors is not None else []
    if grab_error is not None:
        sct.grab.side_effect = grab_error
    else:
        sct.grab.return_value = shot
    factory = MagicMock()
    factory.return_value.__enter__.return_value = sct
    factory.return_value.__exit__.return_value = False
    return factory, sct


def _shot(width, height, raw):
    shot = MagicMock()
    shot.width = width
    shot.height = height
    shot.raw = bytearray(raw)
    return shot


ALL = {"left": 0, "top": 0, "width": 3200, "height": 1080}
LEFT = {"left": 0, "top": 0, "width": 1920, "height": 1080}
RIGHT = {"left": 1920, "top": 0, "width": 1280, "height": 1024}


class TestMssSourceProvider:

    def test_skips_combined_monitor_and_keeps_order(self):
        factory, _ = _mock_mss(monitors=[ALL, LEFT, RIGHT])
        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            sources = MssSourceProvider().list_sources()

        assert [s.display.width for s in sources] == [1920, 1280]
        assert [s.display.index for s in sources] == [0, 1]
        assert sources[1].display.left == 1920
        assert sources[0].display.primary is True

    def test_no_monitors_is_fatal(self):
        factory, _ = _mock_mss(monitors=[ALL])
        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            with pytest.raises(NoDisplaysFoundError):
                MssSourceProvider().list_sources()

    def test_enumeration_error_is_no_displays(self):
        factory = MagicMock(side_effect=ScreenShotError("no X server"))
        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            with pytest.raises(NoDisplaysFoundError):
                MssSourceProvider().list_sources()

    def test_enumerates_afresh_each_call(self):
        factory, sct = _mock_mss(monitors=[ALL, LEFT])
        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            provider = MssSourceProvider()
            assert len(provider.list_sources()) == 1
            sct.monitors = [ALL, LEFT, RIGHT]
            assert len(provider.list_sources()) == 2


class TestMssFrameSource:

    def _source(self):
        factory, _ = _mock_mss(monitors=[ALL, RIGHT])
        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            return MssSourceProvider().list_sources()[0]

    def test_poll_returns_bgra_frame_with_derived_stride(self):
        source = self._source()
        # 2x2 BGRA with 8 bytes of row padding
        row = bytes([10, 20, 30, 0, 10, 20, 30, 0]) + bytes(8)
        factory, sct = _mock_mss(shot=_shot(2, 2, row * 2))

        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            frame = source.poll()

        region = sct.grab.call_args[0][0]
        assert region == {"left": 1920, "top": 0, "width": 1280, "height": 1024}
        assert frame.channel_order == MSS_CHANNEL_ORDER
        assert frame.stride == 16
        assert tuple(transcode(frame).pixels[1, 1]) == (30, 20, 10, 255)

    def test_grab_error_is_source_fatal(self):
        source = self._source()
        factory, _ = _mock_mss(grab_error=ScreenShotError("XGetImage failed"))

        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            with pytest.raises(SourceFatalError) as excinfo:
                source.poll()

        assert excinfo.value.source == source.name

    def test_empty_frame_is_source_fatal(self):
        source = self._source()
        factory, _ = _mock_mss(shot=_shot(0, 0, b""))

        with patch("screenlapse.capture.mss_backend.mss.mss", factory):
            with pytest.raises(SourceFatalError):
                source.poll()

    def test_is_frame_source(self):
        assert isinstance(self._source(), MssFrameSource)


@pytest.mark.hardware
def test_real_screen_capture():
    sources = MssSourceProvider().list_sources()
    image = transcode(sources[0].poll())
    assert image.width == sources[0].display.width
    assert (image.pixels[..., 3] == 255).all()
