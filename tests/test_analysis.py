from array import array
import sys

from module.sonic_player.audio.analysis import AnalysisTap


def pcm(*samples):
    data = array("h", samples)
    if sys.byteorder == "big":
        data.byteswap()
    return data.tobytes()


def test_feed_keeps_rolling_window():
    tap = AnalysisTap(fft_size=4, smoothing=0.0)

    tap.feed(pcm(0, 16384, -16384))
    tap.feed(pcm(32767, 0))

    samples = tap.latest_samples()
    assert len(samples) == 4
    assert samples[0] == 16384 / 32768
    assert tap.frames_seen == 2


def test_level_is_smoothed():
    tap = AnalysisTap(fft_size=16, smoothing=0.5)

    tap.feed(pcm(-32768))
    assert tap.level == 0.5

    tap.feed(pcm(0))
    assert tap.level == 0.25


def test_empty_and_odd_frames():
    tap = AnalysisTap(fft_size=8)

    tap.feed(b"")
    tap.feed(pcm(100) + b"\x01")

    assert tap.frames_seen == 1
    assert len(tap.latest_samples()) == 1


def test_reset():
    tap = AnalysisTap(fft_size=8)
    tap.feed(pcm(1000, 2000))

    tap.reset()

    assert tap.latest_samples() == []
    assert tap.level == 0.0


def test_sink_creates_tap_lazily(sink):
    assert sink._analysis_tap is None

    tap = sink.get_analyser()

    assert tap is sink.get_analyser()
    assert tap.fft_size == 2048
    assert tap.smoothing == 0.8
