"""VoiceClientSink with FFmpeg and the Discord voice client replaced by in-memory doubles."""

import asyncio

import discord
import pytest

from conftest import make_track
from module.sonic_player.audio.analysis import AnalysisTap
from module.sonic_player.audio.voice_sink import TappedSource, VoiceClientSink
from module.sonic_player.core import SinkEventType, Transport
from module.sonic_player.utils.errors import PlaybackError, SinkUnavailableError, TrackLoadError


class FakeAudio(discord.AudioSource):
    instances = []

    def __init__(self, source, *, executable="ffmpeg", before_options=None, options=None, frames=None):
        self.source = source
        self.executable = executable
        self.before_options = before_options
        self.options = options
        self.frames = list(frames or [])
        self.cleaned_up = False
        FakeAudio.instances.append(self)

    def read(self):
        return self.frames.pop(0) if self.frames else b""

    def is_opus(self):
        return False

    def cleanup(self):
        self.cleaned_up = True


class FakeVoiceClient:
    def __init__(self):
        self.connected = True
        self.source = None
        self.after = None
        self._playing = False
        self._paused = False

    def is_connected(self):
        return self.connected

    def is_playing(self):
        return self._playing

    def is_paused(self):
        return self._paused

    def play(self, source, *, after=None):
        if self._playing or self._paused:
            raise discord.ClientException("Already playing audio.")
        self.source = source
        self.after = after
        self._playing = True

    def pause(self):
        self._playing = False
        self._paused = True

    def resume(self):
        self._playing = True
        self._paused = False

    def stop(self):
        self._playing = False
        self._paused = False
        after, self.after = self.after, None
        if after:
            after(None)

    def finish(self, error=None):
        """Simulate the audio thread reaching the end of the stream."""
        self._playing = False
        after, self.after = self.after, None
        after(error)


@pytest.fixture(autouse=True)
def fake_ffmpeg(monkeypatch):
    FakeAudio.instances = []
    monkeypatch.setattr(discord, "FFmpegPCMAudio", FakeAudio)
    return FakeAudio


@pytest.fixture
def voice_client():
    return FakeVoiceClient()


async def drain(sink):
    await asyncio.sleep(0)
    events = []
    while sink.pending_events():
        events.append(await sink.next_event())
    return events


def types(events):
    return [event.type for event in events]


@pytest.mark.anyio
async def test_ensure_ready_requires_connected_client(voice_client):
    sink = VoiceClientSink()

    with pytest.raises(SinkUnavailableError):
        await sink.ensure_ready()

    sink.set_voice_client(voice_client)
    await sink.ensure_ready()

    voice_client.connected = False
    with pytest.raises(SinkUnavailableError):
        await sink.ensure_ready()


class FakeChannel:
    """Voice channel whose connect() hands out a fresh FakeVoiceClient."""

    def __init__(self, error=None):
        self.error = error
        self.connects = 0

    async def connect(self, *, timeout=60.0, reconnect=True):
        self.connects += 1
        if self.error is not None:
            raise self.error
        client = FakeVoiceClient()
        client.channel = self
        return client

    def __str__(self):
        return "General"


async def pump(sink, transport):
    for event in await drain(sink):
        await transport.handle_event(event)


@pytest.mark.anyio
async def test_disconnect_while_playing_clears_is_playing(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    transport = Transport(sink)
    transport.set_queue([make_track("A", duration=100)])
    await transport.play_index(0)
    await pump(sink, transport)
    assert transport.is_playing is True

    sink.set_voice_client(None)
    events = await drain(sink)

    assert types(events) == [SinkEventType.PAUSED]
    for event in events:
        await transport.handle_event(event)
    assert transport.is_playing is False

    # no remembered channel, so resuming fails and playback stays paused
    await transport.toggle_play()
    await pump(sink, transport)
    assert transport.is_playing is False


@pytest.mark.anyio
async def test_disconnect_while_idle_emits_nothing(voice_client):
    sink = VoiceClientSink(voice_client=voice_client)
    await sink.load("stream://a", duration=100)
    await drain(sink)

    sink.set_voice_client(None)

    assert await drain(sink) == []


@pytest.mark.anyio
async def test_ensure_ready_reconnects_to_last_channel(voice_client):
    channel = FakeChannel()
    voice_client.channel = channel
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()
    await drain(sink)

    sink.set_voice_client(None, keep_channel=True)
    await sink.ensure_ready()

    assert channel.connects == 1
    assert sink.voice_client is not voice_client
    assert sink.is_connected

    await sink.play()
    assert sink.voice_client.is_playing()
    assert types(await drain(sink))[-1] is SinkEventType.STARTED
    sink.stop()


@pytest.mark.anyio
async def test_ensure_ready_reconnect_failure_raises(voice_client):
    channel = FakeChannel(error=asyncio.TimeoutError())
    voice_client.channel = channel
    sink = VoiceClientSink(voice_client=voice_client)

    sink.set_voice_client(None, keep_channel=True)
    with pytest.raises(SinkUnavailableError):
        await sink.ensure_ready()
    assert channel.connects == 1


@pytest.mark.anyio
async def test_manual_leave_forgets_channel(voice_client):
    channel = FakeChannel()
    voice_client.channel = channel
    sink = VoiceClientSink(voice_client=voice_client)

    sink.set_voice_client(None)
    with pytest.raises(SinkUnavailableError):
        await sink.ensure_ready()
    assert channel.connects == 0

@pytest.mark.anyio
async def test_load_and_play_start_ffmpeg_source(voice_client):
    sink = VoiceClientSink(ffmpeg_path="/opt/ffmpeg", voice_client=voice_client, time_update_interval=60)

    await sink.load("https://music/stream?id=1", duration=200)
    await sink.play()

    assert types(await drain(sink)) == [SinkEventType.LOADED, SinkEventType.STARTED]
    audio = FakeAudio.instances[0]
    assert audio.source == "https://music/stream?id=1"
    assert audio.executable == "/opt/ffmpeg"
    assert audio.before_options is None
    assert audio.options == "-vn"
    assert isinstance(voice_client.source, TappedSource)
    assert sink.duration == 200
    sink.stop()


@pytest.mark.anyio
async def test_play_without_load_fails(voice_client):
    sink = VoiceClientSink(voice_client=voice_client)

    with pytest.raises(PlaybackError):
        await sink.play()


@pytest.mark.anyio
async def test_pause_and_resume_reuse_source(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()
    await drain(sink)

    sink.pause()
    await sink.play()

    assert types(await drain(sink)) == [SinkEventType.PAUSED, SinkEventType.STARTED]
    assert len(FakeAudio.instances) == 1
    sink.stop()


@pytest.mark.anyio
async def test_seek_while_playing_restarts_at_offset(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()
    await drain(sink)

    sink.seek(30)
    events = await drain(sink)

    assert types(events) == [SinkEventType.TIME_UPDATED]
    assert events[0].position == 30
    assert FakeAudio.instances[-1].before_options == "-ss 30.000"
    assert voice_client.is_playing()
    assert sink.position >= 30
    sink.stop()


@pytest.mark.anyio
async def test_seek_is_clamped_to_duration(voice_client):
    sink = VoiceClientSink(voice_client=voice_client)
    await sink.load("stream://a", duration=100)

    sink.seek(500)
    assert sink.position == 100

    sink.seek(-5)
    assert sink.position == 0


@pytest.mark.anyio
async def test_seek_while_paused_resumes_from_new_position(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()
    sink.pause()
    await drain(sink)

    sink.seek(42)
    await sink.play()

    assert FakeAudio.instances[-1].before_options == "-ss 42.000"
    assert types(await drain(sink))[-1] is SinkEventType.STARTED
    sink.stop()


@pytest.mark.anyio
async def test_natural_end_emits_paused_then_ended(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()
    await drain(sink)

    voice_client.finish()
    events = await drain(sink)

    assert types(events) == [SinkEventType.PAUSED, SinkEventType.ENDED]
    assert events[-1].position == 100


@pytest.mark.anyio
async def test_stream_error_emits_error_event(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()
    await drain(sink)

    voice_client.finish(RuntimeError("ffmpeg exited"))
    events = await drain(sink)

    assert types(events) == [SinkEventType.ERROR]
    assert isinstance(events[0].error, PlaybackError)


@pytest.mark.anyio
async def test_superseded_source_does_not_end_track(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a", duration=100)
    await sink.play()

    await sink.load("stream://b", duration=50)
    events = await drain(sink)

    assert SinkEventType.ENDED not in types(events)
    assert types(events)[-1] is SinkEventType.LOADED


@pytest.mark.anyio
async def test_volume_and_mute_reach_transformer(voice_client):
    sink = VoiceClientSink(voice_client=voice_client, time_update_interval=60)
    await sink.load("stream://a")
    await sink.play()
    transformer = voice_client.source.original

    sink.set_volume(0.4)
    assert transformer.volume == pytest.approx(0.4)

    sink.set_muted(True)
    assert sink.muted is True
    assert transformer.volume == 0

    sink.set_muted(False)
    assert transformer.volume == pytest.approx(0.4)
    sink.stop()


@pytest.mark.anyio
async def test_ffmpeg_failure_raises_track_load_error(voice_client, monkeypatch):
    def broken(*args, **kwargs):
        raise discord.ClientException("ffmpeg was not found.")

    monkeypatch.setattr(discord, "FFmpegPCMAudio", broken)
    sink = VoiceClientSink(voice_client=voice_client)
    await sink.load("stream://a")

    with pytest.raises(TrackLoadError) as exc_info:
        await sink.play()

    assert exc_info.value.locator == "stream://a"


def test_tapped_source_feeds_tap_when_present():
    tap = AnalysisTap(fft_size=8)
    holder = {"tap": None}
    original = FakeAudio("x", frames=[b"\x00\x10" * 4, b"\x00\x20" * 4])
    source = TappedSource(original, lambda: holder["tap"])

    assert source.read() == b"\x00\x10" * 4
    assert tap.frames_seen == 0

    holder["tap"] = tap
    source.read()
    assert tap.frames_seen == 1

    source.cleanup()
    assert original.cleaned_up is True
