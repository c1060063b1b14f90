"""Shared fixtures: a scripted in-memory media sink, track factories and a seeded RNG."""

import asyncio
import random
from typing import Dict, Optional, Set

import pytest

from module.sonic_player.core import (
    MediaSink,
    Notifier,
    SinkEvent,
    SinkEventType,
    Track,
    Transport,
)
from module.sonic_player.utils.errors import MusicError, TrackLoadError


class FakeSink(MediaSink):
    """
    In-memory sink that records every command and emits the same events a real
    sink would. Failures and blocking loads are scripted per locator.
    """

    def __init__(self):
        super().__init__()
        self.calls = []
        self.loaded: Optional[str] = None
        self.playing = False
        self.volume = 1.0
        self._position = 0.0
        self._duration: Optional[float] = None
        self._muted = False

        self.fail_locators: Set[str] = set()
        self.play_error: Optional[MusicError] = None
        self.ready_error: Optional[MusicError] = None
        self.gates: Dict[str, asyncio.Event] = {}

    async def ensure_ready(self) -> None:
        if self.ready_error is not None:
            raise self.ready_error

    async def load(self, locator: str, duration: Optional[float] = None) -> None:
        self.calls.append(("load", locator))
        gate = self.gates.get(locator)
        if gate is not None:
            await gate.wait()
        if locator in self.fail_locators:
            raise TrackLoadError(f"cannot load {locator}", locator=locator)
        self.loaded = locator
        self._duration = duration
        self._position = 0.0
        self.emit(SinkEvent(SinkEventType.LOADED, duration=duration))

    async def play(self) -> None:
        self.calls.append(("play", self.loaded))
        if self.play_error is not None:
            raise self.play_error
        self.playing = True
        self.emit(SinkEvent(SinkEventType.STARTED, position=self._position, duration=self._duration))

    def pause(self) -> None:
        self.calls.append(("pause",))
        if self.playing:
            self.playing = False
            self.emit(SinkEvent(SinkEventType.PAUSED, position=self._position, duration=self._duration))

    def stop(self) -> None:
        self.calls.append(("stop",))
        self._position = 0.0
        if self.playing:
            self.playing = False
            self.emit(SinkEvent(SinkEventType.PAUSED, duration=self._duration))

    def seek(self, seconds: float) -> None:
        self.calls.append(("seek", seconds))
        self._position = seconds

    def set_volume(self, volume: float) -> None:
        self.calls.append(("volume", volume))
        self.volume = volume

    def set_muted(self, muted: bool) -> None:
        self.calls.append(("muted", muted))
        self._muted = muted

    @property
    def position(self) -> float:
        return self._position

    @position.setter
    def position(self, value: float) -> None:
        self._position = value

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def muted(self) -> bool:
        return self._muted

    # === test helpers ===

    def finish(self) -> None:
        """Simulate the current track reaching its natural end."""
        self.playing = False
        self._position = self._duration or 0.0
        self.emit(SinkEvent(SinkEventType.ENDED, position=self._position, duration=self._duration))

    def commands(self, name: str) -> list:
        return [call for call in self.calls if call[0] == name]

    async def deliver(self, transport: Transport) -> None:
        """Hand every queued event to the transport, including ones emitted while handling."""
        while self.pending_events():
            event = await self.next_event()
            await transport.handle_event(event)


def make_track(track_id: str, duration: Optional[float] = 180.0, locator: Optional[str] = None) -> Track:
    return Track(
        id=track_id,
        title=f"Title {track_id}",
        locator=f"stream://{track_id}" if locator is None else locator,
        artist="Artist",
        album="Album",
        duration=duration,
    )


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def sink():
    return FakeSink()


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def transport(sink, notifier, rng):
    return Transport(sink, notifier=notifier, rng=rng)


@pytest.fixture
def abc_tracks():
    return [make_track("A"), make_track("B"), make_track("C")]
