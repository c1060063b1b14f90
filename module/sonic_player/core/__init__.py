# Core module
from .queue import PlaybackQueue, Track, shuffle_tracks
from .state import TransportState, RepeatMode, TimeInfo
from .notifier import Notifier
from .sink import MediaSink, SinkEvent, SinkEventType
from .transport import Transport

__all__ = [
    "PlaybackQueue",
    "Track",
    "shuffle_tracks",
    "TransportState",
    "RepeatMode",
    "TimeInfo",
    "Notifier",
    "MediaSink",
    "SinkEvent",
    "SinkEventType",
    "Transport",
]
