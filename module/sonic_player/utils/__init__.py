# Utils module
from .errors import (
    MusicError,
    PlaybackError,
    TrackLoadError,
    SinkUnavailableError,
    QueueError,
    QueueEmptyError,
    CatalogError,
    SubsonicAPIError,
    ConfigError,
)
from .decorators import log_operation, cooldown
from .formatting import format_time, format_time_display, format_volume, progress_bar

__all__ = [
    # Errors
    "MusicError",
    "PlaybackError",
    "TrackLoadError",
    "SinkUnavailableError",
    "QueueError",
    "QueueEmptyError",
    "CatalogError",
    "SubsonicAPIError",
    "ConfigError",
    # Decorators
    "log_operation",
    "cooldown",
    # Formatting
    "format_time",
    "format_time_display",
    "format_volume",
    "progress_bar",
]
