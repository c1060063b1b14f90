"""
Subsonic 播放器模組

以單一事件循環驅動的播放狀態機，提供:
- 加入順序與隨機順序並存的佇列
- 重複模式（關閉 / 單曲 / 全部）
- 可替換的媒體輸出端（Discord 語音客戶端）
- Subsonic 目錄客戶端
"""

# Core
from .core.queue import PlaybackQueue, Track, shuffle_tracks
from .core.state import TransportState, RepeatMode, TimeInfo
from .core.notifier import Notifier
from .core.sink import MediaSink, SinkEvent, SinkEventType
from .core.transport import Transport

# Audio
from .audio.analysis import AnalysisTap
from .audio.clock import PlaybackClock
from .audio.ffmpeg import find_ffmpeg
from .audio.voice_sink import VoiceClientSink

# Catalog
from .catalog.subsonic import SubsonicClient

# Config
from .config import PlayerSettings, load_settings

# UI
from .ui.embeds import EmbedBuilder
from .ui.buttons import PlayerControlView, PaginationView, create_player_view

# Utils
from .utils.errors import (
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
from .utils.decorators import cooldown, log_operation
from .utils.formatting import format_time, format_time_display, format_volume, progress_bar

# Constants
from .constants import (
    PLAYLIST_PER_PAGE,
    EMBED_UPDATE_INTERVAL,
    BUTTON_COOLDOWN,
    AUTOCOMPLETE_LIMIT,
    SEEK_STEP,
    VOLUME_STEP,
)

__all__ = [
    # Core
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
    # Audio
    "AnalysisTap",
    "PlaybackClock",
    "find_ffmpeg",
    "VoiceClientSink",
    # Catalog
    "SubsonicClient",
    # Config
    "PlayerSettings",
    "load_settings",
    # UI
    "EmbedBuilder",
    "PlayerControlView",
    "PaginationView",
    "create_player_view",
    # Utils
    "MusicError",
    "PlaybackError",
    "TrackLoadError",
    "SinkUnavailableError",
    "QueueError",
    "QueueEmptyError",
    "CatalogError",
    "SubsonicAPIError",
    "ConfigError",
    "cooldown",
    "log_operation",
    "format_time",
    "format_time_display",
    "format_volume",
    "progress_bar",
    # Constants
    "PLAYLIST_PER_PAGE",
    "EMBED_UPDATE_INTERVAL",
    "BUTTON_COOLDOWN",
    "AUTOCOMPLETE_LIMIT",
    "SEEK_STEP",
    "VOLUME_STEP",
]
