"""
播放器設定

從環境變數讀取（main.py 會先用 python-dotenv 載入 .env）。
"""

import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import DEFAULT_VOLUME
from .utils.errors import ConfigError


def _as_bool(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def _as_float(value: Optional[str], default: float) -> float:
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if math.isfinite(result) else default


def _as_int(value: Optional[str], default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class PlayerSettings:
    server_url: str = ""
    username: str = ""
    password: str = ""
    ffmpeg_path: Optional[str] = None
    default_volume: float = DEFAULT_VOLUME
    max_bitrate: int = 0              # kbps，0 表示使用伺服器預設
    stream_format: Optional[str] = None
    debug: bool = False

    @property
    def is_configured(self) -> bool:
        """Subsonic 連線資訊是否齊全"""
        return bool(self.server_url and self.username and self.password)

    def require_configured(self) -> "PlayerSettings":
        if not self.is_configured:
            missing = [
                name for name, value in (
                    ("SUBSONIC_URL", self.server_url),
                    ("SUBSONIC_USERNAME", self.username),
                    ("SUBSONIC_PASSWORD", self.password),
                ) if not value
            ]
            raise ConfigError(f"缺少設定: {', '.join(missing)}")
        return self


def load_settings(environ: Optional[Mapping[str, str]] = None) -> PlayerSettings:
    """
    從環境變數建立設定

    Args:
        environ: 測試時可傳入自訂的環境變數，預設為 os.environ
    """
    env = os.environ if environ is None else environ

    volume = _as_float(env.get("DEFAULT_VOLUME"), DEFAULT_VOLUME)

    return PlayerSettings(
        server_url=(env.get("SUBSONIC_URL") or "").strip().rstrip("/"),
        username=env.get("SUBSONIC_USERNAME") or "",
        password=env.get("SUBSONIC_PASSWORD") or "",
        ffmpeg_path=env.get("FFMPEG_PATH") or None,
        default_volume=max(0.0, min(1.0, volume)),
        max_bitrate=max(0, _as_int(env.get("STREAM_MAX_BITRATE"), 0)),
        stream_format=env.get("STREAM_FORMAT") or None,
        debug=_as_bool(env.get("DEBUG")),
    )
