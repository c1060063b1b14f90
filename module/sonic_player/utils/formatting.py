"""
時間與音量的顯示格式
"""

import math
from typing import Optional, Union

from ..constants import PROGRESS_BAR_LENGTH, PROGRESS_BAR_FILLED, PROGRESS_BAR_EMPTY

Number = Union[int, float]


def _as_seconds(value: Optional[Number]) -> int:
    """轉成非負整數秒；None、負數、NaN、無限大一律視為 0"""
    if value is None or isinstance(value, bool):
        return 0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(value)


def format_time(seconds: Optional[Number]) -> str:
    """
    格式化時間為 M:SS 或 H:MM:SS

    Examples:
        format_time(83)     -> "1:23"
        format_time(3725)   -> "1:02:05"
        format_time(-1)     -> "0:00"
    """
    seconds = _as_seconds(seconds)

    if seconds >= 3600:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        return f"{hours}:{minutes:02d}:{secs:02d}"

    minutes = seconds // 60
    secs = seconds % 60
    return f"{minutes}:{secs:02d}"


def format_time_display(current: Optional[Number], duration: Optional[Number]) -> str:
    """例如：「1:23 / 3:45」"""
    return f"{format_time(current)} / {format_time(duration)}"


def format_volume(volume: Number, muted: bool = False) -> str:
    """例如：「75%」；靜音時顯示「靜音」"""
    if muted:
        return "靜音"
    volume = max(0.0, min(1.0, float(volume)))
    return f"{round(volume * 100)}%"


def progress_bar(current: Optional[Number], total: Optional[Number], length: int = PROGRESS_BAR_LENGTH) -> str:
    """
    建立進度條

    Returns:
        例如：「▓▓▓▓▓▓░░░░░░░░░」
    """
    current = _as_seconds(current)
    total = _as_seconds(total)

    if total <= 0:
        return PROGRESS_BAR_EMPTY * length

    filled = min(int((current / total) * length), length)
    return PROGRESS_BAR_FILLED * filled + PROGRESS_BAR_EMPTY * (length - filled)
