"""
Transport 狀態

active_index 指向「目前啟用的順序」（隨機播放時為 shuffled，否則為 canonical），
尚未選擇曲目時為 None。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..constants import DEFAULT_VOLUME


class RepeatMode(str, Enum):
    """重複播放模式"""
    OFF = "off"    # 播完佇列就停止
    ONE = "one"    # 單曲重複
    ALL = "all"    # 整個佇列重複

    @property
    def label(self) -> str:
        return {
            RepeatMode.OFF: "關閉",
            RepeatMode.ONE: "單曲循環 🔂",
            RepeatMode.ALL: "全部循環 🔁",
        }[self]

    def cycle(self) -> "RepeatMode":
        """off → all → one → off"""
        order = [RepeatMode.OFF, RepeatMode.ALL, RepeatMode.ONE]
        return order[(order.index(self) + 1) % len(order)]


@dataclass
class TransportState:
    """
    播放狀態機的欄位

    只能由 Transport 的操作修改。
    """

    active_index: Optional[int] = None
    is_playing: bool = False
    repeat_mode: RepeatMode = RepeatMode.OFF
    shuffle_enabled: bool = False
    volume: float = DEFAULT_VOLUME
    muted: bool = False

    @property
    def has_selection(self) -> bool:
        """是否已選擇曲目"""
        return self.active_index is not None


@dataclass(frozen=True)
class TimeInfo:
    """播放進度通知的內容（duration 未知時為 0）"""
    current_time: float
    duration: float
