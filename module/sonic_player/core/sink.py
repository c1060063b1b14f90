"""
媒體輸出端介面

Transport 是唯一下達指令的一方，媒體輸出端是唯一產生播放事件的一方。
事件依產生順序放進同一個 asyncio.Queue，由 Transport 的單一分派任務依序處理。
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..audio.analysis import AnalysisTap


class SinkEventType(str, Enum):
    """播放生命週期事件"""
    LOADED = "loaded"              # 已載入串流（duration 可能已知）
    STARTED = "started"            # 開始或恢復播放
    PAUSED = "paused"              # 暫停或停止
    TIME_UPDATED = "time_updated"  # 播放進度
    ENDED = "ended"                # 自然播放結束
    ERROR = "error"                # 載入或解碼失敗


@dataclass(frozen=True)
class SinkEvent:
    type: SinkEventType
    position: float = 0.0
    duration: Optional[float] = None
    error: Optional[Exception] = None


class MediaSink(ABC):
    """
    媒體輸出端基類

    子類別需實作播放指令與 position / duration / muted 屬性，
    並透過 emit() 回報事件。
    """

    def __init__(self):
        self._events: asyncio.Queue = asyncio.Queue()
        self._analysis_tap: Optional[AnalysisTap] = None

    # === 事件通道 ===

    def emit(self, event: SinkEvent) -> None:
        """回報事件（只能在事件循環執行緒中呼叫）"""
        self._events.put_nowait(event)

    async def next_event(self) -> SinkEvent:
        """等待下一個事件"""
        return await self._events.get()

    def pending_events(self) -> int:
        """尚未處理的事件數量"""
        return self._events.qsize()

    # === 分析接點 ===

    def get_analyser(self) -> AnalysisTap:
        """取得分析接點（第一次呼叫時建立，之後都回傳同一個）"""
        if self._analysis_tap is None:
            self._analysis_tap = self._create_analysis_tap()
        return self._analysis_tap

    def _create_analysis_tap(self) -> AnalysisTap:
        return AnalysisTap()

    # === 環境 ===

    async def ensure_ready(self) -> None:
        """
        確認音訊環境可用（每次 play / play_index 前呼叫）

        不可用時應拋出 SinkUnavailableError。
        """
        return None

    # === 播放指令 ===

    @abstractmethod
    async def load(self, locator: str, duration: Optional[float] = None) -> None:
        """載入串流位址，失敗時拋出 TrackLoadError"""

    @abstractmethod
    async def play(self) -> None:
        """開始或恢復播放，失敗時拋出 PlaybackError"""

    @abstractmethod
    def pause(self) -> None:
        """暫停"""

    @abstractmethod
    def stop(self) -> None:
        """暫停並回到開頭"""

    @abstractmethod
    def seek(self, seconds: float) -> None:
        """跳到指定秒數"""

    @abstractmethod
    def set_volume(self, volume: float) -> None:
        """設定音量（0.0 ~ 1.0）"""

    @abstractmethod
    def set_muted(self, muted: bool) -> None:
        """設定靜音"""

    # === 狀態 ===

    @property
    @abstractmethod
    def position(self) -> float:
        """目前播放位置（秒）"""

    @property
    @abstractmethod
    def duration(self) -> Optional[float]:
        """目前曲目長度（秒），未知為 None"""

    @property
    @abstractmethod
    def muted(self) -> bool:
        """是否靜音"""
