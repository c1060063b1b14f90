"""
播放時鐘

以時間戳計算播放位置而非累加，確保暫停/恢復/跳轉後時間正確。
FFmpeg 串流本身不回報位置，媒體輸出端以此推算。
"""

import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PlaybackClock:
    """
    播放位置追蹤

    使用方式：
        clock = PlaybackClock()
        clock.start(offset=30.0)   # 從 30 秒開始播放

        clock.position             # 例如 42.5
        clock.pause()
        clock.resume()
        clock.seek(10.0)
        clock.stop()               # 停止並回到 0
    """

    is_running: bool = False
    is_paused: bool = False

    # 私有屬性用於時間計算
    _offset: float = field(default=0.0, repr=False)
    _start_time: float = field(default=0.0, repr=False)
    _pause_start: float = field(default=0.0, repr=False)
    _total_paused: float = field(default=0.0, repr=False)

    def start(self, offset: float = 0.0) -> None:
        """從 offset 秒開始計時"""
        self.is_running = True
        self.is_paused = False
        self._offset = max(0.0, offset)
        self._start_time = time.monotonic()
        self._pause_start = 0.0
        self._total_paused = 0.0

    def pause(self) -> bool:
        """
        暫停計時

        Returns:
            是否成功暫停（未計時或已暫停則返回 False）
        """
        if self.is_running and not self.is_paused:
            self.is_paused = True
            self._pause_start = time.monotonic()
            return True
        return False

    def resume(self) -> bool:
        """
        恢復計時

        Returns:
            是否成功恢復（未暫停則返回 False）
        """
        if self.is_paused:
            self.is_paused = False
            self._total_paused += time.monotonic() - self._pause_start
            return True
        return False

    def seek(self, position: float) -> None:
        """跳到指定位置，保留目前的計時/暫停狀態"""
        paused = self.is_paused
        running = self.is_running
        self.start(offset=position)
        if not running:
            self.is_running = False
        elif paused:
            self.pause()

    def stop(self, position: float = 0.0) -> None:
        """停止計時，位置固定為 position"""
        self.is_running = False
        self.is_paused = False
        self._offset = max(0.0, position)
        self._start_time = 0.0
        self._pause_start = 0.0
        self._total_paused = 0.0

    @property
    def position(self) -> float:
        """
        即時計算目前位置（秒）
        """
        if not self.is_running:
            return self._offset

        if self.is_paused:
            elapsed = self._pause_start - self._start_time - self._total_paused
        else:
            elapsed = time.monotonic() - self._start_time - self._total_paused

        return self._offset + max(0.0, elapsed)

    def clamped(self, duration: Optional[float]) -> float:
        """位置限制在 [0, duration]（duration 未知時只限制下限）"""
        position = max(0.0, self.position)
        if duration is not None and duration > 0:
            return min(position, duration)
        return position
