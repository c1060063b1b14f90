"""
音訊分析接點

從音訊執行緒接收 PCM 幀（16-bit signed little-endian），保留最近的取樣視窗
與平滑後的峰值，供視覺化使用。播放器核心只負責提供這個物件，不讀取其資料。
"""

import sys
import threading
from array import array
from collections import deque
from typing import List

from ..constants import ANALYSER_FFT_SIZE, ANALYSER_SMOOTHING

_SAMPLE_MAX = 32768.0


class AnalysisTap:
    """
    分析接點

    使用方式：
        tap = sink.get_analyser()
        samples = tap.latest_samples()   # 最近 fft_size 個取樣（-1.0 ~ 1.0）
        level = tap.level                # 平滑後的峰值（0.0 ~ 1.0）
    """

    def __init__(self, fft_size: int = ANALYSER_FFT_SIZE, smoothing: float = ANALYSER_SMOOTHING):
        self.fft_size = fft_size
        self.smoothing = smoothing
        self._samples: deque = deque(maxlen=fft_size)
        self._level = 0.0
        self._frames_seen = 0
        self._lock = threading.Lock()

    def feed(self, pcm: bytes) -> None:
        """
        餵入一幀 PCM（由音訊執行緒呼叫）
        """
        if not pcm:
            return

        samples = array("h")
        samples.frombytes(pcm[: len(pcm) - (len(pcm) % 2)])
        if sys.byteorder == "big":
            samples.byteswap()

        peak = max((abs(s) for s in samples), default=0) / _SAMPLE_MAX

        with self._lock:
            self._samples.extend(s / _SAMPLE_MAX for s in samples)
            self._level = self.smoothing * self._level + (1 - self.smoothing) * min(peak, 1.0)
            self._frames_seen += 1

    def latest_samples(self) -> List[float]:
        """最近 fft_size 個取樣（聲道交錯）"""
        with self._lock:
            return list(self._samples)

    @property
    def level(self) -> float:
        """平滑後的峰值"""
        with self._lock:
            return self._level

    @property
    def frames_seen(self) -> int:
        """已接收的幀數"""
        with self._lock:
            return self._frames_seen

    def reset(self) -> None:
        """清除取樣與峰值"""
        with self._lock:
            self._samples.clear()
            self._level = 0.0
