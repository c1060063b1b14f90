"""
播放狀態機

負責：
- 佇列與隨機/重複播放邏輯
- 對媒體輸出端下達指令（載入、播放、暫停、跳轉、音量）
- 依媒體輸出端的事件推進狀態（開始、暫停、進度、結束、錯誤）
- 透過 Notifier 通知宿主程式

所有邏輯都在同一個事件循環內執行；事件由單一分派任務依序處理。
"""

import asyncio
import math
import random
from typing import Iterable, List, Optional, Union
from loguru import logger

from .queue import PlaybackQueue, Track
from .state import TransportState, RepeatMode, TimeInfo
from .notifier import Notifier
from .sink import MediaSink, SinkEvent, SinkEventType
from ..audio.analysis import AnalysisTap
from ..constants import PREVIOUS_RESTART_THRESHOLD, SEEK_STEP, VOLUME_STEP
from ..utils.errors import MusicError, TrackLoadError
from ..utils.formatting import format_time


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class Transport:
    """
    播放狀態機

    使用方式：
        transport = Transport(sink, notifier=notifier)
        transport.start()                  # 開始處理媒體輸出端事件

        transport.set_queue(tracks)
        await transport.play_index(0)
        await transport.next()
        transport.toggle_shuffle()

        await transport.close()
    """

    def __init__(
        self,
        sink: MediaSink,
        notifier: Optional[Notifier] = None,
        rng: Optional[random.Random] = None,
    ):
        """
        Args:
            sink: 媒體輸出端
            notifier: 事件通知欄位（由宿主程式持有，未提供則自行建立）
            rng: 洗牌用的亂數來源（測試時可固定種子）
        """
        self.sink = sink
        self.notifier = notifier or Notifier()
        self.queue = PlaybackQueue(rng=rng)
        self.state = TransportState()

        # 指令序號：較新的 play / play_index 會讓較舊的完成結果失效
        self._command_token = 0

        self._dispatcher: Optional[asyncio.Task] = None

        logger.debug("Transport 初始化完成")

    # === 屬性 ===

    @property
    def is_playing(self) -> bool:
        return self.state.is_playing

    @property
    def active_index(self) -> Optional[int]:
        return self.state.active_index

    @property
    def repeat_mode(self) -> RepeatMode:
        return self.state.repeat_mode

    @property
    def shuffle_enabled(self) -> bool:
        return self.state.shuffle_enabled

    @property
    def volume(self) -> float:
        return self.state.volume

    @property
    def muted(self) -> bool:
        return self.state.muted

    @property
    def current_track(self) -> Optional[Track]:
        """目前選擇的曲目"""
        if self.state.active_index is None:
            return None
        return self.queue.track_at(self.state.active_index, self.state.shuffle_enabled)

    # === 佇列操作 ===

    def set_queue(self, tracks: Iterable[Track]) -> None:
        """替換整個佇列，並取消目前的選擇"""
        self.queue.replace(tracks)
        self.state.active_index = None

    def add_to_queue(self, tracks: Iterable[Track]) -> int:
        """
        新增曲目到佇列尾端

        隨機播放中會重新洗牌，但目前選擇的曲目固定在原本的索引上。

        Returns:
            新增的數量
        """
        current = self.current_track
        added = self.queue.extend(tracks)

        if current is not None and self.state.shuffle_enabled:
            self.queue.reshuffle(pinned=current, position=self.state.active_index)

        return added

    def clear_queue(self) -> int:
        """
        清空佇列

        Returns:
            被清空的曲目數量
        """
        self.state.active_index = None
        return self.queue.clear()

    def active_ordering(self) -> List[Track]:
        """目前啟用的順序"""
        return self.queue.ordering(self.state.shuffle_enabled)

    # === 播放控制 ===

    async def play_index(self, index: int) -> None:
        """
        播放目前順序中的第 index 首（0-based）

        索引無效時不做任何事。active_index 會立即更新，
        即使之後載入失敗也不會回復。
        """
        ordering = self.active_ordering()
        if not isinstance(index, int) or isinstance(index, bool) or not 0 <= index < len(ordering):
            logger.debug(f"忽略無效的索引: {index}（共 {len(ordering)} 首）")
            return

        self.state.active_index = index
        track = ordering[index]
        token = self._next_token()

        logger.debug(f"播放第 {index + 1} 首: {track.display_name}")

        try:
            if not track.locator:
                raise TrackLoadError(f"曲目沒有串流位址: {track.id}")
            await self.sink.ensure_ready()
            await self.sink.load(track.locator, duration=track.duration)
            if self._is_stale(token):
                logger.debug(f"忽略過期的播放結果: {track.display_name}")
                return
            await self.sink.play()
        except MusicError as e:
            if self._is_stale(token):
                logger.debug(f"忽略過期的播放失敗: {track.display_name}")
                return
            logger.error(f"播放失敗: {track.display_name} - {e}")
            await self._set_playing(False)
            await self.notifier.error(e)
            return

        if self._is_stale(token):
            logger.debug(f"忽略過期的播放結果: {track.display_name}")
            return

        await self.notifier.track_changed(track)

    async def play(self) -> None:
        """
        播放/恢復

        尚未選擇曲目時從第一首開始；否則恢復目前載入的曲目。
        """
        if self.state.active_index is None:
            if not self.queue.is_empty:
                await self.play_index(0)
            else:
                logger.debug("佇列為空，無法播放")
            return

        token = self._next_token()
        try:
            await self.sink.ensure_ready()
            await self.sink.play()
        except MusicError as e:
            if self._is_stale(token):
                return
            logger.warning(f"恢復播放失敗: {e}")
            await self.notifier.error(e)

    def pause(self) -> None:
        """暫停（實際狀態由媒體輸出端的 PAUSED 事件更新）"""
        self.sink.pause()

    async def toggle_play(self) -> None:
        """切換播放/暫停"""
        if self.state.is_playing:
            self.pause()
        else:
            await self.play()

    def stop(self) -> None:
        """停止並回到開頭，保留目前的選擇"""
        self.sink.stop()

    def has_next(self) -> bool:
        if self.state.active_index is None:
            return False
        return self.state.active_index < len(self.queue) - 1

    def has_previous(self) -> bool:
        if self.state.active_index is None:
            return False
        return self.state.active_index > 0

    async def next(self) -> None:
        """下一首（已是最後一首則不做任何事）"""
        if not self.has_next():
            logger.debug("沒有下一首了")
            return
        await self.play_index(self.state.active_index + 1)

    async def previous(self) -> None:
        """
        上一首

        已播放超過門檻秒數時，改為從頭播放目前曲目。
        """
        if self.state.active_index is not None and self.sink.position > PREVIOUS_RESTART_THRESHOLD:
            logger.debug("從頭播放目前曲目")
            self.sink.seek(0)
        elif self.has_previous():
            await self.play_index(self.state.active_index - 1)
        else:
            logger.debug("沒有上一首了")

    def seek(self, seconds: float) -> None:
        """跳到指定秒數（非有限數值會被忽略）"""
        if not _is_finite_number(seconds):
            logger.debug(f"忽略無效的跳轉時間: {seconds!r}")
            return
        self.sink.seek(seconds)

    def seek_percent(self, percent: float) -> None:
        """跳到指定百分比（0 ~ 100），曲目長度未知時不做任何事"""
        duration = self.sink.duration
        if not _is_finite_number(duration) or duration <= 0:
            logger.debug("曲目長度未知，無法依百分比跳轉")
            return
        if not _is_finite_number(percent):
            logger.debug(f"忽略無效的百分比: {percent!r}")
            return
        percent = max(0.0, min(100.0, percent))
        self.seek((percent / 100) * duration)

    def seek_by(self, delta: float = SEEK_STEP) -> None:
        """相對目前位置倒轉/快轉（沒有選擇曲目時不做任何事）"""
        if self.state.active_index is None or not _is_finite_number(delta):
            return
        self.seek(max(0.0, self.sink.position + delta))

    def step_volume(self, delta: float = VOLUME_STEP) -> None:
        """以目前音量為基準調整"""
        if not _is_finite_number(delta):
            return
        self.set_volume(round(self.state.volume + delta, 2))

    def set_volume(self, volume: float) -> None:
        """設定音量，超出 [0, 1] 的值會被限制在範圍內"""
        if isinstance(volume, bool) or not isinstance(volume, (int, float)) or math.isnan(volume):
            logger.debug(f"忽略無效的音量: {volume!r}")
            return
        self.state.volume = max(0.0, min(1.0, float(volume)))
        self.sink.set_volume(self.state.volume)

    def toggle_mute(self) -> None:
        """切換靜音（不影響音量數值）"""
        self.state.muted = not self.sink.muted
        self.sink.set_muted(self.state.muted)
        logger.debug(f"靜音: {'開啟' if self.state.muted else '關閉'}")

    def set_repeat(self, mode: Union[RepeatMode, str]) -> None:
        """設定重複模式（off / one / all），未知的模式會被忽略"""
        try:
            self.state.repeat_mode = RepeatMode(mode)
        except ValueError:
            logger.warning(f"忽略未知的重複模式: {mode!r}")
            return
        logger.debug(f"重複模式: {self.state.repeat_mode.value}")

    def toggle_shuffle(self) -> None:
        """
        切換隨機播放

        開啟：重新洗牌，目前曲目移到第一個位置，active_index 設為 0。
        關閉：以曲目 id 在加入順序中找回目前曲目的位置（找不到則為 None）。
        """
        current = self.current_track
        self.state.shuffle_enabled = not self.state.shuffle_enabled

        if self.state.shuffle_enabled:
            self.queue.reshuffle(pinned=current, position=0)
            if current is not None:
                self.state.active_index = 0
        elif current is not None:
            self.state.active_index = self.queue.index_of(current, shuffled=False)

        logger.debug(f"隨機播放: {'開啟' if self.state.shuffle_enabled else '關閉'}")

    def get_analyser(self) -> AnalysisTap:
        """取得媒體輸出端的分析接點"""
        return self.sink.get_analyser()

    # === 狀態查詢 ===

    def get_state(self) -> dict:
        """
        取得播放器完整狀態
        """
        duration = self.sink.duration
        return {
            "is_playing": self.state.is_playing,
            "current_time": self.sink.position,
            "duration": duration if _is_finite_number(duration) else 0,
            "volume": self.state.volume,
            "muted": self.state.muted,
            "repeat": self.state.repeat_mode,
            "shuffle": self.state.shuffle_enabled,
            "current_track": self.current_track,
            "queue_length": len(self.queue),
            "current_index": self.state.active_index,
        }

    @staticmethod
    def format_time(seconds: float) -> str:
        return format_time(seconds)

    # === 事件處理 ===

    def start(self) -> None:
        """啟動事件分派任務"""
        if self._dispatcher and not self._dispatcher.done():
            return
        self._dispatcher = asyncio.create_task(self._dispatch_events())

    async def close(self) -> None:
        """停止事件分派任務"""
        if self._dispatcher:
            self._dispatcher.cancel()
            try:
                await self._dispatcher
            except asyncio.CancelledError:
                pass
            self._dispatcher = None
        logger.debug("Transport 已關閉")

    async def _dispatch_events(self) -> None:
        while True:
            event = await self.sink.next_event()
            try:
                await self.handle_event(event)
            except Exception as e:
                logger.exception(f"處理播放事件失敗: {event.type.value} - {e}")

    async def handle_event(self, event: SinkEvent) -> None:
        """處理一個媒體輸出端事件"""
        if event.type is SinkEventType.STARTED:
            await self._set_playing(True, force=True)
        elif event.type is SinkEventType.PAUSED:
            await self._set_playing(False, force=True)
        elif event.type is SinkEventType.LOADED:
            await self.notifier.time_updated(TimeInfo(current_time=0, duration=event.duration or 0))
        elif event.type is SinkEventType.TIME_UPDATED:
            await self.notifier.time_updated(
                TimeInfo(current_time=event.position, duration=event.duration or 0)
            )
        elif event.type is SinkEventType.ENDED:
            await self._handle_ended()
        elif event.type is SinkEventType.ERROR:
            logger.error(f"媒體輸出端錯誤: {event.error}")
            await self._set_playing(False)
            await self.notifier.error(event.error)

    async def _handle_ended(self) -> None:
        """
        處理曲目自然結束
        """
        await self._set_playing(False)
        await self.notifier.ended()

        if self.state.repeat_mode is RepeatMode.ONE:
            logger.debug("單曲循環，從頭播放")
            self.sink.seek(0)
            await self.play()
        elif self.has_next():
            await self.next()
        elif self.state.repeat_mode is RepeatMode.ALL and not self.queue.is_empty:
            logger.debug("全部循環，回到第一首")
            await self.play_index(0)
        else:
            logger.info("播放清單已結束")

    # === 內部方法 ===

    async def _set_playing(self, is_playing: bool, force: bool = False) -> None:
        """更新播放狀態；狀態有變化（或 force）時通知"""
        changed = self.state.is_playing != is_playing
        self.state.is_playing = is_playing
        if changed or force:
            await self.notifier.play_state_changed(is_playing)

    def _next_token(self) -> int:
        self._command_token += 1
        return self._command_token

    def _is_stale(self, token: int) -> bool:
        return token != self._command_token
