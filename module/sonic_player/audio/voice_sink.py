"""
Discord 語音媒體輸出端

透過 FFmpeg 把串流位址轉成 PCM 送進 Discord 語音客戶端：
- 跳轉：以 `-ss` 重新建立 FFmpeg 來源
- 音量/靜音：PCMVolumeTransformer
- 播放位置：PlaybackClock 推算
- 結束/錯誤：語音客戶端的 after 回調（在音訊執行緒中執行，轉回事件循環處理）
"""

import asyncio
from typing import Callable, Optional, TYPE_CHECKING

import discord
from loguru import logger

from .analysis import AnalysisTap
from .clock import PlaybackClock
from ..core.sink import MediaSink, SinkEvent, SinkEventType
from ..constants import DEFAULT_VOLUME, FFMPEG_OPTIONS, TIME_UPDATE_INTERVAL, VOICE_CONNECT_TIMEOUT
from ..utils.errors import PlaybackError, SinkUnavailableError, TrackLoadError

if TYPE_CHECKING:
    from discord import VoiceClient


class TappedSource(discord.AudioSource):
    """把每一幀 PCM 複製給分析接點的來源包裝"""

    def __init__(self, original: discord.AudioSource, tap_getter: Callable[[], Optional[AnalysisTap]]):
        self.original = original
        self._tap_getter = tap_getter

    def read(self) -> bytes:
        data = self.original.read()
        tap = self._tap_getter()
        if data and tap is not None:
            tap.feed(data)
        return data

    def is_opus(self) -> bool:
        return False

    def cleanup(self) -> None:
        self.original.cleanup()


class VoiceClientSink(MediaSink):
    """
    Discord 語音媒體輸出端

    使用方式：
        sink = VoiceClientSink(ffmpeg_path="ffmpeg")
        sink.set_voice_client(voice_client)

        transport = Transport(sink)
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        voice_client: Optional["VoiceClient"] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        time_update_interval: float = TIME_UPDATE_INTERVAL,
    ):
        super().__init__()
        self.ffmpeg_path = ffmpeg_path
        self._voice_client = voice_client
        # 上次連接的語音頻道（斷線後用來重新連線）
        self._channel = getattr(voice_client, "channel", None)

        # 事件循環（after 回調在音訊執行緒中執行，需要轉回這裡）
        self._loop = loop or asyncio.get_running_loop()

        self._locator: Optional[str] = None
        self._duration: Optional[float] = None
        self._volume = DEFAULT_VOLUME
        self._muted = False

        self._clock = PlaybackClock()
        self._volume_source: Optional[discord.PCMVolumeTransformer] = None

        # 每個 FFmpeg 來源的編號；舊來源的 after 回調會被忽略
        self._source_generation = 0

        self._time_update_interval = time_update_interval
        self._ticker: Optional[asyncio.Task] = None

        logger.debug(f"VoiceClientSink 初始化: ffmpeg={ffmpeg_path}")

    # === 語音客戶端 ===

    @property
    def voice_client(self) -> Optional["VoiceClient"]:
        return self._voice_client

    def set_voice_client(self, voice_client: Optional["VoiceClient"], keep_channel: bool = False) -> None:
        """
        設定（或清除）語音客戶端

        Args:
            voice_client: 新的語音客戶端，None 表示已離開語音頻道
            keep_channel: 清除時是否記住原本的頻道，下次播放前會嘗試重新連線
        """
        if voice_client is None:
            was_playing = self._clock.is_running and not self._clock.is_paused
            self._halt()
            position = self.position
            self._clock.stop(position)
            if was_playing:
                self.emit(SinkEvent(SinkEventType.PAUSED, position=position, duration=self._duration))
            if not keep_channel:
                self._channel = None
        else:
            self._channel = getattr(voice_client, "channel", None)
        self._voice_client = voice_client

    @property
    def is_connected(self) -> bool:
        return self._voice_client is not None and self._voice_client.is_connected()

    async def ensure_ready(self) -> None:
        """確認語音連線可用；斷線時嘗試重新連到上次的頻道"""
        if self.is_connected:
            return

        channel = self._channel
        if channel is None:
            raise SinkUnavailableError("未連接到語音頻道")

        logger.info(f"嘗試重新連接語音頻道: {channel}")
        try:
            voice_client = await channel.connect(timeout=VOICE_CONNECT_TIMEOUT, reconnect=True)
        except (discord.ClientException, asyncio.TimeoutError) as e:
            logger.warning(f"重新連接語音頻道失敗: {e}")
            raise SinkUnavailableError(f"無法重新連接語音頻道: {e}")

        self._voice_client = voice_client
        logger.info(f"已重新連接語音頻道: {channel}")

    # === 播放指令 ===

    async def load(self, locator: str, duration: Optional[float] = None) -> None:
        if not locator:
            raise TrackLoadError("串流位址為空", locator=locator)

        was_playing = self._is_outputting()
        self._halt()

        self._locator = locator
        self._duration = duration if duration and duration > 0 else None
        self._clock.stop()

        if was_playing:
            self.emit(SinkEvent(SinkEventType.PAUSED, position=0.0, duration=self._duration))
        self.emit(SinkEvent(SinkEventType.LOADED, position=0.0, duration=self._duration))
        logger.debug(f"已載入串流: duration={self._duration}")

    async def play(self) -> None:
        if not self._locator:
            raise PlaybackError("尚未載入任何曲目")

        voice_client = self._voice_client
        if voice_client is None or not voice_client.is_connected():
            raise SinkUnavailableError("未連接到語音頻道")

        if voice_client.is_paused() and self._volume_source is not None:
            voice_client.resume()
            self._clock.resume()
            logger.debug("已恢復")
        elif voice_client.is_playing():
            return
        else:
            self._start_source(self._clock.position)

        self.emit(SinkEvent(SinkEventType.STARTED, position=self.position, duration=self._duration))
        self._start_ticker()

    def pause(self) -> None:
        voice_client = self._voice_client
        if voice_client is None or not voice_client.is_playing():
            return

        voice_client.pause()
        self._clock.pause()
        self._stop_ticker()
        self.emit(SinkEvent(SinkEventType.PAUSED, position=self.position, duration=self._duration))
        logger.debug("已暫停")

    def stop(self) -> None:
        was_playing = self._is_outputting()
        self._halt()
        self._clock.stop()
        if was_playing:
            self.emit(SinkEvent(SinkEventType.PAUSED, position=0.0, duration=self._duration))
        logger.debug("已停止")

    def seek(self, seconds: float) -> None:
        target = max(0.0, seconds)
        if self._duration is not None:
            target = min(target, self._duration)

        voice_client = self._voice_client
        if voice_client is not None and voice_client.is_playing() and self._locator:
            # 播放中：以新的起點重建 FFmpeg 來源
            self._halt()
            try:
                self._start_source(target)
            except PlaybackError as e:
                self._clock.stop(target)
                self._stop_ticker()
                self.emit(SinkEvent(SinkEventType.ERROR, position=target, duration=self._duration, error=e))
                return
            self._start_ticker()
        elif voice_client is not None and voice_client.is_paused():
            # 暫停中：丟掉舊來源，恢復時從新位置開始
            self._halt()
            self._clock.stop(target)
            self.emit(SinkEvent(SinkEventType.PAUSED, position=target, duration=self._duration))
        else:
            self._clock.stop(target)

        self.emit(SinkEvent(SinkEventType.TIME_UPDATED, position=target, duration=self._duration))
        logger.debug(f"跳轉到 {target:.1f}s")

    def set_volume(self, volume: float) -> None:
        self._volume = max(0.0, min(1.0, volume))
        self._apply_volume()

    def set_muted(self, muted: bool) -> None:
        self._muted = muted
        self._apply_volume()

    # === 狀態 ===

    @property
    def position(self) -> float:
        return self._clock.clamped(self._duration)

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def muted(self) -> bool:
        return self._muted

    @property
    def volume(self) -> float:
        return self._volume

    # === 內部方法 ===

    def _start_source(self, offset: float) -> None:
        """建立 FFmpeg 來源並開始輸出"""
        before_options = f"-ss {offset:.3f}" if offset > 0 else None

        try:
            ffmpeg_source = discord.FFmpegPCMAudio(
                self._locator,
                executable=self.ffmpeg_path,
                before_options=before_options,
                options=FFMPEG_OPTIONS,
            )
        except (discord.ClientException, OSError) as e:
            logger.error(f"建立音訊源失敗: {e}")
            raise TrackLoadError(str(e), locator=self._locator)

        self._volume_source = discord.PCMVolumeTransformer(ffmpeg_source, volume=self._effective_volume())
        source = TappedSource(self._volume_source, lambda: self._analysis_tap)

        self._source_generation += 1
        generation = self._source_generation

        try:
            self._voice_client.play(source, after=lambda error: self._after_playback(generation, error))
        except discord.ClientException as e:
            source.cleanup()
            self._volume_source = None
            raise PlaybackError(str(e))

        self._clock.start(offset)
        logger.debug(f"開始輸出: offset={offset:.1f}s")

    def _halt(self) -> None:
        """停止目前的來源，不觸發結束事件"""
        self._source_generation += 1
        self._stop_ticker()
        if self._voice_client is not None and (self._voice_client.is_playing() or self._voice_client.is_paused()):
            self._voice_client.stop()
        self._volume_source = None

    def _is_outputting(self) -> bool:
        return self._voice_client is not None and self._voice_client.is_playing()

    def _after_playback(self, generation: int, error: Optional[Exception]) -> None:
        """
        FFmpeg 來源結束的回調（由 Discord 音訊系統呼叫）

        注意：這是在另一個線程中執行的
        """
        self._loop.call_soon_threadsafe(self._on_source_finished, generation, error)

    def _on_source_finished(self, generation: int, error: Optional[Exception]) -> None:
        if generation != self._source_generation:
            return

        self._stop_ticker()
        self._volume_source = None

        if error:
            logger.error(f"播放錯誤: {error}")
            self._clock.stop(self._clock.position)
            self.emit(SinkEvent(
                SinkEventType.ERROR,
                position=self.position,
                duration=self._duration,
                error=PlaybackError(str(error)),
            ))
            return

        end_position = self._duration if self._duration is not None else self._clock.position
        self._clock.stop(end_position)
        self.emit(SinkEvent(SinkEventType.PAUSED, position=end_position, duration=self._duration))
        self.emit(SinkEvent(SinkEventType.ENDED, position=end_position, duration=self._duration))
        logger.debug("曲目播放結束")

    def _effective_volume(self) -> float:
        return 0.0 if self._muted else self._volume

    def _apply_volume(self) -> None:
        if self._volume_source is not None:
            self._volume_source.volume = self._effective_volume()

    def _start_ticker(self) -> None:
        self._stop_ticker()
        self._ticker = self._loop.create_task(self._tick())

    def _stop_ticker(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    async def _tick(self) -> None:
        """播放中定期回報進度"""
        while True:
            await asyncio.sleep(self._time_update_interval)
            self.emit(SinkEvent(SinkEventType.TIME_UPDATED, position=self.position, duration=self._duration))
