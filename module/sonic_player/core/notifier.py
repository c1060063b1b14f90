"""
播放事件通知

五個單一訂閱者的回調欄位，由宿主程式指定（後指定者覆蓋先前的）：
- on_track_change(track)
- on_play_state_change(is_playing)
- on_time_update(TimeInfo)
- on_ended()
- on_error(error)

回調可以是一般函數或 coroutine function。回調內的例外只會被記錄，不會傳回 Transport。
"""

import inspect
from typing import Any, Awaitable, Callable, Optional, Union, TYPE_CHECKING
from loguru import logger

from .state import TimeInfo

if TYPE_CHECKING:
    from .queue import Track

Callback = Callable[..., Union[None, Awaitable[None]]]


class Notifier:
    """
    事件通知欄位

    使用方式：
        notifier = Notifier()
        notifier.on_track_change = update_now_playing
        notifier.on_error = show_error

        transport = Transport(sink, notifier=notifier)
    """

    def __init__(self):
        self.on_track_change: Optional[Callback] = None
        self.on_play_state_change: Optional[Callback] = None
        self.on_time_update: Optional[Callback] = None
        self.on_ended: Optional[Callback] = None
        self.on_error: Optional[Callback] = None

    async def track_changed(self, track: "Track") -> None:
        await self._safe_callback("on_track_change", track)

    async def play_state_changed(self, is_playing: bool) -> None:
        await self._safe_callback("on_play_state_change", is_playing)

    async def time_updated(self, info: TimeInfo) -> None:
        await self._safe_callback("on_time_update", info)

    async def ended(self) -> None:
        await self._safe_callback("on_ended")

    async def error(self, error: Exception) -> None:
        await self._safe_callback("on_error", error)

    async def _safe_callback(self, slot: str, *args: Any) -> None:
        """
        安全執行回調
        """
        callback = getattr(self, slot)
        if callback is None:
            return

        try:
            result = callback(*args)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.exception(f"{slot} 回調執行失敗: {e}")
