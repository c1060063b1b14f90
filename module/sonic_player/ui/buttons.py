"""
播放器按鈕 - UI 層

提供兩種按鈕視圖:
- PlayerControlView: 播放控制按鈕 (上一首、播放/暫停、下一首、隨機、重複、靜音、離開、倒轉/快轉、音量)
- PaginationView: 播放清單翻頁按鈕
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Callable, Awaitable, Any, TypeAlias
from discord.ui import View, Button
from discord import ButtonStyle, Interaction
from loguru import logger

from ..constants import PAGINATION_VIEW_TIMEOUT
from ..core.state import RepeatMode

if TYPE_CHECKING:
    from ..core.transport import Transport

# 按鈕動作類型
ButtonAction: TypeAlias = str
ButtonCallback: TypeAlias = Callable[[Interaction, ButtonAction], Awaitable[Any]]
TimeoutCallback: TypeAlias = Callable[[], Awaitable[Any]]


async def _dispatch(tag: str, callback: ButtonCallback | None, interaction: Interaction) -> None:
    """共用的按鈕處理：先 defer，再把 custom_id 交給回調"""
    await interaction.response.defer()

    action = interaction.data.get("custom_id") if interaction.data else None
    if not action:
        logger.error(f"[{tag}] 無法取得按鈕 custom_id")
        return

    logger.debug(f"[{tag}] 按鈕點擊: {action}")

    if callback is None:
        logger.warning(f"[{tag}] 未設置 button_callback")
        return

    try:
        await callback(interaction, action)
    except Exception as e:
        logger.exception(f"[{tag}] 按鈕回調執行失敗: {action}, {e}")


class PlayerControlView(View):
    """
    播放控制按鈕視圖

    第一列: 上一首 / 播放暫停 / 下一首 / 離開
    第二列: 隨機 / 重複 / 靜音
    第三列: 倒轉 / 快轉 / 音量減 / 音量加
    """

    ACTION_PREVIOUS = "sonic_previous"
    ACTION_PLAY_PAUSE = "sonic_play_pause"
    ACTION_NEXT = "sonic_next"
    ACTION_LEAVE = "sonic_leave"
    ACTION_SHUFFLE = "sonic_shuffle"
    ACTION_REPEAT = "sonic_repeat"
    ACTION_MUTE = "sonic_mute"
    ACTION_REWIND = "sonic_rewind"
    ACTION_FORWARD = "sonic_forward"
    ACTION_VOLUME_DOWN = "sonic_volume_down"
    ACTION_VOLUME_UP = "sonic_volume_up"

    REPEAT_EMOJI = {
        RepeatMode.OFF: "🔁",
        RepeatMode.ALL: "🔁",
        RepeatMode.ONE: "🔂",
    }

    def __init__(
        self,
        *,
        button_callback: ButtonCallback | None = None,
        is_playing: bool = False,
        repeat_mode: RepeatMode = RepeatMode.OFF,
        shuffle: bool = False,
        muted: bool = False,
    ):
        super().__init__(timeout=None)  # 永不過期
        self.button_callback = button_callback

        self.previous_button = self._add_button("⏮️", ButtonStyle.secondary, self.ACTION_PREVIOUS, row=0)
        self.play_pause_button = self._add_button("▶️", ButtonStyle.primary, self.ACTION_PLAY_PAUSE, row=0)
        self.next_button = self._add_button("⏭️", ButtonStyle.secondary, self.ACTION_NEXT, row=0)
        self.leave_button = self._add_button("🚪", ButtonStyle.danger, self.ACTION_LEAVE, row=0)
        self.shuffle_button = self._add_button("🔀", ButtonStyle.secondary, self.ACTION_SHUFFLE, row=1)
        self.repeat_button = self._add_button("🔁", ButtonStyle.secondary, self.ACTION_REPEAT, row=1)
        self.mute_button = self._add_button("🔊", ButtonStyle.secondary, self.ACTION_MUTE, row=1)
        self.rewind_button = self._add_button("⏪", ButtonStyle.secondary, self.ACTION_REWIND, row=2)
        self.forward_button = self._add_button("⏩", ButtonStyle.secondary, self.ACTION_FORWARD, row=2)
        self.volume_down_button = self._add_button("➖", ButtonStyle.secondary, self.ACTION_VOLUME_DOWN, row=2)
        self.volume_up_button = self._add_button("➕", ButtonStyle.secondary, self.ACTION_VOLUME_UP, row=2)

        self.update_play_pause(is_playing)
        self.update_repeat(repeat_mode)
        self.update_shuffle(shuffle)
        self.update_mute(muted)

        logger.debug("[PlayerView] 初始化完成")

    def _add_button(self, emoji: str, style: ButtonStyle, custom_id: str, row: int) -> Button:
        button = Button(emoji=emoji, style=style, custom_id=custom_id, row=row)
        button.callback = self._handle_button
        self.add_item(button)
        return button

    async def _handle_button(self, interaction: Interaction) -> None:
        await _dispatch("PlayerView", self.button_callback, interaction)

    # === 狀態更新 ===

    def update_play_pause(self, is_playing: bool) -> None:
        self.play_pause_button.emoji = "⏸️" if is_playing else "▶️"

    def update_repeat(self, mode: RepeatMode) -> None:
        self.repeat_button.emoji = self.REPEAT_EMOJI[mode]
        self.repeat_button.style = ButtonStyle.secondary if mode is RepeatMode.OFF else ButtonStyle.success

    def update_shuffle(self, enabled: bool) -> None:
        self.shuffle_button.style = ButtonStyle.success if enabled else ButtonStyle.secondary

    def update_mute(self, muted: bool) -> None:
        self.mute_button.emoji = "🔇" if muted else "🔊"
        self.mute_button.style = ButtonStyle.danger if muted else ButtonStyle.secondary

    def update_navigation(self, has_previous: bool, has_next: bool, repeat_mode: RepeatMode = RepeatMode.OFF) -> None:
        """
        更新導航按鈕狀態

        「上一首」在有選擇曲目時總是可用（可從頭播放）；
        全部循環時「下一首」也總是可用。
        """
        self.previous_button.disabled = not has_previous and not has_next
        self.next_button.disabled = not has_next and repeat_mode is not RepeatMode.ALL

    def sync(self, transport: "Transport") -> None:
        """依 Transport 狀態更新所有按鈕"""
        self.update_play_pause(transport.is_playing)
        self.update_repeat(transport.repeat_mode)
        self.update_shuffle(transport.shuffle_enabled)
        self.update_mute(transport.muted)
        has_selection = transport.active_index is not None
        self.update_navigation(
            has_previous=has_selection,
            has_next=transport.has_next(),
            repeat_mode=transport.repeat_mode,
        )
        self.rewind_button.disabled = not has_selection
        self.forward_button.disabled = not has_selection

    def disable_all(self) -> None:
        """禁用所有按鈕"""
        for child in self.children:
            if isinstance(child, Button):
                child.disabled = True
        logger.debug("[PlayerView] 已禁用所有按鈕")


class PaginationView(View):
    """
    播放清單翻頁按鈕視圖

    包含兩個按鈕:
    - previous_page: 上一頁 (⬅️)
    - next_page: 下一頁 (➡️)
    """

    ACTION_PREVIOUS_PAGE = "pagination_previous"
    ACTION_NEXT_PAGE = "pagination_next"

    def __init__(
        self,
        *,
        button_callback: ButtonCallback | None = None,
        timeout_callback: TimeoutCallback | None = None,
        timeout: float = PAGINATION_VIEW_TIMEOUT,
        current_page: int = 1,
        total_pages: int = 1,
    ):
        super().__init__(timeout=timeout)
        self.button_callback = button_callback
        self.timeout_callback = timeout_callback
        self.current_page = current_page
        self.total_pages = total_pages

        self.previous_button = Button(emoji="⬅️", style=ButtonStyle.secondary, custom_id=self.ACTION_PREVIOUS_PAGE, row=0)
        self.previous_button.callback = self._handle_button
        self.add_item(self.previous_button)

        self.next_button = Button(emoji="➡️", style=ButtonStyle.secondary, custom_id=self.ACTION_NEXT_PAGE, row=0)
        self.next_button.callback = self._handle_button
        self.add_item(self.next_button)

        self._update_button_states()
        logger.debug(f"[PaginationView] 初始化: 第 {current_page}/{total_pages} 頁")

    def _update_button_states(self) -> None:
        self.previous_button.disabled = self.current_page <= 1
        self.next_button.disabled = self.current_page >= self.total_pages

    async def _handle_button(self, interaction: Interaction) -> None:
        await _dispatch("PaginationView", self.button_callback, interaction)

    async def on_timeout(self) -> None:
        logger.debug("[PaginationView] 視圖已超時")
        if self.timeout_callback:
            try:
                await self.timeout_callback()
            except Exception as e:
                logger.exception(f"[PaginationView] 超時回調執行失敗: {e}")
        self.stop()

    def update_page(self, current_page: int, total_pages: int) -> None:
        self.current_page = current_page
        self.total_pages = total_pages
        self._update_button_states()
        logger.debug(f"[PaginationView] 更新頁碼: 第 {current_page}/{total_pages} 頁")


def create_player_view(
    transport: "Transport",
    button_callback: ButtonCallback | None = None,
) -> PlayerControlView:
    """
    工廠函數: 根據 Transport 狀態創建播放器視圖
    """
    view = PlayerControlView(button_callback=button_callback)
    view.sync(transport)
    return view
