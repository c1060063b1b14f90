"""
Discord Embed 生成器

負責生成各種情境的 Embed 訊息：
- 正在播放（進度條、音量、重複/隨機模式）
- 播放清單分頁
- 新增曲目
- 通用訊息
"""

import discord
from typing import Optional, List, Sequence, TYPE_CHECKING
from loguru import logger

from ..utils.formatting import format_time, format_time_display, format_volume, progress_bar

if TYPE_CHECKING:
    from ..core.queue import Track
    from ..core.transport import Transport


class EmbedBuilder:
    """
    Discord Embed 生成器

    使用方式：
        embeds = EmbedBuilder()
        embed = embeds.now_playing(track, is_playing=True, current_time=45, duration=180)
    """

    # 顏色定義
    COLOR_PLAYING = discord.Color.blurple()
    COLOR_PAUSED = discord.Color.orange()
    COLOR_SUCCESS = discord.Color.green()
    COLOR_ERROR = discord.Color.red()
    COLOR_INFO = discord.Color.blue()

    # === 播放相關 ===

    def now_playing(
        self,
        track: "Track",
        is_playing: bool = True,
        current_time: float = 0,
        duration: Optional[float] = None,
        index: Optional[int] = None,
        total: Optional[int] = None,
        volume: float = 1.0,
        muted: bool = False,
        repeat_label: str = "關閉",
        shuffle: bool = False,
        cover_url: Optional[str] = None,
    ) -> discord.Embed:
        """
        生成正在播放的 Embed

        Args:
            track: 曲目
            is_playing: 是否正在播放
            current_time: 已播放秒數
            duration: 曲目長度（未提供時使用 track.duration）
            index: 在目前順序中的編號（1-based）
            total: 佇列總數
            cover_url: 封面網址
        """
        try:
            status = "正在播放 ▶️" if is_playing else "已暫停 ⏸️"
            color = self.COLOR_PLAYING if is_playing else self.COLOR_PAUSED

            if not duration:
                duration = track.duration

            embed = discord.Embed(color=color)

            if track.artist:
                embed.set_author(name=track.artist)

            title_text = f"{index}. " if index else ""
            title_text += f"**{track.title}**"
            if track.album:
                title_text += f"\n💿 {track.album}"
            embed.description = title_text

            embed.add_field(
                name="狀態",
                value=(
                    f"{status}\n"
                    f"{format_time_display(current_time, duration)}\n"
                    f"{progress_bar(current_time, duration)}"
                ),
                inline=False,
            )
            embed.add_field(name="音量", value=format_volume(volume, muted), inline=True)
            embed.add_field(name="重複", value=repeat_label, inline=True)
            embed.add_field(name="隨機", value="開啟 🔀" if shuffle else "關閉", inline=True)

            if cover_url:
                embed.set_thumbnail(url=cover_url)

            footer_parts = []
            if index and total:
                footer_parts.append(f"第 {index} / {total} 首")
            if track.suffix:
                quality = track.suffix.upper()
                if track.bit_rate:
                    quality += f" {track.bit_rate}kbps"
                footer_parts.append(quality)
            if footer_parts:
                embed.set_footer(text=" | ".join(footer_parts))

            return embed

        except (TypeError, ValueError) as e:
            logger.error(f"生成播放 Embed 失敗: {e}")
            return self.error("無法顯示播放資訊")

    def player_embed(self, transport: "Transport", cover_url: Optional[str] = None) -> discord.Embed:
        """
        根據 Transport 狀態生成 Embed

        直接從 transport 取得所有需要的資訊
        """
        state = transport.get_state()
        track = state["current_track"]
        if track is None:
            return self.info("沒有正在播放的歌曲", "使用 /play 系列指令開始播放")

        index = state["current_index"]
        return self.now_playing(
            track=track,
            is_playing=state["is_playing"],
            current_time=state["current_time"],
            duration=state["duration"],
            index=index + 1 if index is not None else None,
            total=state["queue_length"],
            volume=state["volume"],
            muted=state["muted"],
            repeat_label=state["repeat"].label,
            shuffle=state["shuffle"],
            cover_url=cover_url,
        )

    # === 清單相關 ===

    def queue_page(
        self,
        tracks: Sequence["Track"],
        page: int = 1,
        per_page: int = 10,
        current_index: Optional[int] = None,
        shuffle: bool = False,
    ) -> discord.Embed:
        """
        生成播放清單 Embed

        Args:
            tracks: 目前順序的完整曲目列表
            page: 頁碼（1-based，超出範圍會被修正）
            per_page: 每頁曲目數
            current_index: 目前播放的索引（0-based）
            shuffle: 是否為隨機順序
        """
        total_tracks = len(tracks)
        total_pages = self.total_pages(total_tracks, per_page)
        page = max(1, min(page, total_pages))

        start = (page - 1) * per_page
        page_tracks = tracks[start:start + per_page]

        title = "🎶 播放清單（隨機順序）" if shuffle else "🎶 播放清單"
        embed = discord.Embed(title=title, color=self.COLOR_INFO)

        if not page_tracks:
            embed.description = "目前播放清單中沒有音樂！"
        else:
            lines = []
            for offset, track in enumerate(page_tracks):
                position = start + offset
                prefix = "▶️ " if position == current_index else ""
                lines.append(f"{prefix}{position + 1}. {track.display_name} `{format_time(track.duration)}`")
            embed.description = "\n".join(lines)

        total_seconds = sum(track.duration or 0 for track in tracks)
        embed.set_footer(
            text=f"頁數: {page}/{total_pages} | 總曲目數: {total_tracks} | 總長度: {format_time(total_seconds)}"
        )
        return embed

    @staticmethod
    def total_pages(total: int, per_page: int) -> int:
        return max(1, (total + per_page - 1) // per_page)

    # === 操作結果 ===

    def added_tracks(
        self,
        tracks: List["Track"],
        source: Optional[str] = None,
        cover_url: Optional[str] = None,
    ) -> discord.Embed:
        """
        生成新增曲目成功的 Embed

        Args:
            tracks: 新增的曲目
            source: 來源名稱（專輯、播放清單）
        """
        if len(tracks) == 1 and not source:
            track = tracks[0]
            embed = discord.Embed(
                title="✅ 已新增歌曲",
                description=f"**{track.display_name}** `{format_time(track.duration)}`",
                color=self.COLOR_SUCCESS,
            )
        else:
            origin = f"從 **{source}** " if source else ""
            embed = discord.Embed(
                title="✅ 已新增歌曲",
                description=f"{origin}新增了 **{len(tracks)}** 首歌曲",
                color=self.COLOR_SUCCESS,
            )
        if cover_url:
            embed.set_thumbnail(url=cover_url)
        return embed

    def search_results(self, query: str, tracks: Sequence["Track"]) -> discord.Embed:
        embed = discord.Embed(title=f"🔍 搜尋：{query}", color=self.COLOR_INFO)
        if not tracks:
            embed.description = "找不到符合的歌曲"
            return embed
        embed.description = "\n".join(
            f"{i}. {track.display_name} `{format_time(track.duration)}`"
            for i, track in enumerate(tracks, start=1)
        )
        return embed

    def cleared_queue(self, count: int) -> discord.Embed:
        return discord.Embed(
            title="🗑️ 已清空播放清單",
            description=f"已移除 **{count}** 首歌曲",
            color=discord.Color.orange(),
        )

    def jumped_to(self, track: "Track", index: int) -> discord.Embed:
        return discord.Embed(
            title="⏭️ 已跳轉",
            description=f"跳轉到第 **{index}** 首: **{track.display_name}**",
            color=self.COLOR_SUCCESS,
        )

    # === 通用訊息 ===

    def success(self, message: str, description: str = None) -> discord.Embed:
        """成功訊息"""
        return discord.Embed(title=f"✅ {message}", description=description, color=self.COLOR_SUCCESS)

    def error(self, message: str, description: str = None) -> discord.Embed:
        """錯誤訊息"""
        return discord.Embed(title=f"❌ {message}", description=description, color=self.COLOR_ERROR)

    def info(self, message: str, description: str = None) -> discord.Embed:
        """資訊訊息"""
        return discord.Embed(title=f"ℹ️ {message}", description=description, color=self.COLOR_INFO)

    def warning(self, message: str, description: str = None) -> discord.Embed:
        """警告訊息"""
        return discord.Embed(title=f"⚠️ {message}", description=description, color=discord.Color.gold())

    def loading(self, message: str = "處理中...") -> discord.Embed:
        return discord.Embed(title=f"⏳ {message}", color=self.COLOR_INFO)
