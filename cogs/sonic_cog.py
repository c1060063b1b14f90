"""
Subsonic 播放器 Cog

從 Subsonic 伺服器串流音樂到語音頻道:
- 播放專輯 / 播放清單 / 隨機歌曲
- 搜尋並加入佇列
- 重複模式（關閉 / 全部 / 單曲）與隨機播放
- 按鈕控制面板與定期更新的播放資訊
"""

# -------------------- Discord --------------------
import discord
from discord.ext import commands, tasks
from discord import app_commands

# -------------------- Module --------------------
from module.sonic_player import (
    # Core
    Notifier,
    RepeatMode,
    Track,
    Transport,
    # Audio
    VoiceClientSink,
    find_ffmpeg,
    # Catalog
    SubsonicClient,
    # Config
    PlayerSettings,
    load_settings,
    # UI
    EmbedBuilder,
    PlayerControlView,
    PaginationView,
    create_player_view,
    # Errors
    MusicError,
    CatalogError,
    QueueEmptyError,
    # Utils
    cooldown,
    # Constants
    PLAYLIST_PER_PAGE,
    EMBED_UPDATE_INTERVAL,
    BUTTON_COOLDOWN,
    AUTOCOMPLETE_LIMIT,
    SEEK_STEP,
    VOLUME_STEP,
)

# -------------------- Other --------------------
import math
from typing import Iterable, List, Optional
from loguru import logger

REPEAT_CHOICES = [
    app_commands.Choice(name=mode.label, value=mode.value)
    for mode in (RepeatMode.OFF, RepeatMode.ALL, RepeatMode.ONE)
]


class SonicPlayerCog(commands.Cog):
    """Subsonic 播放器 Cog"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

        # 核心組件（cog_load 時建立）
        self.settings: PlayerSettings = load_settings()
        self.client: SubsonicClient | None = None
        self.sink: VoiceClientSink | None = None
        self.transport: Transport | None = None
        self.notifier = Notifier()

        # UI 相關
        self.embed_builder = EmbedBuilder()
        self.player_view: PlayerControlView | None = None
        self.player_message: discord.Message | None = None
        self.queue_message: discord.Message | None = None

        # 分頁設定
        self.queue_per_page = PLAYLIST_PER_PAGE
        self.current_queue_page = 1

        # 手動離開時不視為被動斷線
        self.manual_disconnect = False

    async def cog_load(self):
        """Cog 載入時初始化"""
        if not self.settings.is_configured:
            logger.error("[SonicPlayerCog] 缺少 Subsonic 設定（SUBSONIC_URL / SUBSONIC_USERNAME / SUBSONIC_PASSWORD）")

        ffmpeg_path = await find_ffmpeg(self.settings.ffmpeg_path)
        if not ffmpeg_path:
            logger.error("FFmpeg 初始化失敗，無法正常啟動播放器！")

        self.client = SubsonicClient(
            self.settings.server_url,
            self.settings.username,
            self.settings.password,
        )

        self.sink = VoiceClientSink(ffmpeg_path=ffmpeg_path or "ffmpeg")

        self.notifier.on_track_change = self._on_track_change
        self.notifier.on_play_state_change = self._on_play_state_change
        self.notifier.on_ended = self._on_ended
        self.notifier.on_error = self._on_error

        self.transport = Transport(self.sink, notifier=self.notifier)
        self.transport.set_volume(self.settings.default_volume)
        self.transport.start()

        logger.info("[SonicPlayerCog] 初始化完成")

    async def cog_unload(self):
        """Cog 卸載時清理資源"""
        await self._cleanup_resources()
        if self.transport:
            await self.transport.close()
        if self.client:
            await self.client.close()
        logger.info("[SonicPlayerCog] 已卸載，資源已清理")

    async def cog_app_command_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError):
        """斜線指令的共用錯誤處理"""
        original = getattr(error, "original", error)
        if isinstance(original, MusicError):
            logger.warning(f"[SonicPlayerCog] 指令失敗: {original}")
            message = original.user_message
        else:
            logger.opt(exception=original).error(f"[SonicPlayerCog] 指令執行時發生錯誤: {original}")
            message = "執行指令時發生錯誤，請稍後再試。"

        if interaction.response.is_done():
            await interaction.followup.send(message, ephemeral=True)
        else:
            await interaction.response.send_message(message, ephemeral=True)

    # ==================== 播放事件回調 ====================

    async def _on_track_change(self, track: Track):
        logger.info(f"[SonicPlayerCog] 正在播放: {track.display_name}")
        await self._refresh_player_ui()
        await self._scrobble(track, submission=False)

    async def _on_play_state_change(self, is_playing: bool):
        await self._refresh_player_ui()

    async def _on_ended(self):
        # 通知時尚未切換曲目，current_track 仍是剛播完的那首
        track = self.transport.current_track if self.transport else None
        if track:
            await self._scrobble(track, submission=True)

    async def _on_error(self, error: Exception):
        message = getattr(error, "user_message", None) or str(error)
        await self._show_error(message)

    async def _scrobble(self, track: Track, submission: bool):
        if not self.client or not self.client.is_configured:
            return
        try:
            await self.client.scrobble(track.id, submission=submission)
        except CatalogError as e:
            logger.warning(f"[SonicPlayerCog] 回報播放紀錄失敗: {e}")

    # ==================== UI 更新 ====================

    def _cover_url(self, track: Optional[Track]) -> Optional[str]:
        if track is None or not track.cover_art or not self.client:
            return None
        return self.client.cover_art_url(track.cover_art)

    async def _refresh_player_ui(self):
        """刷新播放器 UI（嵌入和按鈕）"""
        if not self.transport or not self.player_message:
            return

        if self.transport.current_track is None:
            await self._show_empty_queue()
            return

        embed = self.embed_builder.player_embed(
            self.transport,
            cover_url=self._cover_url(self.transport.current_track),
        )
        if self.player_view:
            self.player_view.sync(self.transport)

        await self._update_player_message(embed)

    async def _update_player_message(self, embed: discord.Embed, view: discord.ui.View | None = None):
        """更新播放器訊息"""
        if not self.player_message:
            return
        try:
            await self.player_message.edit(embed=embed, view=view or self.player_view)
        except discord.NotFound:
            logger.warning("播放器訊息已被刪除")
            self.player_message = None
        except discord.HTTPException as e:
            logger.error(f"更新播放器訊息失敗: {e}")

    async def _show_empty_queue(self):
        embed = self.embed_builder.error("播放清單中無音樂")
        embed.description = "請透過 `/音樂-播放專輯`、`/音樂-隨機播放` 或 `/音樂-搜尋` 來新增音樂"
        if self.player_view:
            self.player_view.disable_all()
        await self._update_player_message(embed)

    async def _show_error(self, message: str):
        if self.player_message:
            await self._update_player_message(self.embed_builder.error(message))
        else:
            logger.warning(f"[SonicPlayerCog] {message}")

    # ==================== 按鈕處理 ====================

    @cooldown(seconds=BUTTON_COOLDOWN)
    async def _button_callback(self, interaction: discord.Interaction, action: str):
        """處理播放器按鈕點擊"""
        transport = self.transport
        if not transport:
            return

        if action == PlayerControlView.ACTION_PLAY_PAUSE:
            await transport.toggle_play()
        elif action == PlayerControlView.ACTION_NEXT:
            if transport.has_next():
                await transport.next()
            elif transport.repeat_mode is RepeatMode.ALL:
                await transport.play_index(0)
        elif action == PlayerControlView.ACTION_PREVIOUS:
            await transport.previous()
        elif action == PlayerControlView.ACTION_SHUFFLE:
            transport.toggle_shuffle()
        elif action == PlayerControlView.ACTION_REPEAT:
            transport.set_repeat(transport.repeat_mode.cycle())
        elif action == PlayerControlView.ACTION_MUTE:
            transport.toggle_mute()
        elif action == PlayerControlView.ACTION_REWIND:
            transport.seek_by(-SEEK_STEP)
        elif action == PlayerControlView.ACTION_FORWARD:
            transport.seek_by(SEEK_STEP)
        elif action == PlayerControlView.ACTION_VOLUME_DOWN:
            transport.step_volume(-VOLUME_STEP)
        elif action == PlayerControlView.ACTION_VOLUME_UP:
            transport.step_volume(VOLUME_STEP)
        elif action == PlayerControlView.ACTION_LEAVE:
            await self._handle_leave()
            return

        await self._refresh_player_ui()

    async def _handle_leave(self):
        """處理離開"""
        self.manual_disconnect = True
        message = self.player_message

        await self._cleanup_resources()

        if message:
            embed = discord.Embed(
                title="👋 播放器已關閉",
                description="感謝使用！使用 `/音樂-播放專輯` 可以重新啟動",
                color=discord.Color.green(),
            )
            try:
                await message.edit(embed=embed, view=None)
            except discord.HTTPException as e:
                logger.debug(f"更新關閉訊息失敗: {e}")

    # ==================== 內部流程 ====================

    def _require_ready(self) -> SubsonicClient:
        """確認播放器已初始化且設定完整"""
        if not self.client or not self.transport:
            raise MusicError("player not initialised", user_message="播放器尚未初始化完成，請稍後再試。")
        self.settings.require_configured()
        return self.client

    async def _ensure_voice(self, interaction: discord.Interaction) -> bool:
        """確認已連接到使用者所在的語音頻道"""
        if self.sink.is_connected:
            return True

        if not interaction.user.voice or not interaction.user.voice.channel:
            await interaction.followup.send("請先加入語音頻道再執行此指令。", ephemeral=True)
            return False

        try:
            voice_client = await interaction.user.voice.channel.connect()
        except discord.ClientException as e:
            logger.error(f"連接語音頻道失敗: {e}")
            await interaction.followup.send("無法加入語音頻道，請確認機器人是否有權限。", ephemeral=True)
            return False

        self.manual_disconnect = False
        self.sink.set_voice_client(voice_client)
        logger.info(f"[SonicPlayerCog] 已連接語音頻道: {voice_client.channel}")
        return True

    def _tracks_from_songs(self, songs: Iterable[dict], album: Optional[dict] = None) -> List[Track]:
        return [
            self.client.track_from_song(
                song,
                album=album,
                max_bitrate=self.settings.max_bitrate,
                stream_format=self.settings.stream_format,
            )
            for song in songs
        ]

    async def _start_queue(self, interaction: discord.Interaction, tracks: List[Track], source: str):
        """以新的曲目取代佇列並從第一首開始播放"""
        if not tracks:
            raise QueueEmptyError()

        self.transport.set_queue(tracks)
        await self._send_player(interaction)
        await self.transport.play_index(0)

        await interaction.followup.send(
            embed=self.embed_builder.added_tracks(tracks, source=source, cover_url=self._cover_url(tracks[0])),
            ephemeral=True,
        )

    async def _send_player(self, interaction: discord.Interaction):
        """發送新的播放器訊息（舊訊息會標示為已移動）"""
        old_message = self.player_message

        self.player_view = create_player_view(self.transport, button_callback=self._button_callback)
        embed = self.embed_builder.player_embed(
            self.transport,
            cover_url=self._cover_url(self.transport.current_track),
        )
        message = await interaction.followup.send(embed=embed, view=self.player_view, wait=True)
        self.player_message = await message.channel.fetch_message(message.id)

        if not self.update_embed.is_running():
            self.update_embed.start()

        if old_message and old_message.id != self.player_message.id:
            old_embed = discord.Embed(
                title="🔀 播放器已移動",
                description="請使用下方的新播放器控制面板",
                color=discord.Color.greyple(),
            )
            try:
                await old_message.edit(embed=old_embed, view=None)
            except discord.HTTPException as e:
                logger.debug(f"更新舊播放器訊息失敗: {e}")

    # ==================== 自動完成 ====================

    async def album_autocomplete(self, interaction: discord.Interaction, current: str) -> list[app_commands.Choice[str]]:
        if not self.client or not self.client.is_configured or not current:
            return []
        try:
            result = await self.client.search(current, artist_count=0, album_count=AUTOCOMPLETE_LIMIT, song_count=0)
        except CatalogError as e:
            logger.error(f"Autocomplete 時發生錯誤: {e}")
            return []
        return [
            app_commands.Choice(name=f"{album.get('artist', '')} - {album.get('name', '')}"[:100], value=str(album["id"]))
            for album in result.get("album", [])[:AUTOCOMPLETE_LIMIT]
        ]

    async def playlist_autocomplete(self, interaction: discord.Interaction, current: str) -> list[app_commands.Choice[str]]:
        if not self.client or not self.client.is_configured:
            return []
        try:
            playlists = await self.client.get_playlists()
        except CatalogError as e:
            logger.error(f"Autocomplete 時發生錯誤: {e}")
            return []
        return [
            app_commands.Choice(name=playlist.get("name", "")[:100], value=str(playlist["id"]))
            for playlist in playlists
            if current.lower() in playlist.get("name", "").lower()
        ][:AUTOCOMPLETE_LIMIT]

    async def genre_autocomplete(self, interaction: discord.Interaction, current: str) -> list[app_commands.Choice[str]]:
        if not self.client or not self.client.is_configured:
            return []
        try:
            genres = await self.client.get_genres()
        except CatalogError as e:
            logger.error(f"Autocomplete 時發生錯誤: {e}")
            return []
        return [
            app_commands.Choice(name=genre.get("value", "")[:100], value=genre.get("value", ""))
            for genre in genres
            if genre.get("value") and current.lower() in genre["value"].lower()
        ][:AUTOCOMPLETE_LIMIT]

    async def track_index_autocomplete(self, interaction: discord.Interaction, current: str) -> list[app_commands.Choice[int]]:
        if not self.transport:
            return []
        choices = []
        for i, track in enumerate(self.transport.active_ordering()):
            display = f"{i + 1}. {track.display_name}"
            if current in str(i + 1) or current.lower() in track.title.lower():
                choices.append(app_commands.Choice(name=display[:100], value=i + 1))
        return choices[:AUTOCOMPLETE_LIMIT]

    # ==================== 斜線指令 ====================

    @app_commands.command(name="音樂-播放專輯", description="播放 Subsonic 伺服器上的專輯")
    @app_commands.rename(album_id="專輯")
    @app_commands.describe(album_id="輸入關鍵字搜尋專輯")
    @app_commands.autocomplete(album_id=album_autocomplete)
    async def play_album(self, interaction: discord.Interaction, album_id: str):
        await interaction.response.defer()
        client = self._require_ready()
        if not await self._ensure_voice(interaction):
            return

        album = await client.get_album(album_id)
        if not album:
            await interaction.followup.send("找不到這張專輯。", ephemeral=True)
            return

        tracks = self._tracks_from_songs(album.get("song", []), album=album)
        await self._start_queue(interaction, tracks, source=album.get("name") or "專輯")

    @app_commands.command(name="音樂-播放清單", description="播放 Subsonic 伺服器上的播放清單")
    @app_commands.rename(playlist_id="播放清單")
    @app_commands.autocomplete(playlist_id=playlist_autocomplete)
    async def play_playlist(self, interaction: discord.Interaction, playlist_id: str):
        await interaction.response.defer()
        client = self._require_ready()
        if not await self._ensure_voice(interaction):
            return

        playlist = await client.get_playlist(playlist_id)
        if not playlist:
            await interaction.followup.send("找不到這個播放清單。", ephemeral=True)
            return

        tracks = self._tracks_from_songs(playlist.get("entry", []))
        await self._start_queue(interaction, tracks, source=playlist.get("name") or "播放清單")

    @app_commands.command(name="音樂-隨機播放", description="從伺服器隨機挑選歌曲播放")
    @app_commands.rename(count="數量", genre="曲風")
    @app_commands.describe(count="歌曲數量（1-500）", genre="只挑選指定曲風")
    @app_commands.autocomplete(genre=genre_autocomplete)
    async def play_random(
        self,
        interaction: discord.Interaction,
        count: app_commands.Range[int, 1, 500] = 50,
        genre: Optional[str] = None,
    ):
        await interaction.response.defer()
        client = self._require_ready()
        if not await self._ensure_voice(interaction):
            return

        songs = await client.get_random_songs(size=count, genre=genre)
        tracks = self._tracks_from_songs(songs)
        await self._start_queue(interaction, tracks, source=f"隨機歌曲{f'（{genre}）' if genre else ''}")

    @app_commands.command(name="音樂-搜尋", description="搜尋歌曲並加入播放清單")
    @app_commands.rename(query="關鍵字", count="數量")
    @app_commands.describe(query="歌曲名稱、演出者或專輯", count="最多加入幾首（1-50）")
    async def search_and_enqueue(
        self,
        interaction: discord.Interaction,
        query: str,
        count: app_commands.Range[int, 1, 50] = 10,
    ):
        await interaction.response.defer()
        client = self._require_ready()
        if not await self._ensure_voice(interaction):
            return

        result = await client.search(query, artist_count=0, album_count=0, song_count=count)
        tracks = self._tracks_from_songs(result.get("song", []))
        await interaction.followup.send(embed=self.embed_builder.search_results(query, tracks))
        if not tracks:
            return

        self.transport.add_to_queue(tracks)
        if self.player_message is None:
            await self._send_player(interaction)

        if self.transport.active_index is None:
            await self.transport.play()
        else:
            await self._refresh_player_ui()

    @app_commands.command(name="音樂-清單", description="查看目前的播放清單")
    async def view_queue(self, interaction: discord.Interaction):
        await interaction.response.defer()
        if not self.transport:
            await interaction.followup.send("播放器尚未啟動", ephemeral=True)
            return

        if self.queue_message:
            try:
                await self.queue_message.edit(view=None)
            except discord.HTTPException as e:
                logger.debug(f"移除舊清單按鈕失敗: {e}")
            self.queue_message = None

        self.current_queue_page = 1
        if self.transport.active_index is not None:
            self.current_queue_page = self.transport.active_index // self.queue_per_page + 1

        embed, view = self._queue_page()
        message = await interaction.followup.send(embed=embed, view=view, wait=True)
        self.queue_message = await message.channel.fetch_message(message.id)

    def _queue_page(self) -> tuple[discord.Embed, PaginationView]:
        tracks = self.transport.active_ordering()
        total_pages = self.embed_builder.total_pages(len(tracks), self.queue_per_page)
        self.current_queue_page = max(1, min(self.current_queue_page, total_pages))

        embed = self.embed_builder.queue_page(
            tracks,
            page=self.current_queue_page,
            per_page=self.queue_per_page,
            current_index=self.transport.active_index,
            shuffle=self.transport.shuffle_enabled,
        )
        view = PaginationView(
            button_callback=self._pagination_callback,
            timeout_callback=self._queue_timeout_callback,
            current_page=self.current_queue_page,
            total_pages=total_pages,
        )
        return embed, view

    async def _pagination_callback(self, interaction: discord.Interaction, action: str):
        if not self.transport or not self.queue_message:
            return

        if action == PaginationView.ACTION_PREVIOUS_PAGE:
            self.current_queue_page -= 1
        else:
            self.current_queue_page += 1

        embed, view = self._queue_page()
        await self.queue_message.edit(embed=embed, view=view)

    async def _queue_timeout_callback(self):
        if self.queue_message:
            await self.queue_message.edit(view=None)

    @app_commands.command(name="音樂-跳轉", description="跳轉到播放清單中的指定歌曲")
    @app_commands.rename(index="歌曲編號")
    @app_commands.describe(index="要跳轉到的歌曲編號（從 1 開始）")
    @app_commands.autocomplete(index=track_index_autocomplete)
    async def jump_to_track(self, interaction: discord.Interaction, index: int):
        await interaction.response.defer()
        if not self.transport or not await self._ensure_voice(interaction):
            return

        ordering = self.transport.active_ordering()
        if not 1 <= index <= len(ordering):
            await interaction.followup.send(
                f"找不到編號為 {index} 的歌曲（範圍：1-{len(ordering)}）",
                ephemeral=True,
            )
            return

        await self.transport.play_index(index - 1)
        await interaction.followup.send(embed=self.embed_builder.jumped_to(ordering[index - 1], index))

    @app_commands.command(name="音樂-清空", description="停止播放並清空播放清單")
    async def clear_queue(self, interaction: discord.Interaction):
        await interaction.response.defer()
        if not self.transport:
            await interaction.followup.send("播放器尚未啟動", ephemeral=True)
            return

        self.transport.stop()
        count = self.transport.clear_queue()
        await self._show_empty_queue()
        await interaction.followup.send(embed=self.embed_builder.cleared_queue(count))

    @app_commands.command(name="音樂-音量", description="調整播放音量")
    @app_commands.rename(volume="音量")
    @app_commands.describe(volume="0 到 100")
    async def set_volume(self, interaction: discord.Interaction, volume: app_commands.Range[int, 0, 100]):
        if not self.transport:
            await interaction.response.send_message("播放器尚未啟動", ephemeral=True)
            return

        self.transport.set_volume(volume / 100)
        await interaction.response.send_message(f"🔊 音量已設為 {volume}%", ephemeral=True)
        await self._refresh_player_ui()

    @app_commands.command(name="音樂-快轉", description="跳到目前歌曲的指定位置")
    @app_commands.rename(position="位置")
    @app_commands.describe(position="秒數，或 分:秒（例如 1:30）")
    async def seek(self, interaction: discord.Interaction, position: str):
        if not self.transport or self.transport.current_track is None:
            await interaction.response.send_message("目前沒有正在播放的歌曲", ephemeral=True)
            return

        seconds = _parse_position(position)
        if seconds is None:
            await interaction.response.send_message("位置格式錯誤，請輸入秒數或 分:秒", ephemeral=True)
            return

        self.transport.seek(seconds)
        await interaction.response.send_message(f"⏩ 已跳到 {Transport.format_time(seconds)}", ephemeral=True)

    @app_commands.command(name="音樂-重複", description="設定重複播放模式")
    @app_commands.rename(mode="模式")
    @app_commands.choices(mode=REPEAT_CHOICES)
    async def set_repeat(self, interaction: discord.Interaction, mode: app_commands.Choice[str]):
        if not self.transport:
            await interaction.response.send_message("播放器尚未啟動", ephemeral=True)
            return

        self.transport.set_repeat(mode.value)
        await interaction.response.send_message(f"重複模式: {self.transport.repeat_mode.label}", ephemeral=True)
        await self._refresh_player_ui()

    @app_commands.command(name="音樂-隨機", description="切換隨機播放")
    async def toggle_shuffle(self, interaction: discord.Interaction):
        if not self.transport:
            await interaction.response.send_message("播放器尚未啟動", ephemeral=True)
            return

        self.transport.toggle_shuffle()
        state = "開啟 🔀" if self.transport.shuffle_enabled else "關閉"
        await interaction.response.send_message(f"隨機播放: {state}", ephemeral=True)
        await self._refresh_player_ui()

    @app_commands.command(name="音樂-顯示播放器", description="重新顯示播放器控制面板（將播放器移至最新訊息）")
    async def show_player(self, interaction: discord.Interaction):
        await interaction.response.defer()
        if not self.transport or not self.sink.is_connected:
            await interaction.followup.send("播放器尚未啟動", ephemeral=True)
            return
        await self._send_player(interaction)

    # ==================== 背景任務 ====================

    @tasks.loop(seconds=EMBED_UPDATE_INTERVAL)
    async def update_embed(self):
        """定期更新播放器嵌入"""
        if not self.transport or not self.transport.is_playing:
            return
        await self._refresh_player_ui()

    @update_embed.error
    async def update_embed_error(self, error: BaseException):
        logger.opt(exception=error).error(f"更新播放器嵌入時發生錯誤: {error}")

    # ==================== 工具方法 ====================

    async def _cleanup_resources(self):
        """停止播放、離開語音頻道並重置 UI 狀態"""
        if self.transport:
            self.transport.stop()
            self.transport.clear_queue()

        if self.sink and self.sink.voice_client:
            voice_client = self.sink.voice_client
            self.sink.set_voice_client(None)
            await voice_client.disconnect()

        if self.update_embed.is_running():
            self.update_embed.stop()

        self.player_message = None
        self.queue_message = None
        self.player_view = None
        self.current_queue_page = 1

        logger.debug("[SonicPlayerCog] 資源已清理")

    # ==================== 事件監聽 ====================

    @commands.Cog.listener()
    async def on_voice_state_update(
        self,
        member: discord.Member,
        before: discord.VoiceState,
        after: discord.VoiceState,
    ):
        """Bot 被動斷線時停止播放"""
        if member.id != self.bot.user.id:
            return

        if before.channel is not None and after.channel is None and not self.manual_disconnect:
            logger.warning("Bot 被動斷線，停止播放")
            if self.sink:
                self.sink.set_voice_client(None, keep_channel=True)
            await self._show_error("已與語音頻道斷線，按下播放即可重新連線")


def _parse_position(text: str) -> Optional[float]:
    """「90」、「1:30」、「1:02:05」轉成秒數"""
    parts = text.strip().split(":")
    if not 1 <= len(parts) <= 3:
        return None
    try:
        values = [float(part) for part in parts]
    except ValueError:
        return None
    if any(not math.isfinite(value) or value < 0 for value in values):
        return None

    seconds = 0.0
    for value in values:
        seconds = seconds * 60 + value
    return seconds


async def setup(bot: commands.Bot):
    """載入 Cog"""
    await bot.add_cog(SonicPlayerCog(bot))
