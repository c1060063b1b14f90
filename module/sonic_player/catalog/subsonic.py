"""
Subsonic REST API 客戶端

使用 token 驗證（token = md5(password + salt)），所有請求都要求 JSON 格式回應。
API 文件：http://www.subsonic.org/pages/api.jsp
"""

import hashlib
import secrets
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import aiohttp
from loguru import logger

from ..core.queue import Track
from ..constants import (
    ALBUM_LIST_SIZE,
    COVER_ART_SIZE,
    RANDOM_SONGS_SIZE,
    SEARCH_ALBUM_COUNT,
    SEARCH_ARTIST_COUNT,
    SEARCH_SONG_COUNT,
    SONGS_BY_GENRE_COUNT,
    SUBSONIC_API_VERSION,
    SUBSONIC_CLIENT_NAME,
    SUBSONIC_REQUEST_TIMEOUT,
)
from ..utils.decorators import log_operation
from ..utils.errors import CatalogError, SubsonicAPIError


def _encode_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _item_params(item_id: str, item_type: str) -> Dict[str, str]:
    """star / unstar 依項目類型使用不同的參數名稱"""
    if item_type == "artist":
        return {"artistId": item_id}
    if item_type == "album":
        return {"albumId": item_id}
    return {"id": item_id}


class SubsonicClient:
    """
    Subsonic 客戶端

    使用方式：
        client = SubsonicClient("https://music.example.com", "user", "pass")
        album = await client.get_album("al-1")
        tracks = [client.track_from_song(song) for song in album["song"]]
        await client.close()
    """

    def __init__(
        self,
        server_url: str = "",
        username: str = "",
        password: str = "",
        session: Optional[aiohttp.ClientSession] = None,
        client_name: str = SUBSONIC_CLIENT_NAME,
        timeout: float = SUBSONIC_REQUEST_TIMEOUT,
    ):
        self.server_url = ""
        self.username = ""
        self.password = ""
        self.client_name = client_name
        self.timeout = timeout

        self._salt: Optional[str] = None
        self._token: Optional[str] = None

        # 外部傳入的 session 由呼叫者負責關閉
        self._session = session
        self._owns_session = session is None

        self.set_credentials(server_url, username, password)

    # === 驗證 ===

    def set_credentials(self, server_url: str, username: str, password: str) -> None:
        """設定伺服器與帳號（會清除已產生的 token）"""
        self.server_url = (server_url or "").rstrip("/")
        self.username = username or ""
        self.password = password or ""
        self._salt = None
        self._token = None

    @property
    def is_configured(self) -> bool:
        return bool(self.server_url and self.username and self.password)

    def generate_token(self, salt: Optional[str] = None) -> str:
        """
        產生新的 salt 與 token

        Args:
            salt: 指定 salt（測試用），預設為 8 個隨機位元組的十六進位字串

        Returns:
            token
        """
        self._salt = salt or secrets.token_hex(8)
        self._token = hashlib.md5((self.password + self._salt).encode("utf-8")).hexdigest()
        return self._token

    def _auth_params(self) -> Dict[str, str]:
        if self._token is None:
            self.generate_token()
        return {
            "u": self.username,
            "t": self._token,
            "s": self._salt,
            "v": SUBSONIC_API_VERSION,
            "c": self.client_name,
            "f": "json",
        }

    def build_url(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> str:
        """組出帶有驗證參數的完整 API 網址（值為 None 的參數會被略過）"""
        query = self._auth_params()
        for key, value in (params or {}).items():
            if value is None:
                continue
            query[key] = _encode_value(value)
        return f"{self.server_url}/rest/{endpoint}?{urlencode(query)}"

    # === 請求 ===

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def request(self, endpoint: str, **params) -> Dict[str, Any]:
        """
        發送 GET 請求並回傳 subsonic-response 內容

        Raises:
            CatalogError: 連線失敗或 HTTP 狀態碼非 2xx
            SubsonicAPIError: 伺服器回應 status="failed"
        """
        url = self.build_url(endpoint, params)
        session = self._get_session()

        try:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=self.timeout)) as resp:
                if not 200 <= resp.status < 300:
                    raise CatalogError(f"HTTP error: {resp.status}", status=resp.status)
                data = await resp.json(content_type=None)
        except aiohttp.ClientError as e:
            logger.error(f"Subsonic 連線失敗: {endpoint} - {e}")
            raise CatalogError(f"{endpoint}: {e}")
        except TimeoutError:
            logger.error(f"Subsonic 請求逾時: {endpoint}")
            raise CatalogError(f"{endpoint}: timeout")
        except ValueError as e:
            # 回應內容不是 JSON
            logger.error(f"Subsonic 回應格式錯誤: {endpoint} - {e}")
            raise CatalogError(f"{endpoint}: invalid response")

        envelope = (data or {}).get("subsonic-response") or {}
        if envelope.get("status") == "failed":
            error = envelope.get("error") or {}
            raise SubsonicAPIError(error.get("message") or "Unknown API error", code=error.get("code"))

        return envelope

    async def close(self) -> None:
        """關閉自行建立的 session"""
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    # === 瀏覽 ===

    @log_operation("Subsonic ping")
    async def ping(self) -> bool:
        response = await self.request("ping")
        return response.get("status") == "ok"

    @log_operation("取得藝人列表")
    async def get_artists(self) -> List[dict]:
        """取得所有藝人（把字母索引攤平成單一列表）"""
        response = await self.request("getArtists")
        indexes = (response.get("artists") or {}).get("index") or []
        return [artist for index in indexes for artist in index.get("artist") or []]

    @log_operation("取得專輯列表")
    async def get_album_list(
        self,
        list_type: str = "alphabeticalByArtist",
        size: int = ALBUM_LIST_SIZE,
        offset: int = 0,
    ) -> List[dict]:
        """
        取得專輯列表

        Args:
            list_type: random, newest, highest, frequent, recent,
                alphabeticalByName, alphabeticalByArtist, starred
        """
        response = await self.request("getAlbumList2", type=list_type, size=size, offset=offset)
        return (response.get("albumList2") or {}).get("album") or []

    @log_operation("取得專輯")
    async def get_album(self, album_id: str) -> Optional[dict]:
        response = await self.request("getAlbum", id=album_id)
        return response.get("album")

    @log_operation("取得藝人")
    async def get_artist(self, artist_id: str) -> Optional[dict]:
        response = await self.request("getArtist", id=artist_id)
        return response.get("artist")

    @log_operation("搜尋")
    async def search(
        self,
        query: str,
        artist_count: int = SEARCH_ARTIST_COUNT,
        album_count: int = SEARCH_ALBUM_COUNT,
        song_count: int = SEARCH_SONG_COUNT,
    ) -> dict:
        response = await self.request(
            "search3",
            query=query,
            artistCount=artist_count,
            albumCount=album_count,
            songCount=song_count,
        )
        return response.get("searchResult3") or {}

    @log_operation("取得播放清單列表")
    async def get_playlists(self) -> List[dict]:
        response = await self.request("getPlaylists")
        return (response.get("playlists") or {}).get("playlist") or []

    @log_operation("取得播放清單")
    async def get_playlist(self, playlist_id: str) -> Optional[dict]:
        response = await self.request("getPlaylist", id=playlist_id)
        return response.get("playlist")

    @log_operation("取得隨機歌曲")
    async def get_random_songs(
        self,
        size: int = RANDOM_SONGS_SIZE,
        genre: Optional[str] = None,
        from_year: Optional[int] = None,
        to_year: Optional[int] = None,
        music_folder_id: Optional[str] = None,
    ) -> List[dict]:
        response = await self.request(
            "getRandomSongs",
            size=size,
            genre=genre,
            fromYear=from_year,
            toYear=to_year,
            musicFolderId=music_folder_id,
        )
        return (response.get("randomSongs") or {}).get("song") or []

    @log_operation("取得收藏")
    async def get_starred(self) -> dict:
        response = await self.request("getStarred2")
        return response.get("starred2") or {}

    async def star(self, item_id: str, item_type: str = "song") -> bool:
        await self.request("star", **_item_params(item_id, item_type))
        return True

    async def unstar(self, item_id: str, item_type: str = "song") -> bool:
        await self.request("unstar", **_item_params(item_id, item_type))
        return True

    async def scrobble(self, song_id: str, submission: bool = True) -> bool:
        """回報播放紀錄（submission=False 表示「正在播放」）"""
        await self.request("scrobble", id=song_id, submission=submission)
        return True

    @log_operation("取得音樂資料夾")
    async def get_music_folders(self) -> List[dict]:
        response = await self.request("getMusicFolders")
        return (response.get("musicFolders") or {}).get("musicFolder") or []

    @log_operation("取得曲風")
    async def get_genres(self) -> List[dict]:
        response = await self.request("getGenres")
        return (response.get("genres") or {}).get("genre") or []

    @log_operation("依曲風取得歌曲")
    async def get_songs_by_genre(
        self,
        genre: str,
        count: int = SONGS_BY_GENRE_COUNT,
        offset: int = 0,
    ) -> List[dict]:
        response = await self.request("getSongsByGenre", genre=genre, count=count, offset=offset)
        return (response.get("songsByGenre") or {}).get("song") or []

    # === 網址 ===

    def stream_url(
        self,
        song_id: str,
        max_bitrate: Optional[int] = None,
        stream_format: Optional[str] = None,
    ) -> str:
        return self.build_url("stream", {
            "id": song_id,
            "maxBitRate": max_bitrate or None,
            "format": stream_format,
        })

    def cover_art_url(self, cover_art_id: str, size: int = COVER_ART_SIZE) -> str:
        return self.build_url("getCoverArt", {"id": cover_art_id, "size": size})

    # === 轉換 ===

    def track_from_song(
        self,
        song: dict,
        album: Optional[dict] = None,
        max_bitrate: Optional[int] = None,
        stream_format: Optional[str] = None,
    ) -> Track:
        """
        把 Subsonic 的歌曲項目轉成 Track

        Args:
            song: Subsonic child 項目
            album: 所屬專輯（歌曲缺少藝人或封面時使用）
        """
        album = album or {}
        duration = song.get("duration")
        return Track(
            id=str(song["id"]),
            title=song.get("title") or "Unknown",
            locator=self.stream_url(str(song["id"]), max_bitrate=max_bitrate, stream_format=stream_format),
            artist=song.get("artist") or album.get("artist") or "",
            album=song.get("album") or album.get("name") or "",
            duration=float(duration) if duration else None,
            cover_art=song.get("coverArt") or album.get("coverArt"),
            suffix=song.get("suffix"),
            bit_rate=song.get("bitRate"),
            track_number=song.get("track"),
        )
