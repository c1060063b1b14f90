"""
播放器統一錯誤系統

所有錯誤都繼承自 MusicError，包含：
- message: 技術性錯誤訊息（給開發者 / log）
- user_message: 使用者友善的訊息（給 Discord 顯示）

Transport 只捕捉 MusicError；媒體輸出端與目錄客戶端負責把底層例外轉換成這裡的型別。
"""

from typing import Optional


class MusicError(Exception):
    """播放器錯誤基類"""

    def __init__(self, message: str, user_message: Optional[str] = None):
        self.message = message
        self.user_message = user_message or message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class PlaybackError(MusicError):
    """播放錯誤（無法開始或繼續播放）"""

    def __init__(self, message: str, user_message: str = "播放時發生錯誤"):
        super().__init__(message=message, user_message=user_message)


class TrackLoadError(PlaybackError):
    """無法載入曲目的串流位址"""

    def __init__(self, message: str, locator: Optional[str] = None):
        self.locator = locator
        super().__init__(message=message, user_message="無法載入這首歌曲")


class SinkUnavailableError(MusicError):
    """音訊輸出環境不可用（例如語音客戶端未連接）"""

    def __init__(self, message: str):
        super().__init__(message=message, user_message="無法連接到語音頻道")


class QueueError(MusicError):
    """佇列操作錯誤"""
    pass


class QueueEmptyError(QueueError):
    """佇列為空"""

    def __init__(self):
        super().__init__(message="Queue is empty", user_message="播放清單是空的")


class CatalogError(MusicError):
    """音樂目錄伺服器連線錯誤"""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message=message, user_message="無法連線到音樂伺服器")


class SubsonicAPIError(CatalogError):
    """
    Subsonic 回應 status="failed"

    常見 code：
    - 10: 缺少必要參數
    - 40: 帳號或密碼錯誤
    - 50: 權限不足
    - 70: 找不到資料
    """

    CODE_MESSAGES = {
        10: "請求缺少必要參數",
        20: "客戶端版本過舊",
        30: "伺服器版本過舊",
        40: "帳號或密碼錯誤",
        41: "伺服器不支援 token 驗證",
        50: "權限不足",
        60: "伺服器試用期已結束",
        70: "找不到指定的資料",
    }

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message=message)
        self.code = code
        self.user_message = self.CODE_MESSAGES.get(code, "音樂伺服器回報錯誤")


class ConfigError(MusicError):
    """設定缺漏"""

    def __init__(self, message: str):
        super().__init__(message=message, user_message="播放器設定不完整，請聯絡管理員")
