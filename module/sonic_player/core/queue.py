"""
播放佇列

同一組曲目維持兩種順序：
- canonical: 加入順序
- shuffled: canonical 的隨機排列（每次集合變動或重新開啟隨機播放時重新產生）

允許重複曲目（以位置區分）。索引由 Transport 管理，佇列本身不記錄目前位置。
"""

import random
from dataclasses import dataclass, field
from typing import Optional, List, Iterable
from loguru import logger


@dataclass(frozen=True, eq=False)
class Track:
    """
    曲目資料結構

    除了 id 與 locator，其餘欄位只用於顯示。放入佇列後不可修改，相等性以 id 判斷。
    """
    id: str                               # 目錄伺服器上的曲目 ID
    title: str                            # 標題
    locator: str                          # 串流位址（對播放器而言是不透明字串）
    artist: str = ""                      # 演出者
    album: str = ""                       # 專輯
    duration: Optional[float] = None      # 時長（秒），未知為 None

    # 目錄附加資訊
    cover_art: Optional[str] = field(default=None, repr=False)   # 封面 ID
    suffix: Optional[str] = field(default=None, repr=False)      # 檔案格式，例如 flac
    bit_rate: Optional[int] = field(default=None, repr=False)    # kbps
    track_number: Optional[int] = field(default=None, repr=False)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    @property
    def display_name(self) -> str:
        """「演出者 - 標題」，沒有演出者時只顯示標題"""
        return f"{self.artist} - {self.title}" if self.artist else self.title


def shuffle_tracks(tracks: Iterable[Track], rng: Optional[random.Random] = None) -> List[Track]:
    """
    Fisher–Yates 洗牌，回傳新的列表

    從最後一個位置往前，與 [0, i] 範圍內均勻選出的位置交換。
    每次呼叫彼此獨立，不記得先前的排列。
    """
    rng = rng or random.Random()
    result = list(tracks)
    for i in range(len(result) - 1, 0, -1):
        j = rng.randint(0, i)
        result[i], result[j] = result[j], result[i]
    return result


class PlaybackQueue:
    """
    播放佇列

    使用方式：
        queue = PlaybackQueue(rng=random.Random(42))
        queue.replace(tracks)
        queue.extend(more_tracks)

        queue.ordering(shuffled=True)   # 隨機順序
        queue.ordering(shuffled=False)  # 加入順序
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()
        self._canonical: List[Track] = []
        self._shuffled: List[Track] = []

    # === 屬性 ===

    @property
    def canonical(self) -> List[Track]:
        """加入順序（只讀副本）"""
        return self._canonical.copy()

    @property
    def shuffled(self) -> List[Track]:
        """隨機順序（只讀副本）"""
        return self._shuffled.copy()

    @property
    def is_empty(self) -> bool:
        return len(self._canonical) == 0

    def __len__(self) -> int:
        return len(self._canonical)

    def __iter__(self):
        return iter(self._canonical)

    def ordering(self, shuffled: bool) -> List[Track]:
        """取得指定的順序（只讀副本）"""
        return self.shuffled if shuffled else self.canonical

    def track_at(self, index: int, shuffled: bool) -> Optional[Track]:
        """取得指定順序中的曲目，索引無效則返回 None"""
        source = self._shuffled if shuffled else self._canonical
        if index < 0 or index >= len(source):
            return None
        return source[index]

    def index_of(self, track: Track, shuffled: bool) -> Optional[int]:
        """以 id 尋找曲目在指定順序中的第一個位置"""
        source = self._shuffled if shuffled else self._canonical
        for i, candidate in enumerate(source):
            if candidate == track:
                return i
        return None

    # === 修改操作 ===

    def replace(self, tracks: Iterable[Track]) -> None:
        """整個替換佇列，並重新洗牌"""
        self._canonical = list(tracks)
        self.reshuffle()
        logger.debug(f"佇列已替換，共 {len(self._canonical)} 首")

    def extend(self, tracks: Iterable[Track]) -> int:
        """
        新增曲目到尾端，並以完整佇列重新洗牌

        Returns:
            新增的數量
        """
        added = list(tracks)
        self._canonical.extend(added)
        self.reshuffle()
        logger.debug(f"已新增 {len(added)} 首，目前共 {len(self._canonical)} 首")
        return len(added)

    def clear(self) -> int:
        """
        清空兩種順序

        Returns:
            被清空的曲目數量
        """
        count = len(self._canonical)
        self._canonical.clear()
        self._shuffled.clear()
        logger.debug(f"已清空佇列，共移除 {count} 首")
        return count

    def reshuffle(self, pinned: Optional[Track] = None, position: int = 0) -> None:
        """
        重新產生隨機順序

        Args:
            pinned: 要固定位置的曲目（例如目前播放中的曲目）
            position: 固定到的位置
        """
        self._shuffled = shuffle_tracks(self._canonical, self._rng)

        if pinned is None or not self._shuffled:
            return

        current = self.index_of(pinned, shuffled=True)
        position = max(0, min(position, len(self._shuffled) - 1))
        if current is not None and current != position:
            self._shuffled[position], self._shuffled[current] = (
                self._shuffled[current],
                self._shuffled[position],
            )
