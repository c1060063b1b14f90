"""
播放器常數設定
"""

# === 播放控制 ===
PREVIOUS_RESTART_THRESHOLD = 3.0   # 播放超過幾秒時，「上一首」改為從頭播放
TIME_UPDATE_INTERVAL = 1.0         # 媒體輸出端回報播放進度的間隔（秒）
DEFAULT_VOLUME = 1.0
SEEK_STEP = 5.0                    # 倒轉/快轉的秒數
VOLUME_STEP = 0.1                  # 音量調整的幅度

# === 頻譜分析 ===
ANALYSER_FFT_SIZE = 2048
ANALYSER_SMOOTHING = 0.8

# === FFmpeg ===
FFMPEG_BIN_DIR = "./bin"
FFMPEG_OPTIONS = "-vn"

# === 語音連線 ===
VOICE_CONNECT_TIMEOUT = 10.0       # 重新連線的逾時（秒）

# === Subsonic ===
SUBSONIC_API_VERSION = "1.16.1"
SUBSONIC_CLIENT_NAME = "SonicPlayer"
SUBSONIC_REQUEST_TIMEOUT = 15      # 秒
ALBUM_LIST_SIZE = 500
SEARCH_ARTIST_COUNT = 20
SEARCH_ALBUM_COUNT = 20
SEARCH_SONG_COUNT = 50
RANDOM_SONGS_SIZE = 50
SONGS_BY_GENRE_COUNT = 50
COVER_ART_SIZE = 300

# === UI ===
PLAYLIST_PER_PAGE = 10
PAGINATION_VIEW_TIMEOUT = 120
PROGRESS_BAR_LENGTH = 15
PROGRESS_BAR_FILLED = "▓"
PROGRESS_BAR_EMPTY = "░"
EMBED_UPDATE_INTERVAL = 15
BUTTON_COOLDOWN = 0.5
AUTOCOMPLETE_LIMIT = 25
