# Audio module
# voice_sink 依賴 core.sink，由套件最上層匯入以避免循環匯入
from .analysis import AnalysisTap
from .clock import PlaybackClock

__all__ = ["AnalysisTap", "PlaybackClock"]
