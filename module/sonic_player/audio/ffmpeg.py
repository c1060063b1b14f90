"""
FFmpeg 路徑解析

優先順序：
1. 設定檔指定的路徑（FFMPEG_PATH）
2. 系統 PATH 中的 ffmpeg
3. 本地 bin 目錄中的 ffmpeg
"""

import asyncio
import platform
import shutil
from pathlib import Path
from typing import Optional
from loguru import logger

from ..constants import FFMPEG_BIN_DIR


def _executable_name() -> str:
    return "ffmpeg.exe" if platform.system() == "Windows" else "ffmpeg"


async def _verify(path: str) -> bool:
    """執行 `ffmpeg -version` 確認可用"""
    try:
        process = await asyncio.create_subprocess_exec(
            path, "-version",
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, _ = await process.communicate()
    except OSError as e:
        logger.debug(f"無法執行 {path}: {e}")
        return False
    return process.returncode == 0 and b"ffmpeg version" in stdout


async def find_ffmpeg(configured: Optional[str] = None, bin_dir: str = FFMPEG_BIN_DIR) -> Optional[str]:
    """
    取得可用的 FFmpeg 執行路徑

    Args:
        configured: 設定檔指定的路徑（可以是指令名稱或絕對路徑）
        bin_dir: 本地 bin 目錄

    Returns:
        FFmpeg 執行路徑，找不到則返回 None
    """
    candidates = []

    if configured:
        candidates.append(("設定檔", shutil.which(configured) or configured))

    system_ffmpeg = shutil.which("ffmpeg")
    if system_ffmpeg:
        candidates.append(("系統", system_ffmpeg))

    local = Path(bin_dir) / _executable_name()
    if local.exists():
        candidates.append(("本地", str(local)))

    for source, path in candidates:
        if await _verify(path):
            logger.info(f"使用{source} FFmpeg: {path}")
            return path
        logger.warning(f"{source} FFmpeg 無法使用: {path}")

    logger.error("找不到可用的 FFmpeg，請安裝或設定 FFMPEG_PATH")
    return None
