"""
播放器裝飾器

- log_operation: 記錄非同步操作的開始、完成與失敗
- cooldown: 防止按鈕連點
"""

import time
import weakref
from functools import wraps
from typing import Callable, TypeVar, ParamSpec
from loguru import logger

P = ParamSpec('P')
T = TypeVar('T')


def log_operation(operation_name: str = None):
    """
    裝飾器：記錄操作的開始和結束

    使用方式：
        @log_operation("取得專輯")
        async def get_album(self, album_id):
            ...
    """
    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        name = operation_name or func.__name__

        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger.debug(f"開始: {name}")
            try:
                result = await func(*args, **kwargs)
                logger.debug(f"完成: {name}")
                return result
            except Exception as e:
                logger.error(f"失敗: {name} - {e}")
                raise

        return wrapper
    return decorator


def cooldown(seconds: float = 1.0):
    """
    裝飾器：冷卻時間內的重複呼叫直接忽略（以實例區分）

    使用方式：
        @cooldown(seconds=0.5)
        async def on_button_click(self, interaction, action):
            ...
    """
    last_call = weakref.WeakKeyDictionary()

    def decorator(func: Callable[P, T]) -> Callable[P, T]:
        @wraps(func)
        async def wrapper(self, *args, **kwargs):
            now = time.monotonic()
            key = self

            if key in last_call and now - last_call[key] < seconds:
                logger.debug(f"冷卻中，忽略操作: {func.__name__}")
                return None

            last_call[key] = now
            return await func(self, *args, **kwargs)

        return wrapper
    return decorator
