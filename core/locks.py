"""
並發控制工具

FastAPI 的同步 endpoint 會在 thread pool 執行，
同一個 Session 可能同時收到多個 tick 請求。

狀態機本身是單執行緒設計（不加鎖），
所以在 API 層用每個 Session 一把 threading.Lock，確保 tick 依序執行。
"""
import threading
from contextlib import contextmanager
from typing import Dict

_registry_lock = threading.Lock()
_session_locks: Dict[str, threading.Lock] = {}


def get_session_lock(code: str) -> threading.Lock:
    """
    取得（必要時建立）某個 Session 的鎖

    參數：
        code: Session 代碼

    返回：
        threading.Lock（同一個 code 永遠拿到同一把）
    """
    with _registry_lock:
        lock = _session_locks.get(code)
        if lock is None:
            lock = threading.Lock()
            _session_locks[code] = lock
        return lock


@contextmanager
def with_session_lock(code: str):
    """
    鎖定一個 Session

    範例：
        with with_session_lock(code):
            machine = SessionManager.get_session(code)
            machine.on_tick(...)

    注意：
        - 鎖會等待（不會 timeout），tick 很短不會卡太久
        - 不要在鎖內再鎖同一個 Session（Lock 不可重入）
    """
    lock = get_session_lock(code)
    with lock:
        yield


def release_session_lock(code: str) -> None:
    """Session 刪除後移除它的鎖"""
    with _registry_lock:
        _session_locks.pop(code, None)
