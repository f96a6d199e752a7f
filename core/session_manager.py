"""
Session Manager：管理遊戲 Session 的完整生命週期

職責：
1. 建立 Session（含設定覆寫）
2. 查詢 Session
3. 刪除 Session

原則：
- 單一職責：只管 Session 註冊，回合邏輯全部在 RoundStateMachine
- 資料結構優先：設定先驗證，不合法直接拒絕，不會建立半套 Session
"""
import logging
import threading
from typing import Any, Dict, Optional, Tuple

from config import get_settings
from core.exceptions import SessionNotFound
from core.locks import release_session_lock
from core.state_machine import RoundStateMachine
from services.naming_service import generate_session_code

logger = logging.getLogger(__name__)

_sessions: Dict[str, RoundStateMachine] = {}
_sessions_lock = threading.Lock()


class SessionManager:
    """Session 生命週期管理器"""

    @staticmethod
    def create_session(overrides: Optional[Dict[str, Any]] = None) -> Tuple[str, RoundStateMachine]:
        """
        建立新 Session

        流程：
        1. 以全域設定為基礎套用覆寫
        2. 建立狀態機（設定不合法會拋 InvalidConfiguration）
        3. 生成唯一的 Session 代碼並註冊

        參數：
            overrides: 要覆寫的設定欄位（例如 {"session_time_limit": 30}）

        返回：
            (code, RoundStateMachine) tuple
        """
        settings = get_settings()
        if overrides:
            settings = settings.model_copy(update=overrides)

        machine = RoundStateMachine(settings)

        with _sessions_lock:
            code = generate_session_code()
            while code in _sessions:
                code = generate_session_code()
                logger.warning(f"Session code collision detected, regenerating: {code}")
            _sessions[code] = machine

        logger.info(f"Created session {code} (time limit {settings.session_time_limit}s)")
        return code, machine

    @staticmethod
    def get_session(code: str) -> RoundStateMachine:
        """
        透過代碼取得 Session

        異常：
            SessionNotFound: Session 不存在
        """
        with _sessions_lock:
            machine = _sessions.get(code)
        if machine is None:
            raise SessionNotFound(code)
        return machine

    @staticmethod
    def delete_session(code: str) -> None:
        """
        刪除 Session

        異常：
            SessionNotFound: Session 不存在
        """
        with _sessions_lock:
            if code not in _sessions:
                raise SessionNotFound(code)
            del _sessions[code]
        release_session_lock(code)
        logger.info(f"Deleted session {code}")

    @staticmethod
    def session_count() -> int:
        with _sessions_lock:
            return len(_sessions)

    @staticmethod
    def clear() -> None:
        """清空所有 Session（測試用）"""
        with _sessions_lock:
            codes = list(_sessions)
            _sessions.clear()
        for code in codes:
            release_session_lock(code)
