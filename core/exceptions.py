"""
自定義異常類別

集中管理所有遊戲邏輯異常，方便 API 層統一處理

注意：
    回合中的異常狀況（盒外沒有齒輪、放錯軌道）不是異常，
    只會記錄 warning，不會往上拋。
"""


class GearGameException(Exception):
    """所有遊戲異常的基類"""
    pass


# ============ 設定相關異常 ============

class InvalidConfiguration(GearGameException):
    """設定不合法（建構時檢查，不會在回合中途才發現）"""
    def __init__(self, field, reason):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid configuration for {field}: {reason}")


# ============ 狀態轉換異常 ============

class InvalidStateTransition(GearGameException):
    """非法的狀態轉換（程式錯誤，正常遊玩不會出現）"""
    def __init__(self, current, target):
        self.current = current
        self.target = target
        super().__init__(f"Cannot transition from {current.value} to {target.value}")


# ============ Session 相關異常 ============

class SessionNotFound(GearGameException):
    """Session 不存在"""
    def __init__(self, code):
        self.code = code
        super().__init__(f"Session {code} not found")
