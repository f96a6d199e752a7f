"""
遊戲資料模型

全部都是純記憶體的值物件，不涉及持久化：
- TokenId：齒輪種類（字串，例如 "A"）
- TrackId：軌道編號（整數，左右兩組互不重疊）
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

TokenId = str
TrackId = int
Position = Tuple[float, ...]


class RoundState(str, Enum):
    AWAITING_LEFT_PLACEMENT = "AWAITING_LEFT_PLACEMENT"
    AWAITING_RIGHT_PLACEMENT = "AWAITING_RIGHT_PLACEMENT"
    GESTURE_STAGE = "GESTURE_STAGE"
    WON = "WON"
    LOST = "LOST"
    TRANSITIONING = "TRANSITIONING"
    SESSION_ENDED = "SESSION_ENDED"


class Side(str, Enum):
    LEFT = "LEFT"
    RIGHT = "RIGHT"


class RoundOutcome(str, Enum):
    WON = "WON"
    LOST = "LOST"


class NotificationType(str, Enum):
    TOKEN_RELEASED = "TOKEN_RELEASED"
    TOKEN_RETURNED = "TOKEN_RETURNED"
    LEFT_PLACED = "LEFT_PLACED"
    RIGHT_PLACED = "RIGHT_PLACED"
    PLACEMENT_WRONG = "PLACEMENT_WRONG"
    PLACEMENT_IGNORED = "PLACEMENT_IGNORED"
    GESTURE_STAGE_ENTERED = "GESTURE_STAGE_ENTERED"
    ROUND_STARTED = "ROUND_STARTED"
    ROUND_WON = "ROUND_WON"
    ROUND_LOST = "ROUND_LOST"
    SESSION_ENDED = "SESSION_ENDED"
    SESSION_RESTARTED = "SESSION_RESTARTED"


@dataclass(frozen=True)
class Recipe:
    """
    一個回合的需求：左右各一個 (軌道, 齒輪)

    回合開始時產生，回合結束前唯讀，下一回合直接換新的（不修改）。
    """

    left_track: TrackId
    left_token: TokenId
    right_track: TrackId
    right_token: TokenId

    def describe(self) -> str:
        return (
            f"L: track {self.left_track} <- {self.left_token} | "
            f"R: track {self.right_track} <- {self.right_token}"
        )


@dataclass(frozen=True)
class PlacementRecord:
    token: TokenId
    track: TrackId


@dataclass(frozen=True)
class PlacementEvent:
    """玩家按下某一側的軌道（host 每個 tick 傳進來）"""

    side: Side
    track: TrackId


@dataclass(frozen=True)
class GestureTick:
    progress: float
    completed: bool


@dataclass
class RoundEvent:
    """
    一筆事件紀錄（每個對外通知都會留一筆）
    """

    sequence: int
    round_number: int
    event_type: NotificationType
    elapsed: float
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RoundResult:
    round_number: int
    recipe: Recipe
    left: Optional[PlacementRecord]
    right: Optional[PlacementRecord]
    outcome: RoundOutcome
