from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from models import NotificationType, RoundState, Side


# ============ Request ============

class SessionCreate(BaseModel):
    """建立 Session 時可覆寫的設定（沒給的沿用全域設定）"""
    left_track_count: Optional[int] = None
    right_track_count: Optional[int] = None
    tokens: Optional[List[str]] = None
    allow_same_token_both_sides: Optional[bool] = None
    avoid_repeat_recipe: Optional[bool] = None
    require_gesture_stage: Optional[bool] = None
    required_duration: Optional[float] = None
    min_speed_threshold: Optional[float] = None
    speed_affects_progress: Optional[bool] = None
    max_multiplier: Optional[float] = None
    result_display_duration: Optional[float] = None
    next_round_delay: Optional[float] = None
    session_time_limit: Optional[float] = None
    session_end_display_duration: Optional[float] = None


class PlacementEventIn(BaseModel):
    side: Side
    track: int


class TickRequest(BaseModel):
    delta_time: float
    held: Dict[str, bool] = Field(default_factory=dict)
    cursor: Optional[List[float]] = None
    placements: List[PlacementEventIn] = Field(default_factory=list)
    check_session_timeout: bool = True


# ============ Response ============

class RecipeResponse(BaseModel):
    left_track: int
    left_token: str
    right_track: int
    right_token: str


class PlacementResponse(BaseModel):
    token: str
    track: int


class StateResponse(BaseModel):
    code: str
    state: RoundState
    round_number: int
    recipe: Optional[RecipeResponse]
    left: Optional[PlacementResponse]
    right: Optional[PlacementResponse]
    pool: List[str]
    gesture_progress: float
    remaining_time: float
    success_count: int
    elapsed: float


class SessionCreatedResponse(BaseModel):
    code: str
    state: StateResponse


class EventResponse(BaseModel):
    sequence: int
    round_number: int
    event_type: NotificationType
    elapsed: float
    data: Dict[str, Any]


class TickResponse(BaseModel):
    state: StateResponse
    events: List[EventResponse]


class HistoryResponse(BaseModel):
    wins: int
    rounds: List[Dict[str, Any]]
