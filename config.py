from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # 軌道：左邊 1..N，右邊 N+1..N+M
    left_track_count: int = 5
    right_track_count: int = 5

    # 齒輪種類（原本是 A/B/C 三個按鍵）
    tokens: List[str] = ["A", "B", "C"]

    # Recipe 生成
    allow_same_token_both_sides: bool = True
    avoid_repeat_recipe: bool = False
    recipe_max_attempts: int = 20

    # 放好齒輪後的滑鼠階段
    require_gesture_stage: bool = True
    required_duration: float = 1.5
    min_speed_threshold: float = 50.0
    speed_affects_progress: bool = True
    max_multiplier: float = 3.0

    # 回合之間的等待（秒）
    result_display_duration: float = 1.0
    next_round_delay: float = 0.8

    # 整場倒數
    session_time_limit: float = 60.0
    session_end_display_duration: float = 3.0

    event_log_limit: int = 500
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "GEARGAME_"


@lru_cache()
def get_settings():
    return Settings()
