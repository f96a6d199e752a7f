"""
Recipe 服務：產生每回合的左右需求

純計算邏輯，不保存任何回合狀態（唯一共用的可變狀態是亂數來源）
"""
import logging
import random
from typing import Optional, Sequence

from models import Recipe, TokenId, TrackId

logger = logging.getLogger(__name__)


def left_tracks(left_count: int) -> range:
    """左邊軌道：1..left_count"""
    return range(1, left_count + 1)


def right_tracks(left_count: int, right_count: int) -> range:
    """右邊軌道：接在左邊後面，例如預設 6..10"""
    return range(left_count + 1, left_count + right_count + 1)


class RecipeGenerator:
    """
    Recipe 產生器

    規則：
    - 左軌道從 LeftTracks 均勻抽
    - 右軌道從 RightTracks 均勻抽
    - 左右齒輪各自從齒輪集合均勻抽（預設可以相同）

    參數：
        left_track_ids: 左邊軌道
        right_track_ids: 右邊軌道
        tokens: 齒輪集合
        allow_same_token_both_sides: False 時右齒輪會重抽直到跟左邊不同
        avoid_repeat: True 時避免跟上一回合一模一樣
        max_attempts: 重抽上限（保證一定會結束）
        rng: 亂數來源（測試時可注入固定 seed）
    """

    def __init__(
        self,
        left_track_ids: Sequence[TrackId],
        right_track_ids: Sequence[TrackId],
        tokens: Sequence[TokenId],
        allow_same_token_both_sides: bool = True,
        avoid_repeat: bool = False,
        max_attempts: int = 20,
        rng: Optional[random.Random] = None,
    ):
        self.left_track_ids = list(left_track_ids)
        self.right_track_ids = list(right_track_ids)
        self.tokens = list(tokens)
        self.allow_same_token_both_sides = allow_same_token_both_sides
        self.avoid_repeat = avoid_repeat
        self.max_attempts = max_attempts
        self.rng = rng or random.Random()

    @classmethod
    def from_settings(cls, settings, rng: Optional[random.Random] = None) -> "RecipeGenerator":
        return cls(
            left_track_ids=left_tracks(settings.left_track_count),
            right_track_ids=right_tracks(settings.left_track_count, settings.right_track_count),
            tokens=settings.tokens,
            allow_same_token_both_sides=settings.allow_same_token_both_sides,
            avoid_repeat=settings.avoid_repeat_recipe,
            max_attempts=settings.recipe_max_attempts,
            rng=rng,
        )

    def generate(self, previous: Optional[Recipe] = None) -> Recipe:
        """
        產生新的 Recipe

        參數：
            previous: 上一回合的 Recipe（只有 avoid_repeat 時才會用到）

        返回：
            新的 Recipe（重抽次數用完時直接用最後一次的結果）
        """
        recipe = self._draw()
        if not self.avoid_repeat or previous is None:
            return recipe

        attempts = 1
        while recipe == previous and attempts < self.max_attempts:
            recipe = self._draw()
            attempts += 1

        if recipe == previous:
            logger.debug(f"Recipe repeated after {attempts} attempts: {recipe.describe()}")
        return recipe

    def _draw(self) -> Recipe:
        left_token = self.rng.choice(self.tokens)
        right_token = self.rng.choice(self.tokens)

        if not self.allow_same_token_both_sides:
            attempts = 1
            while right_token == left_token and attempts < self.max_attempts:
                right_token = self.rng.choice(self.tokens)
                attempts += 1

        return Recipe(
            left_track=self.rng.choice(self.left_track_ids),
            left_token=left_token,
            right_track=self.rng.choice(self.right_track_ids),
            right_token=right_token,
        )
