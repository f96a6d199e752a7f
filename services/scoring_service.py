"""
計分服務：判斷一回合的放置是否完全符合 Recipe

純計算邏輯，不改變回合狀態（由 RoundStateMachine 負責）
"""
from typing import List, Optional

from models import PlacementRecord, Recipe, Side


def expected_placement(recipe: Recipe, side: Side) -> PlacementRecord:
    """取得 Recipe 在某一側要求的 (齒輪, 軌道)"""
    if side == Side.LEFT:
        return PlacementRecord(token=recipe.left_token, track=recipe.left_track)
    return PlacementRecord(token=recipe.right_token, track=recipe.right_track)


def evaluate_placements(
    recipe: Recipe,
    left: Optional[PlacementRecord],
    right: Optional[PlacementRecord],
) -> List[Side]:
    """
    比對左右兩側的放置紀錄

    規則：
    - 四個欄位（左軌道、左齒輪、右軌道、右齒輪）必須全部相同
    - 尚未放置（None）一定不符合

    參數：
        recipe: 本回合需求
        left: 左側放置紀錄
        right: 右側放置紀錄

    返回：
        不符合的側別列表；空列表代表獲勝

    範例：
        recipe = L: track 1 <- A | R: track 6 <- B
        left = (A, 1), right = (B, 7) -> [Side.RIGHT]
    """
    mismatches = []
    for side, placed in ((Side.LEFT, left), (Side.RIGHT, right)):
        if placed is None or placed != expected_placement(recipe, side):
            mismatches.append(side)
    return mismatches
