"""
AvailabilityTracker：追蹤哪些齒輪目前在盒外（可被放置）

規則（邊緣觸發）：
- 按住 -> 放開：齒輪離盒，加到佇列尾端（已在佇列內就不加）
- 放開 -> 按住：齒輪回盒，從佇列任何位置移除
- 沒有變化：不做事

第一次取樣只記錄狀態，不會產生轉換。
"""
import logging
from collections import deque
from typing import Deque, Dict, List, Optional

from models import TokenId

logger = logging.getLogger(__name__)


class AvailabilityTracker:
    """盒外齒輪的 FIFO 佇列"""

    def __init__(self):
        self._held: Dict[TokenId, bool] = {}
        self._pool: Deque[TokenId] = deque()

    def sample(self, token: TokenId, is_held: bool) -> Optional[str]:
        """
        記錄一個齒輪本 tick 的按住狀態

        參數：
            token: 齒輪
            is_held: 是否按住

        返回：
            "released" / "returned" / None（沒有改變佇列）
        """
        was_held = self._held.get(token)
        self._held[token] = is_held

        # 第一次看到這個齒輪：只記錄，不觸發
        if was_held is None:
            return None

        if was_held and not is_held:
            if token not in self._pool:
                self._pool.append(token)
                logger.debug(f"Token {token} released, pool={list(self._pool)}")
                return "released"
        elif not was_held and is_held:
            if token in self._pool:
                self._pool.remove(token)
                logger.debug(f"Token {token} returned, pool={list(self._pool)}")
                return "returned"

        return None

    def take_oldest_available(self) -> Optional[TokenId]:
        """取出最早離盒的齒輪；佇列空時返回 None"""
        if not self._pool:
            return None
        return self._pool.popleft()

    def clear(self) -> None:
        """清空佇列（按住狀態保留，避免回合開始時產生假的轉換）"""
        self._pool.clear()

    @property
    def pool(self) -> List[TokenId]:
        return list(self._pool)
