"""
SessionTimer：整場遊戲的倒數計時與成功次數

跟回合邊界無關：
- 回合勝負、換回合都不會重置
- 只有明確的 reset()（重新開始 session）才會重置
"""
import logging

logger = logging.getLogger(__name__)

# float sums of tick deltas drift (10 x 0.1 != 1.0)
_EPSILON = 1e-9


class SessionTimer:
    def __init__(self, limit: float):
        self.limit = limit
        self.remaining = limit
        self.success_count = 0
        self.paused = False

    def tick(self, delta_time: float) -> None:
        """扣掉 delta_time（暫停中不扣，最低到 0）"""
        if self.paused or delta_time <= 0:
            return
        remaining = self.remaining - delta_time
        self.remaining = 0.0 if remaining <= _EPSILON else remaining

    def is_expired(self) -> bool:
        return self.remaining <= 0.0

    def record_success(self) -> int:
        self.success_count += 1
        return self.success_count

    def reset(self, limit: float = None) -> None:
        """
        重新開始 session：倒數回到上限、成功次數歸零、解除暫停

        參數：
            limit: 新的時間上限（不給就沿用原本的）
        """
        if limit is not None:
            self.limit = limit
        self.remaining = self.limit
        self.success_count = 0
        self.paused = False
        logger.info(f"Session timer reset to {self.limit:.1f}s")

    def pause(self) -> None:
        self.paused = True

    def resume(self) -> None:
        self.paused = False
