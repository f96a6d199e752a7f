"""
延遲動作排程（取代 coroutine 的 WaitForSeconds）

每個延遲動作只是一個「到期時間 + callback」，
on_tick 累積的時間超過到期時間就執行，不會阻塞 tick。
"""
from dataclasses import dataclass
from typing import Callable, List


@dataclass
class Deadline:
    at: float
    name: str
    action: Callable[[], None]


class DeferredScheduler:
    def __init__(self):
        self._pending: List[Deadline] = []

    def schedule(self, now: float, delay: float, name: str, action: Callable[[], None]) -> Deadline:
        deadline = Deadline(at=now + max(0.0, delay), name=name, action=action)
        self._pending.append(deadline)
        return deadline

    def pop_due(self, now: float) -> List[Deadline]:
        """取出所有已到期的動作（依到期時間排序）"""
        due = sorted((d for d in self._pending if d.at <= now), key=lambda d: d.at)
        self._pending = [d for d in self._pending if d.at > now]
        return due

    def cancel_all(self) -> None:
        self._pending.clear()

    def __len__(self) -> int:
        return len(self._pending)
