"""
Gesture progress service.

Accumulates "seconds of qualifying motion" from per-tick cursor samples.
Motion below the floor speed adds nothing; faster motion adds up to
`max_multiplier` times the elapsed time.
"""
import math
from typing import Optional

from models import GestureTick, Position

# float sums of tick deltas drift (10 x 0.1 != 1.0)
_EPSILON = 1e-9


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


class GestureProgressTracker:
    def __init__(
        self,
        required_duration: float,
        min_speed_threshold: float,
        speed_affects_progress: bool = True,
        max_multiplier: float = 3.0,
    ):
        self.required_duration = required_duration
        self.min_speed_threshold = min_speed_threshold
        self.speed_affects_progress = speed_affects_progress
        self.max_multiplier = max_multiplier

        self._progress = 0.0
        self._completed = False
        self._previous: Optional[Position] = None

    @classmethod
    def from_settings(cls, settings) -> "GestureProgressTracker":
        return cls(
            required_duration=settings.required_duration,
            min_speed_threshold=settings.min_speed_threshold,
            speed_affects_progress=settings.speed_affects_progress,
            max_multiplier=settings.max_multiplier,
        )

    @property
    def progress(self) -> float:
        """Accumulated progress in seconds, within [0, required_duration]."""
        return self._progress

    @property
    def normalized(self) -> float:
        if self.required_duration <= 0:
            return 1.0 if self._completed else 0.0
        return _clamp01(self._progress / self.required_duration)

    @property
    def completed(self) -> bool:
        return self._completed

    def enter(self, position: Position) -> None:
        """Start a gesture stage with `position` as the baseline sample."""
        self._progress = 0.0
        self._completed = False
        self._previous = tuple(position)

    def reset(self) -> None:
        self._progress = 0.0
        self._completed = False
        self._previous = None

    def tick(self, delta_time: float, position: Position) -> GestureTick:
        current = tuple(position)
        previous = self._previous if self._previous is not None else current
        self._previous = current

        if self.required_duration <= 0:
            self._completed = True
            return GestureTick(progress=1.0, completed=True)

        if not self._completed:
            speed = math.dist(current, previous) / delta_time if delta_time > 0 else 0.0

            if speed + _EPSILON >= self.min_speed_threshold:
                multiplier = 1.0
                if self.speed_affects_progress:
                    floor = max(self.min_speed_threshold, 0.0001)
                    excess = _clamp01((speed - self.min_speed_threshold) / floor)
                    multiplier = _lerp(1.0, self.max_multiplier, excess)
                self._progress += delta_time * multiplier

            self._progress = min(max(self._progress, 0.0), self.required_duration)
            if self._progress + _EPSILON >= self.required_duration:
                self._progress = self.required_duration
                self._completed = True

        return GestureTick(progress=self.normalized, completed=self._completed)
