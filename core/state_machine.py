"""
RoundStateMachine：回合狀態機（核心）

職責：
1. 每個 tick 做齒輪離盒/回盒的邊緣偵測（任何狀態都做）
2. 處理左右放置事件（從盒外佇列取最早的齒輪）
3. 驅動滑鼠階段進度
4. 比對 Recipe，安排 勝/負 -> 換回合 的延遲動作
5. 整場倒數結束時進入 SESSION_ENDED，顯示分數後重新開始

原則：
- 所有狀態變更經過 _transition()，非法轉換直接拋 InvalidStateTransition
- 放錯不會馬上失敗：兩邊都放完（加上滑鼠階段）才一次比對
- 回合中的異常狀況只記 warning，tick 一定會跑完
"""
import logging
import random
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Mapping, Optional

from config import Settings, get_settings
from core.availability import AvailabilityTracker
from core.exceptions import InvalidConfiguration, InvalidStateTransition
from core.scheduler import DeferredScheduler
from core.session_timer import SessionTimer
from models import (
    NotificationType,
    PlacementEvent,
    PlacementRecord,
    Position,
    Recipe,
    RoundEvent,
    RoundOutcome,
    RoundResult,
    RoundState,
    Side,
    TokenId,
)
from services.gesture_service import GestureProgressTracker
from services.recipe_service import RecipeGenerator, left_tracks, right_tracks
from services.round_phase_service import accepts_placement, freezes_session_timer, is_result_phase
from services.scoring_service import evaluate_placements, expected_placement

logger = logging.getLogger(__name__)

Listener = Callable[[RoundEvent], None]

# SESSION_ENDED 可以打斷任何回合階段
ALLOWED_TRANSITIONS = {
    RoundState.AWAITING_LEFT_PLACEMENT: {
        RoundState.AWAITING_RIGHT_PLACEMENT,
        RoundState.SESSION_ENDED,
    },
    RoundState.AWAITING_RIGHT_PLACEMENT: {
        RoundState.GESTURE_STAGE,
        RoundState.WON,
        RoundState.LOST,
        RoundState.SESSION_ENDED,
    },
    RoundState.GESTURE_STAGE: {
        RoundState.WON,
        RoundState.LOST,
        RoundState.SESSION_ENDED,
    },
    RoundState.WON: {RoundState.TRANSITIONING, RoundState.SESSION_ENDED},
    RoundState.LOST: {RoundState.TRANSITIONING, RoundState.SESSION_ENDED},
    RoundState.TRANSITIONING: {
        RoundState.AWAITING_LEFT_PLACEMENT,
        RoundState.SESSION_ENDED,
    },
    RoundState.SESSION_ENDED: {RoundState.AWAITING_LEFT_PLACEMENT},
}


def validate_settings(settings: Settings) -> None:
    """
    建構時檢查設定，有問題直接拋 InvalidConfiguration

    檢查項目：
    - 左右軌道數量 >= 1
    - 齒輪集合非空且不重複
    - 不允許左右同齒輪時，至少要有兩種齒輪
    - 滑鼠階段參數、各種等待時間、整場時間
    """
    if settings.left_track_count < 1:
        raise InvalidConfiguration("left_track_count", "need at least one left track")
    if settings.right_track_count < 1:
        raise InvalidConfiguration("right_track_count", "need at least one right track")

    if not settings.tokens:
        raise InvalidConfiguration("tokens", "token set is empty")
    if len(set(settings.tokens)) != len(settings.tokens):
        raise InvalidConfiguration("tokens", f"duplicate tokens in {settings.tokens}")
    if not settings.allow_same_token_both_sides and len(settings.tokens) < 2:
        raise InvalidConfiguration(
            "allow_same_token_both_sides",
            "distinct tokens per side need at least two tokens",
        )
    if settings.recipe_max_attempts < 1:
        raise InvalidConfiguration("recipe_max_attempts", "must be >= 1")

    if settings.required_duration < 0:
        raise InvalidConfiguration("required_duration", "must not be negative")
    if settings.require_gesture_stage and settings.required_duration == 0:
        raise InvalidConfiguration(
            "required_duration",
            "must be positive when the gesture stage is required",
        )
    if settings.min_speed_threshold < 0:
        raise InvalidConfiguration("min_speed_threshold", "must not be negative")
    if settings.max_multiplier < 1:
        raise InvalidConfiguration("max_multiplier", "must be >= 1")

    for name in ("result_display_duration", "next_round_delay", "session_end_display_duration"):
        if getattr(settings, name) < 0:
            raise InvalidConfiguration(name, "must not be negative")
    if settings.session_time_limit <= 0:
        raise InvalidConfiguration("session_time_limit", "must be positive")
    if settings.event_log_limit < 1:
        raise InvalidConfiguration("event_log_limit", "must be >= 1")


class RoundStateMachine:
    """
    回合狀態機

    參數：
        settings: 遊戲設定（不給就用 get_settings()）
        recipe_generator: 任何有 generate(previous=None) -> Recipe 的物件
        rng: 給預設 RecipeGenerator 用的亂數來源

    異常：
        InvalidConfiguration: 設定不合法
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        recipe_generator=None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or get_settings()
        validate_settings(self.settings)

        self.tokens: List[TokenId] = list(self.settings.tokens)
        self.left_tracks = left_tracks(self.settings.left_track_count)
        self.right_tracks = right_tracks(
            self.settings.left_track_count, self.settings.right_track_count
        )

        self.recipe_generator = recipe_generator or RecipeGenerator.from_settings(self.settings, rng=rng)
        self.availability = AvailabilityTracker()
        self.gesture = GestureProgressTracker.from_settings(self.settings)
        self.session_timer = SessionTimer(self.settings.session_time_limit)
        self.scheduler = DeferredScheduler()

        self._state = RoundState.AWAITING_LEFT_PLACEMENT
        self._recipe: Optional[Recipe] = None
        self.left_placement: Optional[PlacementRecord] = None
        self.right_placement: Optional[PlacementRecord] = None
        self.round_number = 0
        self.elapsed = 0.0
        self._cursor: Position = (0.0, 0.0)

        self._listeners: List[Listener] = []
        self._events: Deque[RoundEvent] = deque(maxlen=self.settings.event_log_limit)
        self._sequence = 0
        self._history: List[RoundResult] = []

        self._start_round(forced=True)

    # ------------------------------------------------------------------
    # 查詢
    # ------------------------------------------------------------------

    def current_round_state(self) -> RoundState:
        return self._state

    def current_recipe(self) -> Recipe:
        return self._recipe

    def gesture_progress_normalized(self) -> float:
        return self.gesture.normalized

    def session_remaining_time(self) -> float:
        return self.session_timer.remaining

    def session_success_count(self) -> int:
        return self.session_timer.success_count

    @property
    def pool(self) -> List[TokenId]:
        return self.availability.pool

    @property
    def events(self) -> List[RoundEvent]:
        return list(self._events)

    @property
    def last_sequence(self) -> int:
        return self._sequence

    def events_since(self, sequence: int) -> List[RoundEvent]:
        return [event for event in self._events if event.sequence > sequence]

    @property
    def history(self) -> List[RoundResult]:
        return list(self._history)

    def snapshot(self) -> Dict[str, Any]:
        """目前狀態的 dict（給 API 用）"""
        recipe = self._recipe
        return {
            "state": self._state,
            "round_number": self.round_number,
            "recipe": recipe,
            "left": self.left_placement,
            "right": self.right_placement,
            "pool": self.pool,
            "gesture_progress": self.gesture_progress_normalized(),
            "remaining_time": self.session_remaining_time(),
            "success_count": self.session_success_count(),
            "elapsed": self.elapsed,
        }

    # ------------------------------------------------------------------
    # 對外通知
    # ------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _notify(self, event_type: NotificationType, **data) -> RoundEvent:
        self._sequence += 1
        event = RoundEvent(
            sequence=self._sequence,
            round_number=self.round_number,
            event_type=event_type,
            elapsed=self.elapsed,
            data=data,
        )
        self._events.append(event)

        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Listener failed on {event_type.value}: {e}", exc_info=True)

        return event

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def on_tick(
        self,
        delta_time: float,
        held_samples: Optional[Mapping[TokenId, bool]] = None,
        cursor_position: Optional[Position] = None,
        placement_events: Iterable[PlacementEvent] = (),
        check_session_timeout: bool = True,
    ) -> RoundState:
        """
        每個 time step 呼叫一次

        順序：
        1. 邊緣偵測（任何狀態都做，換回合期間離盒的齒輪也會排進佇列）
        2. 執行到期的延遲動作（結果顯示、換回合、session 結束顯示）
        3. 依目前狀態處理放置事件或滑鼠階段
        4. 更新整場倒數（WON / LOST / TRANSITIONING 期間不扣）

        參數：
            delta_time: 距離上個 tick 的秒數（負數視為 0）
            held_samples: 每個齒輪是否按住；沒給的齒輪維持上次狀態
            cursor_position: 游標位置
            placement_events: 本 tick 的放置事件（依序處理）
            check_session_timeout: False 時本 tick 不更新也不檢查倒數

        返回：
            tick 結束後的狀態
        """
        delta_time = max(0.0, delta_time)
        self.elapsed += delta_time
        if cursor_position is not None:
            self._cursor = tuple(cursor_position)

        # 1. 邊緣偵測
        self._sample_availability(held_samples or {})

        # 2. 延遲動作
        self._run_due_continuations()

        # 3. 狀態處理
        state_at_start = self._state
        for event in placement_events:
            self._handle_placement_event(event)

        if state_at_start == RoundState.GESTURE_STAGE and self._state == RoundState.GESTURE_STAGE:
            self._update_gesture(delta_time)

        # 4. 倒數
        if check_session_timeout:
            self._update_session_timer(delta_time)

        return self._state

    def _sample_availability(self, held_samples: Mapping[TokenId, bool]) -> None:
        for token in held_samples:
            if token not in self.tokens:
                logger.warning(f"Ignoring held sample for unknown token {token!r}")

        for token in self.tokens:
            if token not in held_samples:
                continue
            change = self.availability.sample(token, bool(held_samples[token]))
            if change == "released":
                logger.info(f"Token {token} left the box (pool={self.pool})")
                self._notify(NotificationType.TOKEN_RELEASED, token=token)
            elif change == "returned":
                logger.info(f"Token {token} returned to the box (pool={self.pool})")
                self._notify(NotificationType.TOKEN_RETURNED, token=token)

    def _run_due_continuations(self) -> None:
        # 到期動作可能再排新的 0 秒動作，所以一直取到沒有為止
        due = self.scheduler.pop_due(self.elapsed)
        while due:
            for deadline in due:
                deadline.action()
            due = self.scheduler.pop_due(self.elapsed)

    # ------------------------------------------------------------------
    # 放置
    # ------------------------------------------------------------------

    def _handle_placement_event(self, event: PlacementEvent) -> None:
        side = Side(event.side)

        if not accepts_placement(self._state, side):
            logger.debug(f"Ignoring {side.value} placement on track {event.track} in {self._state.value}")
            return

        valid_tracks = self.left_tracks if side == Side.LEFT else self.right_tracks
        if event.track not in valid_tracks:
            logger.warning(f"Track {event.track} is not a {side.value.lower()} track, placement ignored")
            self._notify(
                NotificationType.PLACEMENT_IGNORED,
                side=side.value,
                track=event.track,
                reason="track_not_on_side",
            )
            return

        token = self.availability.take_oldest_available()
        if token is None:
            logger.warning(f"{side.value} track {event.track} pressed but no token is out of the box")
            self._notify(
                NotificationType.PLACEMENT_IGNORED,
                side=side.value,
                track=event.track,
                reason="empty_pool",
            )
            return

        record = PlacementRecord(token=token, track=event.track)

        if side == Side.LEFT:
            self.left_placement = record
            logger.info(f"Left placement: {token} on track {event.track}")
            self._notify(NotificationType.LEFT_PLACED, token=token, track=event.track)
            self._transition(RoundState.AWAITING_RIGHT_PLACEMENT)
            return

        self.right_placement = record
        logger.info(f"Right placement: {token} on track {event.track}")
        self._notify(NotificationType.RIGHT_PLACED, token=token, track=event.track)

        if self.settings.require_gesture_stage:
            self._transition(RoundState.GESTURE_STAGE)
            self.gesture.enter(self._cursor)
            self._notify(NotificationType.GESTURE_STAGE_ENTERED)
        else:
            self._evaluate()

    # ------------------------------------------------------------------
    # 滑鼠階段與結算
    # ------------------------------------------------------------------

    def _update_gesture(self, delta_time: float) -> None:
        result = self.gesture.tick(delta_time, self._cursor)
        if result.completed:
            logger.info(f"Gesture completed after {self.elapsed:.2f}s of session time")
            self._evaluate()

    def _evaluate(self) -> None:
        """比對四個欄位，決定 WON / LOST，並排定結果顯示結束"""
        recipe = self._recipe
        mismatches = evaluate_placements(recipe, self.left_placement, self.right_placement)
        outcome = RoundOutcome.LOST if mismatches else RoundOutcome.WON

        self._history.append(RoundResult(
            round_number=self.round_number,
            recipe=recipe,
            left=self.left_placement,
            right=self.right_placement,
            outcome=outcome,
        ))

        if outcome == RoundOutcome.WON:
            self._transition(RoundState.WON)
            score = self.session_timer.record_success()
            logger.info(f"Round {self.round_number} won ({recipe.describe()}), score={score}")
            self._notify(NotificationType.ROUND_WON, score=score)
        else:
            for side in mismatches:
                placed = self.left_placement if side == Side.LEFT else self.right_placement
                expected = expected_placement(recipe, side)
                logger.warning(
                    f"{side.value} placement wrong: got {placed}, expected "
                    f"{expected.token} on track {expected.track}"
                )
                self._notify(
                    NotificationType.PLACEMENT_WRONG,
                    side=side.value,
                    placed_token=placed.token if placed else None,
                    placed_track=placed.track if placed else None,
                    expected_token=expected.token,
                    expected_track=expected.track,
                )
            self._transition(RoundState.LOST)
            logger.info(f"Round {self.round_number} lost ({recipe.describe()})")
            self._notify(NotificationType.ROUND_LOST, wrong_sides=[s.value for s in mismatches])

        self.scheduler.schedule(
            self.elapsed,
            self.settings.result_display_duration,
            "clear_result",
            self._finish_result_display,
        )

    def _finish_result_display(self) -> None:
        if not is_result_phase(self._state):
            return
        self._transition(RoundState.TRANSITIONING)
        self.scheduler.schedule(
            self.elapsed,
            self.settings.next_round_delay,
            "next_round",
            self._start_round,
        )

    def _start_round(self, forced: bool = False) -> None:
        """
        開始新回合

        流程：
        1. 清掉本回合的放置紀錄、滑鼠進度、盒外佇列
        2. 產生新 Recipe
        3. 回到等待左側放置
        """
        self.left_placement = None
        self.right_placement = None
        self.gesture.reset()
        self.availability.clear()

        previous = self._recipe
        self._recipe = self.recipe_generator.generate(previous=previous)
        self.round_number += 1

        if forced:
            self._state = RoundState.AWAITING_LEFT_PLACEMENT
        else:
            self._transition(RoundState.AWAITING_LEFT_PLACEMENT)

        logger.info(f"[Round {self.round_number}] New recipe: {self._recipe.describe()}")
        self._notify(NotificationType.ROUND_STARTED, recipe=self._recipe.describe())

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def _update_session_timer(self, delta_time: float) -> None:
        if freezes_session_timer(self._state):
            return

        self.session_timer.tick(delta_time)
        if self.session_timer.is_expired():
            self._end_session()

    def _end_session(self) -> None:
        """
        倒數結束：打斷目前回合，顯示分數，一段時間後重新開始

        注意：
            已排定的換回合動作全部取消
        """
        self.scheduler.cancel_all()
        self.session_timer.pause()
        self.gesture.reset()
        self._transition(RoundState.SESSION_ENDED)

        score = self.session_timer.success_count
        logger.info(f"Session ended with score {score} after {self.round_number} rounds")
        self._notify(NotificationType.SESSION_ENDED, score=score)

        self.scheduler.schedule(
            self.elapsed,
            self.settings.session_end_display_duration,
            "session_restart",
            self.restart_session,
        )

    def restart_session(self) -> None:
        """
        重新開始整場：倒數回到上限、成功次數歸零、清空回合紀錄，立刻開新回合
        """
        self.scheduler.cancel_all()
        self.session_timer.reset(self.settings.session_time_limit)
        self._history.clear()
        self.round_number = 0
        self._recipe = None
        self._notify(NotificationType.SESSION_RESTARTED)
        self._start_round(forced=True)

    # ------------------------------------------------------------------
    # 狀態轉換
    # ------------------------------------------------------------------

    def _transition(self, target: RoundState) -> None:
        if target not in ALLOWED_TRANSITIONS[self._state]:
            raise InvalidStateTransition(self._state, target)

        logger.debug(f"Round {self.round_number}: {self._state.value} -> {target.value}")
        self._state = target
