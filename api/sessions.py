"""
Session API Endpoints

職責：
1. 建立 / 刪除 Session
2. 推進一個 tick（host loop 每個 time step 呼叫一次）
3. 查詢狀態、事件紀錄、回合紀錄

所有遊戲邏輯集中在 RoundStateMachine，這裡只做轉換與鎖定
"""
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
import logging

from core.exceptions import InvalidConfiguration, SessionNotFound
from core.locks import with_session_lock
from core.session_manager import SessionManager
from core.state_machine import RoundStateMachine
from models import PlacementEvent, RoundEvent
from schemas import (
    EventResponse,
    HistoryResponse,
    SessionCreate,
    SessionCreatedResponse,
    StateResponse,
    TickRequest,
    TickResponse,
)
from services.history_service import build_round_history, count_wins

router = APIRouter(prefix="/api/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)


def _state_response(code: str, machine: RoundStateMachine) -> StateResponse:
    snapshot = machine.snapshot()
    for key in ("recipe", "left", "right"):
        if snapshot[key] is not None:
            snapshot[key] = asdict(snapshot[key])
    return StateResponse(code=code, **snapshot)


def _event_response(event: RoundEvent) -> EventResponse:
    return EventResponse(
        sequence=event.sequence,
        round_number=event.round_number,
        event_type=event.event_type,
        elapsed=event.elapsed,
        data=event.data,
    )


@router.post("", response_model=SessionCreatedResponse)
def create_session(body: Optional[SessionCreate] = None):
    """
    建立新 Session（可覆寫部分設定）

    返回：
        - code: 6 位 Session 代碼
        - state: 第一回合的狀態
    """
    overrides = body.model_dump(exclude_none=True) if body else {}
    try:
        code, machine = SessionManager.create_session(overrides)
        with with_session_lock(code):
            return SessionCreatedResponse(code=code, state=_state_response(code, machine))

    except InvalidConfiguration as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create session: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{code}/state", response_model=StateResponse)
def get_state(code: str):
    """取得目前回合狀態"""
    try:
        machine = SessionManager.get_session(code)
        with with_session_lock(code):
            return _state_response(code, machine)

    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        logger.error(f"Failed to get state: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{code}/tick", response_model=TickResponse)
def tick(code: str, body: TickRequest):
    """
    推進一個 tick

    參數：
        delta_time: 距離上個 tick 的秒數
        held: 每個齒輪是否按住
        cursor: 游標位置
        placements: 本 tick 的放置事件（依序處理）
        check_session_timeout: 是否更新整場倒數

    返回：
        - state: tick 之後的狀態
        - events: 本 tick 產生的通知
    """
    try:
        machine = SessionManager.get_session(code)
        with with_session_lock(code):
            before = machine.last_sequence

            machine.on_tick(
                body.delta_time,
                held_samples=body.held,
                cursor_position=tuple(body.cursor) if body.cursor is not None else None,
                placement_events=[PlacementEvent(side=p.side, track=p.track) for p in body.placements],
                check_session_timeout=body.check_session_timeout,
            )

            return TickResponse(
                state=_state_response(code, machine),
                events=[_event_response(e) for e in machine.events_since(before)],
            )

    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        logger.error(f"Failed to tick session {code}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{code}/restart", response_model=StateResponse)
def restart_session(code: str):
    """重新開始整場（倒數、分數、回合紀錄全部重置）"""
    try:
        machine = SessionManager.get_session(code)
        with with_session_lock(code):
            machine.restart_session()
            logger.info(f"Session {code} restarted by request")
            return _state_response(code, machine)

    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        logger.error(f"Failed to restart session: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{code}/events", response_model=List[EventResponse])
def get_events(code: str, since: int = Query(0, ge=0)):
    """
    取得事件紀錄

    參數：
        since: 只回傳 sequence 大於此值的事件（短輪詢用）
    """
    try:
        machine = SessionManager.get_session(code)
        with with_session_lock(code):
            return [_event_response(e) for e in machine.events_since(since)]

    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        logger.error(f"Failed to get events: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{code}/history", response_model=HistoryResponse)
def get_history(code: str):
    """取得本場已結束的回合紀錄"""
    try:
        machine = SessionManager.get_session(code)
        with with_session_lock(code):
            results = machine.history
            return HistoryResponse(wins=count_wins(results), rounds=build_round_history(results))

    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        logger.error(f"Failed to get history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.delete("/{code}")
def delete_session(code: str):
    """刪除 Session"""
    try:
        SessionManager.delete_session(code)
        return {"status": "ok"}

    except SessionNotFound:
        raise HTTPException(status_code=404, detail="Session not found")
    except Exception as e:
        logger.error(f"Failed to delete session: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
