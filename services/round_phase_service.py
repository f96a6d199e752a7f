"""
回合階段服務：判斷回合狀態的特性

回合狀態流程：
- AWAITING_LEFT_PLACEMENT -> AWAITING_RIGHT_PLACEMENT -> GESTURE_STAGE
- GESTURE_STAGE -> WON / LOST -> TRANSITIONING -> AWAITING_LEFT_PLACEMENT
- 任何階段都可能被 SESSION_ENDED 打斷
"""
from models import RoundState, Side


def accepts_placement(state: RoundState, side: Side) -> bool:
    """
    檢查目前狀態是否接受某一側的放置

    用途：
        on_tick 判斷 placement event 要處理還是忽略

    範例：
        accepts_placement(AWAITING_LEFT_PLACEMENT, LEFT) -> True
        accepts_placement(AWAITING_LEFT_PLACEMENT, RIGHT) -> False
        accepts_placement(WON, LEFT) -> False
    """
    if state == RoundState.AWAITING_LEFT_PLACEMENT:
        return side == Side.LEFT
    if state == RoundState.AWAITING_RIGHT_PLACEMENT:
        return side == Side.RIGHT
    return False


def is_result_phase(state: RoundState) -> bool:
    """
    檢查是否為結果顯示階段（WON / LOST）
    """
    return state in [RoundState.WON, RoundState.LOST]


def freezes_session_timer(state: RoundState) -> bool:
    """
    檢查此狀態下整場倒數是否暫停

    規則：
    - WON / LOST / TRANSITIONING：回合切換中，不扣時間
    - SESSION_ENDED：顯示分數中，計時器本身也會 pause
    """
    return state in [
        RoundState.WON,
        RoundState.LOST,
        RoundState.TRANSITIONING,
        RoundState.SESSION_ENDED,
    ]
