"""
Game 狀態機：集中管理所有階段轉換

合法的轉換：
    WAITING_FOR_PLAYER -> IN_PROGRESS   (join)
    IN_PROGRESS        -> FINISHED      (第二個玩家出拳後結算)
    FINISHED           -> IN_PROGRESS   (reset)
    FINISHED           -> WAITING_FOR_PLAYER  (建立者重新 create)

其他轉換一律拒絕。
"""
from sqlalchemy.orm import Session
import logging

from models import Game, GamePhase, EventLog
from core.exceptions import InvalidStateTransition

logger = logging.getLogger(__name__)


class GameStateMachine:
    """Game 階段轉換的唯一入口"""

    ALLOWED_TRANSITIONS = {
        GamePhase.WAITING_FOR_PLAYER: {GamePhase.IN_PROGRESS},
        GamePhase.IN_PROGRESS: {GamePhase.FINISHED},
        GamePhase.FINISHED: {GamePhase.IN_PROGRESS, GamePhase.WAITING_FOR_PLAYER},
    }

    @classmethod
    def can_transition(cls, current: GamePhase, target: GamePhase) -> bool:
        return target in cls.ALLOWED_TRANSITIONS.get(current, set())

    @classmethod
    def transition(cls, game: Game, target: GamePhase, db: Session) -> Game:
        """
        轉換 Game 階段並記錄 GAME_PHASE_CHANGED 事件

        參數：
            game: 已經上鎖的 Game
            target: 目標階段
            db: SQLAlchemy Session

        返回：
            更新後的 Game

        異常：
            InvalidStateTransition: 轉換不合法
        """
        current = game.phase
        if not cls.can_transition(current, target):
            raise InvalidStateTransition(
                f"{current.value} -> {target.value}"
            )

        game.phase = target
        db.add(EventLog(
            game_address=game.address,
            event_type="GAME_PHASE_CHANGED",
            data={"from": current.value, "to": target.value},
        ))

        logger.info(f"Game {game.address} phase {current.value} -> {target.value}")
        return game
