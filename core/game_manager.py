"""
Game Manager：管理 Game 的完整生命週期

職責：
1. 建立 Game（押注存入 escrow）
2. 第二位玩家加入（押注存入 escrow）
3. 出拳，雙方都出拳後立即結算並釋放 escrow
4. 建立者重置回合（雙方重新押注）
5. 查詢 Game

每個操作都是單一 transaction：
- 先上鎖、檢查所有前置條件
- 任何一個檢查失敗都直接拋出異常，不留下部分寫入
- 所有階段變更經過 GameStateMachine
"""
from typing import List
import logging

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import (
    NO_PARTY,
    MAX_STAKE,
    Game,
    GamePhase,
    GameOutcome,
    Move,
    RoundResult,
    EventLog,
)
from core.context import GameContext
from core.state_machine import GameStateMachine
from core.locks import with_game_lock
from core.exceptions import (
    InvalidStake,
    GameAlreadyActive,
    GameNotFound,
    InvalidGameState,
    CannotPlaySelf,
    UnauthorizedPlayer,
    MoveAlreadyMade,
    InvalidMove,
)
from services.address_service import derive_game_address
from services.outcome_service import determine_outcome, settle_payouts, winner_of
from services.state_service import bump_state_version
from database import transactional

logger = logging.getLogger(__name__)


def _is_party(identity: str) -> bool:
    return bool(identity) and identity != NO_PARTY


def _lock_game(ctx: GameContext, address: str) -> Game:
    game = with_game_lock(address, ctx.db).first()
    if not game:
        raise GameNotFound(address)
    return game


class GameManager:
    """Game 生命週期管理器"""

    @staticmethod
    @transactional
    def create_game(ctx: GameContext, caller: str, stake: int) -> Game:
        """
        建立新遊戲（caller 成為 player1）

        流程：
        1. 驗證 stake 與 caller
        2. 推導地址，檢查是否已有進行中的遊戲
        3. 建立（或重新初始化已結束的）Game
        4. player1 押注存入 escrow
        5. 記錄事件

        參數：
            ctx: GameContext
            caller: 呼叫者身份
            stake: 押注金額（> 0）

        返回：
            新的 Game

        異常：
            InvalidStake: stake <= 0 或超過 MAX_STAKE
            UnauthorizedPlayer: caller 是空值或 NO_PARTY
            GameAlreadyActive: 同一地址已有未結束的遊戲

        注意：
            - 已經 FINISHED 的紀錄會被重新初始化（generation + 1），
              上一輪的 escrow 在結算時已全部釋放
        """
        # 1. 驗證輸入
        if isinstance(stake, bool) or not isinstance(stake, int) or stake <= 0 or stake > MAX_STAKE:
            raise InvalidStake(stake)
        if not _is_party(caller):
            raise UnauthorizedPlayer("creator identity is required")

        # 2. 推導地址並檢查現有紀錄
        address = derive_game_address(caller, ctx.address_tag)
        game = with_game_lock(address, ctx.db).first()
        now = ctx.clock()

        if game is None:
            game = Game(address=address, generation=1)
            ctx.db.add(game)
        elif game.phase != GamePhase.FINISHED:
            raise GameAlreadyActive(address)
        else:
            GameStateMachine.transition(game, GamePhase.WAITING_FOR_PLAYER, ctx.db)
            game.generation += 1
            logger.info(f"Re-creating finished game {address} (generation {game.generation})")

        # 3. 初始化
        game.player1 = caller
        game.player2 = NO_PARTY
        game.stake = stake
        game.phase = GamePhase.WAITING_FOR_PLAYER
        game.move1 = Move.NONE
        game.move2 = Move.NONE
        game.winner = NO_PARTY
        game.round_number = 1
        game.created_at = now
        game.updated_at = now
        bump_state_version(game, "created")
        try:
            ctx.db.flush()
        except IntegrityError:
            # 同時建立：另一個請求已先寫入同一地址
            raise GameAlreadyActive(address)

        # 4. 押注存入 escrow
        ctx.ledger.deposit(caller, stake, game)

        # 5. 記錄事件
        ctx.db.add(EventLog(
            game_address=address,
            event_type="GAME_CREATED",
            data={"player1": caller, "stake": stake, "generation": game.generation},
        ))

        logger.info(f"Game {address} created by {caller} with stake {stake}")
        return game

    @staticmethod
    @transactional
    def join_game(ctx: GameContext, caller: str, address: str) -> Game:
        """
        第二位玩家加入（WAITING_FOR_PLAYER -> IN_PROGRESS）

        檢查順序：
        1. Game 必須存在
        2. caller 必須是合法身份
        3. caller 不能是建立者（不論目前階段）
        4. 階段必須是 WAITING_FOR_PLAYER

        異常：
            GameNotFound, UnauthorizedPlayer, CannotPlaySelf, InvalidGameState
        """
        game = _lock_game(ctx, address)

        if not _is_party(caller):
            raise UnauthorizedPlayer("joining identity is required")
        if caller == game.player1:
            raise CannotPlaySelf()
        if game.phase != GamePhase.WAITING_FOR_PLAYER:
            raise InvalidGameState(f"cannot join in phase {game.phase.value}")

        game.player2 = caller
        GameStateMachine.transition(game, GamePhase.IN_PROGRESS, ctx.db)

        # 對應 player1 的押注
        ctx.ledger.deposit(caller, game.stake, game)

        ctx.db.add(EventLog(
            game_address=address,
            event_type="PLAYER_JOINED",
            data={"player2": caller},
        ))
        bump_state_version(game, "joined")

        logger.info(f"Player {caller} joined game {address}")
        return game

    @staticmethod
    @transactional
    def make_move(ctx: GameContext, caller: str, address: str, move: Move) -> Game:
        """
        出拳；雙方都出拳後在同一個 transaction 內結算

        檢查順序：
        1. Game 必須存在
        2. 階段必須是 IN_PROGRESS（加入之前任何人出拳都是狀態錯誤）
        3. move 不能是 NONE
        4. caller 必須是 player1 或 player2
        5. caller 這回合還沒出拳

        結算（雙方都已出拳時）：
        - 判定勝負、寫入 winner
        - IN_PROGRESS -> FINISHED
        - 釋放 escrow
        - 寫入 RoundResult，並把 move1 / move2 清回 NONE

        異常：
            GameNotFound, InvalidGameState, InvalidMove,
            UnauthorizedPlayer, MoveAlreadyMade
        """
        game = _lock_game(ctx, address)

        if game.phase != GamePhase.IN_PROGRESS:
            raise InvalidGameState(f"cannot move in phase {game.phase.value}")

        try:
            move = Move(move)
        except ValueError:
            raise InvalidMove(f"unknown move {move!r}")
        if move == Move.NONE:
            raise InvalidMove("NONE is not a playable move")

        if not _is_party(caller):
            raise UnauthorizedPlayer()
        if caller == game.player1:
            slot = "move1"
        elif caller == game.player2:
            slot = "move2"
        else:
            raise UnauthorizedPlayer(f"{caller} is not a player of game {address}")

        if getattr(game, slot) != Move.NONE:
            raise MoveAlreadyMade()

        setattr(game, slot, move)
        ctx.db.add(EventLog(
            game_address=address,
            event_type="MOVE_MADE",
            data={"player": caller, "round_number": game.round_number},
        ))
        logger.info(f"Player {caller} made their move in game {address}")

        if game.move1 != Move.NONE and game.move2 != Move.NONE:
            GameManager._resolve_round(ctx, game)

        bump_state_version(game, "move")
        return game

    @staticmethod
    def _resolve_round(ctx: GameContext, game: Game) -> RoundResult:
        """結算回合（只由 make_move 在同一個 transaction 內呼叫）"""
        move1, move2 = game.move1, game.move2
        outcome = determine_outcome(move1, move2)
        payouts = settle_payouts(outcome, game.player1, game.player2, game.stake)

        game.winner = winner_of(outcome, game.player1, game.player2)
        GameStateMachine.transition(game, GamePhase.FINISHED, ctx.db)
        ctx.ledger.release(payouts, game)

        result = RoundResult(
            game_address=game.address,
            generation=game.generation,
            round_number=game.round_number,
            player1=game.player1,
            player2=game.player2,
            move1=move1,
            move2=move2,
            outcome=outcome,
            winner=game.winner,
            stake=game.stake,
            resolved_at=ctx.clock(),
        )
        ctx.db.add(result)

        # 結束後不保留雙方的拳，RoundResult 才是紀錄
        game.move1 = Move.NONE
        game.move2 = Move.NONE

        ctx.db.add(EventLog(
            game_address=game.address,
            event_type="ROUND_RESOLVED",
            data={
                "round_number": game.round_number,
                "move1": move1.value,
                "move2": move2.value,
                "outcome": outcome.value,
                "winner": game.winner,
            },
        ))

        if outcome == GameOutcome.DRAW:
            logger.info(f"Game {game.address}: draw, both players chose {move1.value}")
        else:
            logger.info(f"Game {game.address}: {game.winner} wins ({move1.value} vs {move2.value})")
        return result

    @staticmethod
    @transactional
    def reset_game(ctx: GameContext, caller: str, address: str) -> Game:
        """
        重置回合（FINISHED -> IN_PROGRESS），只有建立者可以

        流程：
        1. 驗證 caller 與階段
        2. 清除 moves / winner，round_number + 1
        3. 雙方重新押注（與 create + join 相同金額）

        異常：
            GameNotFound, UnauthorizedPlayer, InvalidGameState
        """
        game = _lock_game(ctx, address)

        if not _is_party(caller) or caller != game.player1:
            raise UnauthorizedPlayer("only the creator can reset the game")
        if game.phase != GamePhase.FINISHED:
            raise InvalidGameState(f"cannot reset in phase {game.phase.value}")

        game.move1 = Move.NONE
        game.move2 = Move.NONE
        game.winner = NO_PARTY
        game.round_number += 1
        GameStateMachine.transition(game, GamePhase.IN_PROGRESS, ctx.db)

        ctx.ledger.deposit(game.player1, game.stake, game)
        ctx.ledger.deposit(game.player2, game.stake, game)

        ctx.db.add(EventLog(
            game_address=address,
            event_type="GAME_RESET",
            data={"round_number": game.round_number},
        ))
        bump_state_version(game, "reset")

        logger.info(f"Game {address} reset for round {game.round_number}")
        return game

    @staticmethod
    def get_game(db: Session, address: str) -> Game:
        """
        透過地址取得 Game（純查詢，不上鎖）

        異常：
            GameNotFound: Game 不存在
        """
        game = db.query(Game).filter(Game.address == address).first()
        if not game:
            raise GameNotFound(address)
        return game

    @staticmethod
    def get_game_for_creator(db: Session, identity: str, tag: str) -> Game:
        return GameManager.get_game(db, derive_game_address(identity, tag))

    @staticmethod
    def list_games_for_player(db: Session, identity: str) -> List[Game]:
        """取得某身份參與的所有遊戲（player1 或 player2）"""
        if not _is_party(identity):
            return []
        return (
            db.query(Game)
            .filter(or_(Game.player1 == identity, Game.player2 == identity))
            .order_by(Game.created_at.desc())
            .all()
        )
