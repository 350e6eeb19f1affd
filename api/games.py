"""
Game API Endpoints - 短輪詢版

重點：
1. create / join / move / reset 四個操作，全部交給 GameManager
2. 每次成功變更都會提升 state_version，前端靠 GET /{address} 輪詢
3. 業務異常轉成 4xx（帶固定 code），其餘一律 500
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

import logging

from database import get_db
from models import Game
from schemas import (
    GameCreate,
    MoveSubmit,
    GameResponse,
    RoundResultResponse,
    EscrowEntryResponse,
    EscrowResponse,
)
from core.context import GameContext
from core.escrow import DatabaseEscrowLedger
from core.game_manager import GameManager
from core.exceptions import RpsGameException
from services.history_service import get_round_history, get_last_result
from api.dependencies import get_caller_identity, get_game_context, to_http_exception

router = APIRouter(prefix="/api/games", tags=["games"])
logger = logging.getLogger(__name__)


def build_game_response(game: Game, db: Session) -> GameResponse:
    response = GameResponse.model_validate(game)
    last = get_last_result(game, db)
    if last is not None:
        response.last_result = RoundResultResponse.model_validate(last)
    return response


@router.post("", response_model=GameResponse, status_code=201)
def create_game(
    game_data: GameCreate,
    caller: str = Depends(get_caller_identity),
    ctx: GameContext = Depends(get_game_context),
):
    """
    建立遊戲（caller 成為 player1，押注存入 escrow）

    返回：
        新遊戲的完整狀態（含推導出的 address）
    """
    try:
        game = GameManager.create_game(ctx, caller, game_data.stake)
        return build_game_response(game, ctx.db)

    except RpsGameException as e:
        logger.warning(f"Create rejected for {caller}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to create game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{address}", response_model=GameResponse)
def get_game(address: str, db: Session = Depends(get_db)):
    """
    查詢遊戲狀態（純讀取）

    前端輪詢此 endpoint，比較 state_version 判斷是否有新狀態
    """
    try:
        game = GameManager.get_game(db, address)
        return build_game_response(game, db)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{address}/join", response_model=GameResponse)
def join_game(
    address: str,
    caller: str = Depends(get_caller_identity),
    ctx: GameContext = Depends(get_game_context),
):
    """
    加入遊戲（WAITING_FOR_PLAYER -> IN_PROGRESS）

    前置條件：
    - 遊戲存在
    - caller 不是建立者
    - 遊戲還在等待第二位玩家
    """
    try:
        game = GameManager.join_game(ctx, caller, address)
        return build_game_response(game, ctx.db)

    except RpsGameException as e:
        logger.warning(f"Join rejected for {caller} on {address}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to join game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{address}/move", response_model=GameResponse)
def make_move(
    address: str,
    move_data: MoveSubmit,
    caller: str = Depends(get_caller_identity),
    ctx: GameContext = Depends(get_game_context),
):
    """
    出拳

    第二個出拳的請求會在同一個 transaction 內完成結算，
    回傳時 phase 已經是 FINISHED，結果在 last_result。
    """
    try:
        game = GameManager.make_move(ctx, caller, address, move_data.move)
        return build_game_response(game, ctx.db)

    except RpsGameException as e:
        logger.warning(f"Move rejected for {caller} on {address}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to make move: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.post("/{address}/reset", response_model=GameResponse)
def reset_game(
    address: str,
    caller: str = Depends(get_caller_identity),
    ctx: GameContext = Depends(get_game_context),
):
    """
    重置回合（建立者 endpoint，FINISHED -> IN_PROGRESS）

    效果：
    - 清除雙方的拳與贏家
    - 雙方重新押注
    """
    try:
        game = GameManager.reset_game(ctx, caller, address)
        return build_game_response(game, ctx.db)

    except RpsGameException as e:
        logger.warning(f"Reset rejected for {caller} on {address}: {e}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to reset game: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{address}/history", response_model=List[RoundResultResponse])
def get_history(address: str, db: Session = Depends(get_db)):
    """取得遊戲目前這一代（generation）所有已結算的回合"""
    try:
        game = GameManager.get_game(db, address)
        return get_round_history(address, db, generation=game.generation)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get history: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{address}/escrow", response_model=EscrowResponse)
def get_escrow(address: str, db: Session = Depends(get_db)):
    """
    取得 escrow 狀態

    返回：
        - balance: 目前託管中的金額
        - entries: 所有存入 / 釋放紀錄
    """
    try:
        GameManager.get_game(db, address)
        ledger = DatabaseEscrowLedger(db)
        return EscrowResponse(
            address=address,
            balance=ledger.balance(address),
            entries=[EscrowEntryResponse.model_validate(e) for e in ledger.entries(address)],
        )

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get escrow: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
