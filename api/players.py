"""
Player API Endpoints

職責：
1. 由身份找到自己建立的遊戲（地址推導，不需要目錄服務）
2. 列出身份參與過的遊戲
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db, get_settings
from schemas import GameResponse
from core.game_manager import GameManager
from core.exceptions import RpsGameException
from api.dependencies import to_http_exception
from api.games import build_game_response

router = APIRouter(prefix="/api/players", tags=["players"])
logger = logging.getLogger(__name__)


@router.get("/{identity}/game", response_model=GameResponse)
def get_created_game(identity: str, db: Session = Depends(get_db)):
    """
    取得 identity 建立的遊戲

    流程：
    1. 由 identity + tag 推導地址
    2. 查詢 Game
    """
    try:
        game = GameManager.get_game_for_creator(db, identity, get_settings().game_address_tag)
        return build_game_response(game, db)

    except RpsGameException as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"Failed to get game for {identity}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{identity}/games", response_model=List[GameResponse])
def list_player_games(identity: str, db: Session = Depends(get_db)):
    """列出 identity 是 player1 或 player2 的所有遊戲（新的在前）"""
    try:
        games = GameManager.list_games_for_player(db, identity)
        return [build_game_response(game, db) for game in games]

    except Exception as e:
        logger.error(f"Failed to list games for {identity}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
