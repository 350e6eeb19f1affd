"""
API 共用的 dependencies 與錯誤轉換

- 呼叫者身份由 hosting 環境放在 X-Player-Id header（已驗證過簽章）
- GameContext 每個請求建立一次，包住同一個 DB session
"""
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database import get_db, get_settings
from core.context import GameContext
from core.exceptions import (
    RpsGameException,
    GameNotFound,
    GameAlreadyActive,
    UnauthorizedPlayer,
)

STATUS_BY_EXCEPTION = {
    GameNotFound: 404,
    UnauthorizedPlayer: 403,
    GameAlreadyActive: 409,
}


def get_caller_identity(x_player_id: str = Header(..., min_length=1, max_length=64)) -> str:
    return x_player_id


def get_game_context(db: Session = Depends(get_db)) -> GameContext:
    return GameContext(db=db, address_tag=get_settings().game_address_tag)


def to_http_exception(exc: RpsGameException) -> HTTPException:
    """業務異常 -> HTTPException（detail 帶固定 code，客戶端不必解析訊息）"""
    status_code = 400
    for exc_type, code in STATUS_BY_EXCEPTION.items():
        if isinstance(exc, exc_type):
            status_code = code
            break
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": str(exc)},
    )
