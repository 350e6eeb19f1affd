"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

主要使用 PostgreSQL 的 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）。
兩個玩家同時出拳時，後到的請求會等前一個 transaction 結束，
再用最新的狀態檢查前置條件。
"""
from sqlalchemy.orm import Session, Query

from models import Game


def with_game_lock(address: str, db: Session) -> Query:
    """
    鎖定一個 Game（行級鎖）

    使用場景：
    - join / move / reset 修改 Game 時
    - 結算回合時（防止兩個出拳請求重複結算、重複釋放 escrow）

    範例：
        game = with_game_lock(address, db).first()
        if not game:
            raise GameNotFound(address)
        game.move1 = Move.ROCK
        db.commit()

    參數：
        address: Game 地址
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
        - SQLite 會忽略 FOR UPDATE，由單一寫入者保證序列化
    """
    return db.query(Game).filter(
        Game.address == address
    ).with_for_update(nowait=False)
