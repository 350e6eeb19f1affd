from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from pydantic_settings import BaseSettings
from functools import lru_cache, wraps
import logging

from core.exceptions import RpsGameException

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    database_url: str = "sqlite:///./rps_game.db"
    # 推導遊戲地址時使用的固定命名空間
    game_address_tag: str = "game"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"


@lru_cache()
def get_settings():
    return Settings()


settings = get_settings()

# SQLite 需要特殊設定：connect_args={"check_same_thread": False}
# 這允許多執行緒存取同一個 SQLite 連線（FastAPI 的多執行緒環境需要）
engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
    pool_pre_ping=True
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """
    FastAPI dependency：提供 Database Session

    使用 yield 確保 session 在請求結束後會被關閉
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _find_session(args, kwargs):
    """從呼叫參數中找出 Session（直接傳入，或包在 GameContext 裡）"""
    candidate = args[0] if args else kwargs.get('ctx', kwargs.get('db'))
    if isinstance(candidate, Session):
        return candidate
    return getattr(candidate, 'db', None)


def transactional(func):
    """
    Transaction decorator：確保資料庫操作的原子性

    使用方式：
        @transactional
        def some_business_logic(ctx: GameContext, ...):
            # 所有 DB 操作（含 escrow 記帳）都在一個 transaction 內
            game = Game(...)
            ctx.db.add(game)
            # 不需要手動 commit，decorator 會處理

    如果函式內發生異常：
        - 自動 rollback（遊戲紀錄與 escrow 都不會留下部分寫入）
        - 異常會被重新拋出（讓上層處理）

    注意：
        - 第一個參數必須是 db: Session 或帶有 .db 的 GameContext
        - 不要在函式內手動 commit（decorator 會處理）
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        db = _find_session(args, kwargs)

        if db is None:
            raise ValueError(
                f"@transactional requires 'db: Session' or a context with '.db' as first argument, "
                f"but got args={args}, kwargs={kwargs}"
            )

        try:
            result = func(*args, **kwargs)
            db.commit()
            return result
        except RpsGameException as e:
            # 業務規則拒絕：預期內的錯誤，不需要 stack trace
            logger.warning(f"Transaction rejected in {func.__name__}: {e}")
            db.rollback()
            raise
        except Exception as e:
            logger.error(f"Transaction failed in {func.__name__}: {e}", exc_info=True)
            db.rollback()
            raise

    return wrapper
