"""
GameContext：每次操作明確傳入的 handle

包含紀錄儲存（DB session）、escrow 帳本與時鐘，不使用全域 singleton。
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from database import get_settings
from models import utcnow
from core.escrow import DatabaseEscrowLedger, EscrowLedger


@dataclass
class GameContext:
    db: Session
    ledger: Optional[EscrowLedger] = None
    clock: Callable[[], datetime] = utcnow
    address_tag: str = field(default_factory=lambda: get_settings().game_address_tag)

    def __post_init__(self):
        if self.ledger is None:
            self.ledger = DatabaseEscrowLedger(self.db)
