"""
Escrow 帳本

核心只發出「存入」與「釋放」的意圖，帳本負責保管。
DatabaseEscrowLedger 把每筆意圖寫進 escrow_entries，
與遊戲紀錄的修改共用同一個 transaction：遊戲操作失敗 rollback 時，
escrow 紀錄也一起消失。
"""
from typing import List, Protocol, Tuple

from sqlalchemy.orm import Session
import logging

from models import EscrowEntry, EscrowKind, Game

logger = logging.getLogger(__name__)

Payout = Tuple[str, int]


class EscrowLedger(Protocol):
    def deposit(self, party: str, amount: int, game: Game) -> None: ...

    def release(self, payouts: List[Payout], game: Game) -> None: ...

    def balance(self, address: str) -> int: ...


class DatabaseEscrowLedger:
    """以 escrow_entries 資料表實作的帳本"""

    def __init__(self, db: Session):
        self.db = db

    def deposit(self, party: str, amount: int, game: Game) -> None:
        self._append(EscrowKind.DEPOSIT, party, amount, game)
        logger.info(f"Escrow deposit {amount} from {party} for game {game.address}")

    def release(self, payouts: List[Payout], game: Game) -> None:
        for party, amount in payouts:
            self._append(EscrowKind.RELEASE, party, amount, game)
            logger.info(f"Escrow release {amount} to {party} for game {game.address}")

    def balance(self, address: str) -> int:
        """目前託管中的金額 = 所有存入 - 所有釋放"""
        # 在 Python 端加總，累積多回合後不受 64-bit SUM 溢位限制
        total = 0
        for entry in self.entries(address):
            if entry.kind == EscrowKind.DEPOSIT:
                total += entry.amount
            else:
                total -= entry.amount
        return total

    def entries(self, address: str) -> List[EscrowEntry]:
        return (
            self.db.query(EscrowEntry)
            .filter(EscrowEntry.game_address == address)
            .order_by(EscrowEntry.id)
            .all()
        )

    def _append(self, kind: EscrowKind, party: str, amount: int, game: Game) -> None:
        self.db.add(EscrowEntry(
            game_address=game.address,
            generation=game.generation,
            round_number=game.round_number,
            kind=kind,
            party=party,
            amount=amount,
        ))
