"""
資料模型

Game 是唯一可變的核心實體；RoundResult / EscrowEntry / EventLog
都是只新增、不修改的紀錄表。
"""
import enum
from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    JSON,
    String,
)
from database import Base

# Pubkey::default() 的 base58 表示，代表「沒有玩家」
NO_PARTY = "11111111111111111111111111111111"

# 贏家一次領回 2 * stake，必須放得進 signed 64-bit 欄位
MAX_STAKE = (2 ** 63 - 1) // 2


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GamePhase(str, enum.Enum):
    WAITING_FOR_PLAYER = "WAITING_FOR_PLAYER"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"


class Move(str, enum.Enum):
    NONE = "NONE"  # 尚未出拳，不是合法的出拳
    ROCK = "ROCK"
    PAPER = "PAPER"
    SCISSORS = "SCISSORS"


# 真正出過的拳：結算只接受這三種
PlayedMove = Literal[Move.ROCK, Move.PAPER, Move.SCISSORS]


class GameOutcome(str, enum.Enum):
    PLAYER1_WINS = "PLAYER1_WINS"
    PLAYER2_WINS = "PLAYER2_WINS"
    DRAW = "DRAW"


class EscrowKind(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    RELEASE = "RELEASE"


class Game(Base):
    """
    遊戲紀錄（每個建立者最多一筆進行中的紀錄）

    address 由建立者身份 + 固定 tag 推導，見 services.address_service。
    """
    __tablename__ = "games"

    address = Column(String(64), primary_key=True)
    player1 = Column(String(64), nullable=False, index=True)
    player2 = Column(String(64), nullable=False, default=NO_PARTY, index=True)
    stake = Column(BigInteger, nullable=False)
    phase = Column(Enum(GamePhase), nullable=False, default=GamePhase.WAITING_FOR_PLAYER)
    move1 = Column(Enum(Move), nullable=False, default=Move.NONE)
    move2 = Column(Enum(Move), nullable=False, default=Move.NONE)
    winner = Column(String(64), nullable=False, default=NO_PARTY)

    round_number = Column(Integer, nullable=False, default=1)
    generation = Column(Integer, nullable=False, default=1)
    state_version = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<Game address={self.address} phase={self.phase.value} round={self.round_number}>"


class RoundResult(Base):
    """每個結算完成的回合一筆"""
    __tablename__ = "round_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_address = Column(String(64), ForeignKey("games.address"), nullable=False, index=True)
    generation = Column(Integer, nullable=False)
    round_number = Column(Integer, nullable=False)
    player1 = Column(String(64), nullable=False)
    player2 = Column(String(64), nullable=False)
    move1 = Column(Enum(Move), nullable=False)
    move2 = Column(Enum(Move), nullable=False)
    outcome = Column(Enum(GameOutcome), nullable=False)
    winner = Column(String(64), nullable=False, default=NO_PARTY)
    stake = Column(BigInteger, nullable=False)
    resolved_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class EscrowEntry(Base):
    """Escrow 帳本：存入（DEPOSIT）與釋放（RELEASE）都只新增不修改"""
    __tablename__ = "escrow_entries"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_address = Column(String(64), nullable=False, index=True)
    generation = Column(Integer, nullable=False)
    round_number = Column(Integer, nullable=False)
    kind = Column(Enum(EscrowKind), nullable=False)
    party = Column(String(64), nullable=False)
    amount = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class EventLog(Base):
    __tablename__ = "event_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_address = Column(String(64), nullable=False, index=True)
    event_type = Column(String(64), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
