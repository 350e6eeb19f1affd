"""
API Request / Response schemas（Pydantic）
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from models import EscrowKind, GameOutcome, GamePhase, Move


class GameCreate(BaseModel):
    # 範圍由 GameManager 檢查，才能回傳 INVALID_STAKE
    stake: int


class MoveSubmit(BaseModel):
    move: Move


class RoundResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    generation: int
    round_number: int
    player1: str
    player2: str
    move1: Move
    move2: Move
    outcome: GameOutcome
    winner: str
    stake: int
    resolved_at: datetime


class GameResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    address: str
    player1: str
    player2: str
    stake: int
    phase: GamePhase
    move1: Move
    move2: Move
    winner: str
    round_number: int
    generation: int
    state_version: int
    created_at: datetime
    last_result: Optional[RoundResultResponse] = None


class EscrowEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    generation: int
    round_number: int
    kind: EscrowKind
    party: str
    amount: int
    created_at: datetime


class EscrowResponse(BaseModel):
    address: str
    balance: int
    entries: List[EscrowEntryResponse]
