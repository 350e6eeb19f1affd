"""
結算服務：剪刀石頭布的勝負判定與押注分配

純計算邏輯，不改變 Game 的狀態（由 GameManager 負責）
"""
from typing import Dict, List, Tuple

from models import NO_PARTY, GameOutcome, Move, PlayedMove

# 左邊贏右邊
BEATS: Dict[PlayedMove, PlayedMove] = {
    Move.ROCK: Move.SCISSORS,
    Move.SCISSORS: Move.PAPER,
    Move.PAPER: Move.ROCK,
}


def determine_outcome(move1: PlayedMove, move2: PlayedMove) -> GameOutcome:
    """
    判定一回合的勝負

    ┌──────────────┬──────────┬──────────┬──────────┐
    │              │ P2: ROCK │ P2: PAPER│ P2: SCIS │
    ├──────────────┼──────────┼──────────┼──────────┤
    │ P1: ROCK     │  DRAW    │  P2      │  P1      │
    │ P1: PAPER    │  P1      │  DRAW    │  P2      │
    │ P1: SCISSORS │  P2      │  P1      │  DRAW    │
    └──────────────┴──────────┴──────────┴──────────┘

    參數：
        move1: 玩家 1 的拳（不可為 NONE）
        move2: 玩家 2 的拳（不可為 NONE）

    返回：
        GameOutcome
    """
    if move1 == move2:
        return GameOutcome.DRAW
    if BEATS[move1] == move2:
        return GameOutcome.PLAYER1_WINS
    return GameOutcome.PLAYER2_WINS


def settle_payouts(
    outcome: GameOutcome,
    player1: str,
    player2: str,
    stake: int,
) -> List[Tuple[str, int]]:
    """
    計算 escrow 釋放的對象與金額

    - 平手：各自退回 stake（沒有人賺也沒有人賠）
    - 有勝負：贏家拿走兩份 stake
    """
    if outcome == GameOutcome.DRAW:
        return [(player1, stake), (player2, stake)]
    if outcome == GameOutcome.PLAYER1_WINS:
        return [(player1, 2 * stake)]
    return [(player2, 2 * stake)]


def winner_of(outcome: GameOutcome, player1: str, player2: str) -> str:
    if outcome == GameOutcome.PLAYER1_WINS:
        return player1
    if outcome == GameOutcome.PLAYER2_WINS:
        return player2
    return NO_PARTY
