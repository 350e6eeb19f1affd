"""
Round history service.

Builds the ordered list of resolved rounds for a game so polling
clients can show the last result even though the game record clears
both moves once a round is finished.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from models import Game, RoundResult


def get_round_history(address: str, db: Session, generation: Optional[int] = None) -> List[RoundResult]:
    """
    Return resolved rounds for the game at `address`, oldest first.

    When `generation` is given only rounds played since that (re)creation
    are returned.
    """
    query = db.query(RoundResult).filter(RoundResult.game_address == address)
    if generation is not None:
        query = query.filter(RoundResult.generation == generation)
    return query.order_by(RoundResult.id).all()


def get_last_result(game: Game, db: Session) -> Optional[RoundResult]:
    """The most recent resolved round of the current generation, if any."""
    return (
        db.query(RoundResult)
        .filter(
            RoundResult.game_address == game.address,
            RoundResult.generation == game.generation,
        )
        .order_by(RoundResult.id.desc())
        .first()
    )
