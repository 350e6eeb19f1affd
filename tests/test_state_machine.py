import pytest

from models import EventLog, Game, GamePhase
from core.state_machine import GameStateMachine
from core.exceptions import InvalidGameState, InvalidStateTransition


@pytest.mark.parametrize(
    "current, target",
    [
        (GamePhase.WAITING_FOR_PLAYER, GamePhase.IN_PROGRESS),
        (GamePhase.IN_PROGRESS, GamePhase.FINISHED),
        (GamePhase.FINISHED, GamePhase.IN_PROGRESS),
        (GamePhase.FINISHED, GamePhase.WAITING_FOR_PLAYER),
    ],
)
def test_allowed_transitions(current, target):
    assert GameStateMachine.can_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (GamePhase.WAITING_FOR_PLAYER, GamePhase.FINISHED),
        (GamePhase.IN_PROGRESS, GamePhase.WAITING_FOR_PLAYER),
        (GamePhase.IN_PROGRESS, GamePhase.IN_PROGRESS),
        (GamePhase.FINISHED, GamePhase.FINISHED),
    ],
)
def test_rejected_transitions(current, target):
    assert not GameStateMachine.can_transition(current, target)


def test_transition_records_event(db):
    game = Game(address="a" * 64, player1="p1", stake=10, phase=GamePhase.WAITING_FOR_PLAYER)
    db.add(game)

    GameStateMachine.transition(game, GamePhase.IN_PROGRESS, db)
    db.flush()

    assert game.phase == GamePhase.IN_PROGRESS
    event = db.query(EventLog).filter(EventLog.event_type == "GAME_PHASE_CHANGED").one()
    assert event.data == {"from": "WAITING_FOR_PLAYER", "to": "IN_PROGRESS"}


def test_invalid_transition_is_an_invalid_game_state(db):
    game = Game(address="b" * 64, player1="p1", stake=10, phase=GamePhase.WAITING_FOR_PLAYER)

    with pytest.raises(InvalidStateTransition) as exc_info:
        GameStateMachine.transition(game, GamePhase.FINISHED, db)

    assert isinstance(exc_info.value, InvalidGameState)
    assert game.phase == GamePhase.WAITING_FOR_PLAYER
