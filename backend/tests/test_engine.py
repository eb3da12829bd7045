import pytest

from tictactoe.services.games.board import Cell, GameStatus
from tictactoe.services.games.engine import GameEngine
from tictactoe.services.games.errors import (
    CellOccupied,
    GameNotFinished,
    GameOver,
    MoveError,
    OutOfRange,
    WrongTurn,
)

DIAGONAL_WIN = [(0, 'X'), (1, 'O'), (4, 'X'), (2, 'O'), (8, 'X')]
# X O X / X O O / O X X
DRAW_GAME = [(0, 'X'), (1, 'O'), (2, 'X'), (4, 'O'), (3, 'X'), (5, 'O'), (7, 'X'), (6, 'O'), (8, 'X')]


def state(engine):
    return (engine.board, engine.turn, engine.move_count, engine.result, list(engine.moves))


def test_initial_state():
    engine = GameEngine()
    assert engine.board.to_list() == [''] * 9
    assert engine.turn == Cell.X
    assert engine.move_count == 0
    assert engine.result.status == GameStatus.IN_PROGRESS
    assert not engine.is_over


def test_turns_alternate():
    engine = GameEngine()
    engine.play(0, 'X')
    assert engine.turn == Cell.O
    engine.play(1, 'O')
    assert engine.turn == Cell.X
    assert engine.move_count == 2


def test_diagonal_win_scenario():
    engine = GameEngine()
    results = [engine.play(i, p) for i, p in DIAGONAL_WIN]
    assert all(r.status == GameStatus.IN_PROGRESS for r in results[:-1])
    assert engine.result.status == GameStatus.WON
    assert engine.result.winner == Cell.X
    assert engine.move_count == 5
    assert engine.is_over


def test_draw_scenario():
    engine = GameEngine.replay(DRAW_GAME)
    assert engine.result.status == GameStatus.DRAW
    assert engine.result.label == 'Draw'
    assert engine.move_count == 9


def test_occupied_cell_leaves_state_unchanged():
    engine = GameEngine()
    engine.play(0, 'X')
    before = state(engine)
    with pytest.raises(CellOccupied):
        engine.play(0, 'O')
    assert state(engine) == before


@pytest.mark.parametrize('index, player, error', [
    (9, 'O', OutOfRange),
    (-1, 'O', OutOfRange),
    (3, 'X', WrongTurn),
    (3, 'Q', WrongTurn),
])
def test_rejected_moves_never_change_state(index, player, error):
    engine = GameEngine()
    engine.play(0, 'X')
    before = state(engine)
    with pytest.raises(error):
        engine.play(index, player)
    assert state(engine) == before
    # engine still usable afterwards
    engine.play(3, 'O')
    assert engine.move_count == 2


def test_moves_after_terminal_state_are_game_over():
    engine = GameEngine.replay(DIAGONAL_WIN)
    before = state(engine)
    # cell 3 is free and it would be O's turn, still rejected
    with pytest.raises(GameOver):
        engine.play(3, 'O')
    with pytest.raises(GameOver):
        engine.play(3, 'X')
    assert state(engine) == before


def test_game_over_is_a_move_error():
    assert issubclass(GameOver, MoveError)
    assert GameOver().reason == 'game_over'


def test_reset_from_any_state():
    engine = GameEngine.replay(DIAGONAL_WIN)
    engine.reset()
    assert state(engine) == state(GameEngine())
    engine.play(4, 'X')
    engine.reset()
    assert state(engine) == state(GameEngine())


def test_move_count_matches_accepted_moves():
    engine = GameEngine()
    accepted = 0
    attempts = [(0, 'X'), (0, 'O'), (1, 'X'), (1, 'O'), (12, 'X'), (2, 'X'), (3, 'O')]
    for index, player in attempts:
        try:
            engine.play(index, player)
            accepted += 1
        except MoveError:
            pass
        assert engine.move_count == accepted
    assert accepted == 4


def test_replay_is_deterministic():
    first = GameEngine.replay(DRAW_GAME)
    second = GameEngine.replay(DRAW_GAME)
    assert state(first) == state(second)


def test_snapshot():
    engine = GameEngine()
    engine.play(4, 'X')
    assert engine.snapshot() == {
        'board': ['', '', '', '', 'X', '', '', '', ''],
        'turn': 'O',
        'moves': 1,
        'status': 'in_progress',
        'winner': None,
    }


def test_record_payload_requires_finished_game():
    engine = GameEngine()
    with pytest.raises(GameNotFinished, match='No moves to save'):
        engine.record_payload()
    engine.play(0, 'X')
    with pytest.raises(GameNotFinished):
        engine.record_payload()


def test_record_payload_round_trip():
    engine = GameEngine.replay(DIAGONAL_WIN)
    payload = engine.record_payload()
    assert payload == {
        'board': ['X', 'O', 'O', '', 'X', '', '', '', 'X'],
        'winner': 'X',
        'moves': 5,
    }
    # Replaying the recorded moves reproduces winner and move count
    again = GameEngine.replay([(i, p.value) for i, p in engine.moves])
    assert again.result.label == payload['winner']
    assert again.move_count == payload['moves']
    assert again.board.to_list() == payload['board']


def test_engines_are_independent():
    a, b = GameEngine(), GameEngine()
    a.play(0, 'X')
    assert b.move_count == 0
    assert b.board[0] == Cell.EMPTY
