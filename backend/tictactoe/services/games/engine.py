from typing import Iterable, List, Tuple

from .board import Board, Cell, Result, apply_move, evaluate, other
from .errors import GameNotFinished, GameOver


class GameEngine:
    """Turn-taking state machine for one local two-player game.

    State lives on the instance only, so any number of games can run side by
    side. A rejected move raises a MoveError and leaves every field as it was.
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.board = Board.empty()
        self.turn = Cell.X
        self.move_count = 0
        self.result = Result.in_progress()
        self.moves: List[Tuple[int, Cell]] = []

    @property
    def is_over(self) -> bool:
        return self.result.is_terminal

    def play(self, index: int, player) -> Result:
        if self.result.is_terminal:
            raise GameOver()
        board = apply_move(self.board, index, player, turn=self.turn)
        player = board[index]
        result = evaluate(board)

        self.board = board
        self.move_count += 1
        self.moves.append((index, player))
        self.result = result
        if not result.is_terminal:
            self.turn = other(player)
        return result

    def snapshot(self) -> dict:
        return {
            'board': self.board.to_list(),
            'turn': self.turn.value,
            'moves': self.move_count,
            'status': self.result.status.value,
            'winner': self.result.label,
        }

    def record_payload(self) -> dict:
        """The {board, winner, moves} triple handed to the record store."""
        if not self.result.is_terminal:
            if self.move_count == 0:
                raise GameNotFinished('No moves to save')
            raise GameNotFinished('Game is still in progress')
        return {
            'board': self.board.to_list(),
            'winner': self.result.label,
            'moves': self.move_count,
        }

    @classmethod
    def replay(cls, moves: Iterable[Tuple[int, str]]) -> 'GameEngine':
        engine = cls()
        for index, player in moves:
            engine.play(index, player)
        return engine
