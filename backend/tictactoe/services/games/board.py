"""3x3 board value, move legality and result evaluation.

Cells are indexed 0-8 in row-major order. Everything here is pure data:
functions take a board and return a new one, nothing is mutated in place.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from .errors import CellOccupied, InvalidBoard, OutOfRange, WrongTurn


BOARD_SIZE = 3
CELL_COUNT = BOARD_SIZE * BOARD_SIZE

# Rows, columns, diagonals. Order matters: evaluate() reports the first match.
WIN_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


class Cell(str, Enum):
    EMPTY = ''
    X = 'X'
    O = 'O'


PLAYERS = (Cell.X, Cell.O)


def other(player: Cell) -> Cell:
    return Cell.O if player == Cell.X else Cell.X


def parse_player(value) -> Cell:
    """Turn 'X'/'O' (or a Cell) into a player, rejecting anything else as WrongTurn."""
    try:
        player = Cell(value)
    except ValueError:
        raise WrongTurn(f'Player must be X or O, got {value!r}')
    if player not in PLAYERS:
        raise WrongTurn('Player must be X or O')
    return player


@dataclass(frozen=True)
class Board:
    cells: Tuple[Cell, ...] = (Cell.EMPTY,) * CELL_COUNT

    @classmethod
    def empty(cls) -> 'Board':
        return cls()

    @classmethod
    def from_list(cls, values: Iterable) -> 'Board':
        """Decode a wire snapshot. ``None`` and ``''`` both mean empty."""
        if isinstance(values, (str, bytes)):
            raise InvalidBoard('Board must be a list of 9 cells')
        try:
            raw = list(values)
        except TypeError:
            raise InvalidBoard('Board must be a list of 9 cells')
        if len(raw) != CELL_COUNT:
            raise InvalidBoard(f'Board must have {CELL_COUNT} cells, got {len(raw)}')
        cells = []
        for value in raw:
            if value is None:
                value = ''
            try:
                cells.append(Cell(value))
            except ValueError:
                raise InvalidBoard(f'Invalid cell value {value!r}')
        return cls(tuple(cells))

    def to_list(self):
        return [cell.value for cell in self.cells]

    def __getitem__(self, index: int) -> Cell:
        return self.cells[index]

    def filled_count(self) -> int:
        return sum(1 for cell in self.cells if cell != Cell.EMPTY)

    def is_full(self) -> bool:
        return self.filled_count() == CELL_COUNT

    def count(self, player: Cell) -> int:
        return sum(1 for cell in self.cells if cell == player)


def apply_move(board: Board, index, player, turn: Optional[Cell] = None) -> Board:
    """Return a new board with ``player`` placed at ``index``.

    Raises OutOfRange, CellOccupied or WrongTurn. ``turn`` is the player the
    engine expects; when given, any other player is rejected.
    """
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < CELL_COUNT:
        raise OutOfRange(f'Position must be 0-{CELL_COUNT - 1}, got {index!r}')
    player = parse_player(player)
    if board[index] != Cell.EMPTY:
        raise CellOccupied(f'Cell {index} is already taken by {board[index].value}')
    if turn is not None and player != turn:
        raise WrongTurn(f'It is {turn.value}\'s turn, not {player.value}\'s')
    cells = list(board.cells)
    cells[index] = player
    return Board(tuple(cells))


def winning_line(board: Board) -> Optional[Tuple[int, int, int]]:
    for line in WIN_LINES:
        a, b, c = line
        if board[a] != Cell.EMPTY and board[a] == board[b] == board[c]:
            return line
    return None


class GameStatus(str, Enum):
    IN_PROGRESS = 'in_progress'
    WON = 'won'
    DRAW = 'draw'


DRAW_LABEL = 'Draw'


@dataclass(frozen=True)
class Result:
    status: GameStatus
    winner: Optional[Cell] = None

    @classmethod
    def in_progress(cls) -> 'Result':
        return cls(GameStatus.IN_PROGRESS)

    @classmethod
    def won(cls, player: Cell) -> 'Result':
        return cls(GameStatus.WON, player)

    @classmethod
    def draw(cls) -> 'Result':
        return cls(GameStatus.DRAW)

    @property
    def is_terminal(self) -> bool:
        return self.status != GameStatus.IN_PROGRESS

    @property
    def label(self) -> Optional[str]:
        """Stored winner value: 'X', 'O', 'Draw', or None while in progress."""
        if self.status == GameStatus.WON:
            return self.winner.value
        if self.status == GameStatus.DRAW:
            return DRAW_LABEL
        return None


def evaluate(board: Board) -> Result:
    """Derive the result of a board: first winning line, else draw when full."""
    line = winning_line(board)
    if line is not None:
        return Result.won(board[line[0]])
    if board.is_full():
        return Result.draw()
    return Result.in_progress()
