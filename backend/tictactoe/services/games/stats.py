from dataclasses import asdict, dataclass
from typing import Iterable

from .board import DRAW_LABEL
from .errors import DataIntegrityError

WINNER_VALUES = ('X', 'O', DRAW_LABEL)


@dataclass(frozen=True)
class StatsSummary:
    total_games: int = 0
    x_wins: int = 0
    o_wins: int = 0
    draws: int = 0
    average_moves: float = 0

    def to_dict(self):
        return asdict(self)


def summarize(records: Iterable) -> StatsSummary:
    """Fold game records into outcome counts and the mean move count.

    Works the same over a full history or a single page of it. Each record
    needs ``winner`` and ``move_count`` attributes. A winner outside
    X/O/Draw raises DataIntegrityError rather than being counted.
    """
    counts = {value: 0 for value in WINNER_VALUES}
    total = 0
    moves = 0
    for record in records:
        winner = record.winner
        if not isinstance(winner, str) or winner not in counts:
            raise DataIntegrityError(
                f'Record {getattr(record, "id", None)!r} has invalid winner {winner!r}'
            )
        counts[winner] += 1
        moves += record.move_count
        total += 1
    return StatsSummary(
        total_games=total,
        x_wins=counts['X'],
        o_wins=counts['O'],
        draws=counts[DRAW_LABEL],
        average_moves=(moves / total) if total else 0,
    )
