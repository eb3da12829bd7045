"""Record store for finished games, backed by Flask-SQLAlchemy.

This is the only place that touches the database on behalf of the game core.
Backend failures surface as PersistenceError after the session is rolled
back; nothing here retries.
"""
import json
from datetime import datetime
from typing import List, Optional, Tuple

from flask import current_app
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from tictactoe import db
from tictactoe.models import GameRecord
from .board import Board, DRAW_LABEL
from .errors import DataIntegrityError, PersistenceError
from .stats import StatsSummary, WINNER_VALUES


def save(user_id: int, board, winner: str, move_count: int,
         created_at: Optional[datetime] = None) -> int:
    """Insert one GameRecord and return its id."""
    if isinstance(board, Board):
        board = board.to_list()
    record = GameRecord(
        user_id=user_id,
        board_state=json.dumps(list(board)),
        winner=winner,
        moves=move_count,
    )
    if created_at is not None:
        record.created_at = created_at
    try:
        db.session.add(record)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[save-failed] user={user_id} winner={winner} moves={move_count}: {exc}")
        raise PersistenceError('Failed to save game') from exc
    current_app.logger.info(f"[save] user={user_id} game={record.id} winner={winner} moves={move_count}")
    return record.id


def list_by_user(user_id: int, page: int = 1, limit: int = 10) -> Tuple[List[GameRecord], int]:
    """One page of a user's records, most recent first, ties broken by id."""
    try:
        pagination = (
            GameRecord.query
            .filter_by(user_id=user_id)
            .order_by(GameRecord.created_at.desc(), GameRecord.id.desc())
            .paginate(page=page, per_page=limit, error_out=False, count=True)
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[history-failed] user={user_id} page={page}: {exc}")
        raise PersistenceError('Failed to retrieve game history') from exc
    return list(pagination.items), int(pagination.total or 0)


def list_all_by_user(user_id: int) -> List[GameRecord]:
    try:
        return (
            GameRecord.query
            .filter_by(user_id=user_id)
            .order_by(GameRecord.created_at.desc(), GameRecord.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise PersistenceError('Failed to retrieve game history') from exc


def stats_raw(user_id: int) -> StatsSummary:
    """Same numbers as ``summarize`` over every record, in one SQL query."""
    query = db.session.query(
        func.count(GameRecord.id),
        func.sum(case((GameRecord.winner == 'X', 1), else_=0)),
        func.sum(case((GameRecord.winner == 'O', 1), else_=0)),
        func.sum(case((GameRecord.winner == DRAW_LABEL, 1), else_=0)),
        func.sum(case((~GameRecord.winner.in_(WINNER_VALUES), 1), else_=0)),
        func.avg(GameRecord.moves),
    ).filter(GameRecord.user_id == user_id)
    try:
        total, x_wins, o_wins, draws, invalid, avg_moves = query.one()
    except SQLAlchemyError as exc:
        db.session.rollback()
        current_app.logger.error(f"[stats-failed] user={user_id}: {exc}")
        raise PersistenceError('Failed to retrieve game statistics') from exc
    if invalid:
        raise DataIntegrityError(f'{int(invalid)} record(s) for user {user_id} have an invalid winner')
    return StatsSummary(
        total_games=int(total or 0),
        x_wins=int(x_wins or 0),
        o_wins=int(o_wins or 0),
        draws=int(draws or 0),
        average_moves=float(avg_moves) if total else 0,
    )
