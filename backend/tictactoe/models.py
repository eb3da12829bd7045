from tictactoe import db, bcrypt
from tictactoe.services.games.errors import DataIntegrityError
from flask_login import UserMixin
from datetime import datetime
import json


def _utcnow():
    return datetime.utcnow()


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(30), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
        }


class GameRecord(db.Model):
    """One finished game. Written once at save time, never updated."""
    __tablename__ = 'game_record'
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    board_state = db.Column(db.Text, nullable=False)  # JSON-encoded list of 9 cells
    winner = db.Column(db.String(8), nullable=False)  # X, O or Draw
    moves = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime, default=_utcnow, nullable=False, index=True)

    @property
    def board(self):
        try:
            cells = json.loads(self.board_state)
        except (TypeError, ValueError) as exc:
            raise DataIntegrityError(f'Game {self.id} has an unreadable board') from exc
        if not isinstance(cells, list):
            raise DataIntegrityError(f'Game {self.id} has an unreadable board')
        return cells

    @property
    def move_count(self):
        return self.moves

    def to_dict(self):
        return {
            'id': self.id,
            'board': self.board,
            'winner': self.winner,
            'moves': self.moves,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
