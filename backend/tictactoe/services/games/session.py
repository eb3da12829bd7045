from typing import Optional

from .engine import GameEngine
from .errors import AlreadySaved


class PlaySession:
    """One browser's local game plus its save bookkeeping.

    A finished game is persisted at most once and only when ``save`` is
    called. A failed save leaves the finished game in place so it can be
    retried by the user.
    """

    def __init__(self):
        self.engine = GameEngine()
        self.saved_record_id: Optional[int] = None

    def move(self, index, player):
        return self.engine.play(index, player)

    def reset(self) -> None:
        self.engine.reset()
        self.saved_record_id = None

    def save(self, user_id: int, gateway) -> int:
        if self.saved_record_id is not None:
            raise AlreadySaved(f'Game already saved as record {self.saved_record_id}')
        payload = self.engine.record_payload()
        record_id = gateway.save(user_id, payload['board'], payload['winner'], payload['moves'])
        self.saved_record_id = record_id
        return record_id

    def state(self) -> dict:
        state = self.engine.snapshot()
        state['saved'] = self.saved_record_id is not None
        return state
