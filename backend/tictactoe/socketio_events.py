from flask_socketio import emit
from flask import current_app, request
from flask_login import current_user
from typing import Dict
from tictactoe import socketio
from tictactoe.services.games import gateway
from tictactoe.services.games.errors import (
    AlreadySaved,
    GameNotFinished,
    MoveError,
    OutOfRange,
    PersistenceError,
)
from tictactoe.services.games.session import PlaySession

NAMESPACE = '/ws'

# One local game per connected socket; nothing is shared between sockets
_sessions: Dict[str, PlaySession] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _session() -> PlaySession:
    sid = _get_sid()
    session = _sessions.get(sid)
    if session is None:
        session = _sessions[sid] = PlaySession()
    return session


def handle_connect(auth=None):
    session = _session()
    emit('connected', {'message': f'Connected to {NAMESPACE}'})
    emit('state', session.state())


def handle_disconnect(*args):
    _sessions.pop(_get_sid(), None)


def handle_new_game(data=None):
    session = _session()
    session.reset()
    emit('state', session.state())


def handle_move(data):
    session = _session()
    try:
        if not isinstance(data, dict):
            raise OutOfRange()
        session.move(data.get('index'), data.get('player'))
    except MoveError as exc:
        current_app.logger.info(f"[ws-move-rejected] sid={_get_sid()} reason={exc.reason}")
        emit('move_rejected', exc.to_dict())
        return
    emit('state', session.state())


def handle_save_game(data=None):
    session = _session()
    if not current_user.is_authenticated:
        emit('save_failed', {'reason': 'unauthenticated', 'message': 'Log in to save games'})
        return
    try:
        record_id = session.save(current_user.id, gateway)
    except GameNotFinished as exc:
        emit('save_failed', {'reason': 'not_finished', 'message': str(exc)})
        return
    except AlreadySaved as exc:
        emit('save_failed', {'reason': 'already_saved', 'message': str(exc)})
        return
    except PersistenceError as exc:
        emit('save_failed', {'reason': 'persistence', 'message': str(exc)})
        return
    emit('game_saved', {'game_id': record_id})
    emit('state', session.state())


def register_socketio_handlers() -> None:
    """Register Socket.IO event handlers on namespace '/ws'."""
    socketio.on_event('connect', handle_connect, namespace=NAMESPACE)
    socketio.on_event('disconnect', handle_disconnect, namespace=NAMESPACE)
    socketio.on_event('new_game', handle_new_game, namespace=NAMESPACE)
    socketio.on_event('move', handle_move, namespace=NAMESPACE)
    socketio.on_event('save_game', handle_save_game, namespace=NAMESPACE)
