from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from tictactoe.services.games import gateway
from tictactoe.services.games.board import Board, CELL_COUNT, evaluate
from tictactoe.services.games.errors import InvalidBoard, PersistenceError
from tictactoe.services.games.stats import WINNER_VALUES, summarize
import math


games = Blueprint('games', __name__)


def _int_arg(name, default, minimum=1, maximum=None):
    """Query-string integer with fallback to default for junk or out-of-range values."""
    try:
        value = int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default
    if value < minimum:
        return default
    if maximum is not None and value > maximum:
        return maximum
    return value


def _validate_save(data):
    """Basic input checks on a {board, winner, moves} payload.

    Returns (errors, board). The board is only decoded, never replayed: the
    winner and move count just have to agree with what the board shows.
    """
    errors = []
    board = None
    try:
        board = Board.from_list(data.get('board'))
    except InvalidBoard as exc:
        errors.append({'field': 'board', 'msg': str(exc)})

    winner = data.get('winner')
    if winner not in WINNER_VALUES:
        errors.append({'field': 'winner', 'msg': 'Winner must be X, O or Draw'})

    moves = data.get('moves')
    if isinstance(moves, bool) or not isinstance(moves, int) or not 1 <= moves <= CELL_COUNT:
        errors.append({'field': 'moves', 'msg': f'Moves must be an integer 1-{CELL_COUNT}'})

    if errors:
        return errors, board

    if board.filled_count() != moves:
        errors.append({'field': 'moves', 'msg': 'Moves does not match the number of filled cells'})
    x_count, o_count = board.count('X'), board.count('O')
    if not 0 <= x_count - o_count <= 1:
        errors.append({'field': 'board', 'msg': 'X and O must alternate starting with X'})
    result = evaluate(board)
    if not result.is_terminal:
        errors.append({'field': 'winner', 'msg': 'Game is not finished'})
    elif result.label != winner:
        errors.append({'field': 'winner', 'msg': f'Board shows {result.label}, not {winner}'})
    return errors, board


@games.route('/save', methods=['POST'])
@login_required
def save_game():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    errors, board = _validate_save(data)
    if errors:
        current_app.logger.info(f"[save-rejected] user={current_user.id} errors={len(errors)}")
        return jsonify({'errors': errors}), 400
    try:
        game_id = gateway.save(current_user.id, board, data['winner'], data['moves'])
    except PersistenceError:
        return jsonify({'error': 'Failed to save game'}), 500
    return jsonify({'message': 'Game saved successfully', 'game_id': game_id}), 201


@games.route('/history', methods=['GET'])
@login_required
def game_history():
    cfg = current_app.config
    default_limit = int(cfg.get('HISTORY_PAGE_SIZE', 10))
    page = _int_arg('page', 1)
    limit = _int_arg('limit', default_limit, maximum=int(cfg.get('HISTORY_MAX_PAGE_SIZE', 100)))
    try:
        records, total = gateway.list_by_user(current_user.id, page=page, limit=limit)
    except PersistenceError:
        return jsonify({'error': 'Failed to retrieve game history'}), 500
    current_app.logger.info(f"[history] user={current_user.id} page={page} limit={limit} total={total}")
    return jsonify({
        'games': [r.to_dict() for r in records],
        'total': total,
        'page': page,
        'total_pages': math.ceil(total / limit),
        'summary': summarize(records).to_dict(),
    })


@games.route('/stats', methods=['GET'])
@login_required
def game_stats():
    try:
        if current_app.config.get('STATS_IN_DATABASE', True):
            summary = gateway.stats_raw(current_user.id)
        else:
            summary = summarize(gateway.list_all_by_user(current_user.id))
    except PersistenceError:
        return jsonify({'error': 'Failed to retrieve game statistics'}), 500
    current_app.logger.info(f"[stats] user={current_user.id} total={summary.total_games}")
    return jsonify(summary.to_dict())
