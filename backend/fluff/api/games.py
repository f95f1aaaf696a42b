from flask import Blueprint, current_app, jsonify, request

from fluff import get_registry
from fluff.errors import GameError
from fluff.services.games.bids import as_int
from fluff.services.notify import schedule_room_announcement

games = Blueprint('games', __name__)


@games.errorhandler(GameError)
def handle_game_error(exc):
    return jsonify(exc.to_dict()), exc.status_code


def _parse_hand_size(data):
    raw = data.get('hand_size', data.get('defaultDice'))
    if raw is None:
        return None, None
    max_size = int(current_app.config.get('MAX_HAND_SIZE', 10))
    error = f'hand_size must be an integer between 1 and {max_size}'
    size = as_int(raw)
    if size is None or not 1 <= size <= max_size:
        return None, error
    return size, None


@games.route('/create', methods=['POST'])
def create_game():
    """
    Creates a new room in the lobby phase and returns a shareable join link.
    """
    data = request.get_json(silent=True) or {}
    hand_size, error = _parse_hand_size(data)
    if error:
        return jsonify({'error': 'InvalidHandSize', 'message': error}), 400

    game = get_registry().create(hand_size=hand_size)
    link = f"{request.host_url}?game={game.room_id}"
    current_app.logger.info(f"[create] room={game.room_id} hand_size={game.default_hand_size}")
    schedule_room_announcement(current_app._get_current_object(), link)

    return jsonify({
        'room_id': game.room_id,
        'link': link,
        'hand_size': game.default_hand_size,
    }), 201


@games.route('/<string:room_id>/state', methods=['GET'])
def get_game_state(room_id):
    """
    Returns the public state of a room. Private hands are never included.
    """
    game = get_registry().get(room_id)
    with game.lock:
        return jsonify(game.snapshot())
