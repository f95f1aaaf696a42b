from typing import Dict, List, Set

from flask import current_app, request
from flask_socketio import emit, join_room

from fluff import get_registry, socketio
from fluff.errors import GameError, InvalidPayload, RoomNotFound
from fluff.models import Notification

# sid -> room ids the connection has joined
_sid_to_rooms: Dict[str, Set[str]] = {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _namespace() -> str:
    return current_app.config.get('SOCKETIO_NAMESPACE', '/ws')


def _channel(room_id: str) -> str:
    return f"game:{room_id}"


def _deliver(room_id: str, notes: List[Notification]) -> None:
    """Send notifications in order. Private ones go to the owner's sid only."""
    namespace = _namespace()
    for note in notes:
        target = note.to if note.is_private else _channel(room_id)
        socketio.emit(note.event, note.payload, to=target, namespace=namespace)


def _payload(data) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidPayload()
    return data


def _room_id_from(data) -> str:
    room_id = data.get('room_id')
    if isinstance(room_id, str):
        room_id = room_id.strip()
    if not room_id or not isinstance(room_id, str):
        raise RoomNotFound('room_id is required')
    return room_id


def _rejected(action: str, room_id, exc: GameError):
    current_app.logger.info(f"[reject] action={action} room={room_id} sid={_get_sid()} error={exc.code}")
    return exc.to_dict()


def _apply(action: str, data, operation):
    """Run ``operation(game, sid, payload)`` under the room lock and deliver its result."""
    room_id = None
    try:
        payload = _payload(data)
        room_id = _room_id_from(payload)
        game = get_registry().get(room_id)
        with game.lock:
            notes = operation(game, _get_sid(), payload)
            _deliver(room_id, notes)
    except GameError as exc:
        return _rejected(action, room_id, exc)
    return {'ok': True}


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws', 'playerId': _get_sid()})


def _join_locked(registry, room_id, sid, name):
    """Join under the room lock, retrying if the room was torn down meanwhile."""
    while True:
        if current_app.config.get('AUTO_CREATE_ROOMS'):
            game = registry.get_or_create(room_id)
        else:
            game = registry.get(room_id)
        with game.lock:
            if not registry.holds(room_id, game):
                continue
            notes = game.join(sid, name)
            join_room(_channel(room_id))
            _sid_to_rooms.setdefault(sid, set()).add(room_id)
            _deliver(room_id, notes)
            return game.host_id == sid


def handle_join(data):
    sid = _get_sid()
    room_id = None
    try:
        payload = _payload(data)
        room_id = _room_id_from(payload)
        is_host = _join_locked(get_registry(), room_id, sid, payload.get('name'))
    except GameError as exc:
        return _rejected('join', room_id, exc)
    current_app.logger.info(f"[join] room={room_id} sid={sid} host={is_host}")
    return {'ok': True, 'playerId': sid, 'roomId': room_id, 'host': is_host}


def handle_start(data):
    return _apply('start', data, lambda game, sid, payload: game.start(sid))


def handle_bid(data):
    return _apply('bid', data, lambda game, sid, payload: game.place_bid(
        sid, payload.get('count'), payload.get('face')))


def handle_call(data):
    return _apply('call', data, lambda game, sid, payload: game.call_bid(sid))


def handle_disconnect(reason=None):
    sid = _get_sid()
    registry = get_registry()
    for room_id in sorted(_sid_to_rooms.pop(sid, set())):
        if room_id not in registry:
            continue
        game = registry.get(room_id)
        with game.lock:
            notes = game.disconnect(sid)
            _deliver(room_id, notes)
            if game.is_abandoned:
                registry.destroy(room_id)
        current_app.logger.info(f"[disconnect] room={room_id} sid={sid} reason={reason}")


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('start', handle_start, namespace=namespace)
    socketio.on_event('bid', handle_bid, namespace=namespace)
    socketio.on_event('call', handle_call, namespace=namespace)
