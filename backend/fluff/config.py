import os


def _env_list(name, default):
    raw = os.environ.get(name)
    if not raw:
        return default
    return [item.strip() for item in raw.split(',') if item.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Dice per player when a room is created without an explicit hand size
    DEFAULT_HAND_SIZE = int(os.environ.get('DEFAULT_HAND_SIZE', '5'))
    MAX_HAND_SIZE = int(os.environ.get('MAX_HAND_SIZE', '10'))
    MIN_PLAYERS = int(os.environ.get('MIN_PLAYERS', '2'))
    ROOM_ID_LENGTH = int(os.environ.get('ROOM_ID_LENGTH', '8'))
    # Joining an unknown room id creates it instead of failing with RoomNotFound
    AUTO_CREATE_ROOMS = os.environ.get('AUTO_CREATE_ROOMS', '1').lower() not in ('0', 'false', 'no')
    # Optional: announce new rooms on a Discord channel
    DISCORD_WEBHOOK_URL = os.environ.get('DISCORD_WEBHOOK_URL') or None
    WEBHOOK_TIMEOUT_SEC = float(os.environ.get('WEBHOOK_TIMEOUT_SEC', '5'))
    CORS_ORIGINS = _env_list('CORS_ORIGINS', [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ])
    SOCKETIO_NAMESPACE = '/ws'
