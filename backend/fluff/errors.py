"""Request-local rejections raised by the game core.

Each error carries a stable ``code`` that is sent back to the client and a
human readable message. None of them affect other players or end a room.
"""


class GameError(Exception):
    code = 'GameError'
    status_code = 400
    default_message = 'Request rejected'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.code, 'message': self.message}


class RoomNotFound(GameError):
    code = 'RoomNotFound'
    status_code = 404
    default_message = 'Game not found'


class RoomExists(GameError):
    code = 'RoomExists'
    status_code = 409
    default_message = 'A game with this id already exists'


class NotHost(GameError):
    code = 'NotHost'
    status_code = 403
    default_message = 'Only host can start'


class NotEnoughPlayers(GameError):
    code = 'NotEnoughPlayers'
    default_message = 'At least two players are needed to start'


class AlreadyStarted(GameError):
    code = 'AlreadyStarted'
    default_message = 'Already started'


class GameNotRunning(GameError):
    code = 'GameNotRunning'
    default_message = 'Game not running'


class NotYourTurn(GameError):
    code = 'NotYourTurn'
    status_code = 403
    default_message = 'Not your turn'


class InvalidBid(GameError):
    code = 'InvalidBid'
    default_message = 'Invalid bid'


class DuplicateBid(GameError):
    code = 'DuplicateBid'
    default_message = 'This exact bid has already been made this round.'


class NoActiveBid(GameError):
    code = 'NoActiveBid'
    default_message = 'No bid to call'


class InvalidPayload(GameError):
    code = 'InvalidPayload'
    default_message = 'Payload must be an object'
