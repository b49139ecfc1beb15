class SiegeError(Exception):
    """Base class for errors raised by the game services."""


class RoomNotFoundError(SiegeError, LookupError):
    def __init__(self, room_id):
        super().__init__(f"Room not found: {room_id}")
        self.room_id = room_id


class InvalidPayloadError(SiegeError, ValueError):
    """An inbound socket payload is missing a field or has the wrong type."""
