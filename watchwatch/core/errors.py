from __future__ import annotations


class WatchError(Exception):
    """Base for client-caused, non-fatal errors reported back to the sender."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EventValidationError(WatchError):
    """A client event is missing required fields or has the wrong shape."""


class NotFoundError(WatchError):
    pass


class RoomNotFound(NotFoundError):
    def __init__(self, room_id: str):
        super().__init__("Room not found")
        self.room_id = room_id
