from __future__ import annotations

from typing import Dict

from watchwatch.schemas.room import User


class PresenceTracker:
    """Who is connected to which room.

    room_id -> {connection_id: User}; a connection is tracked in at most one
    room. Snapshots are rebuilt on every change, rooms are expected to be small.
    """

    def __init__(self) -> None:
        self._by_room: Dict[str, Dict[str, User]] = {}
        self._room_of: Dict[str, str] = {}

    def join(self, room_id: str, connection_id: str, user: User) -> list[User]:
        self._by_room.setdefault(room_id, {})[connection_id] = user
        self._room_of[connection_id] = room_id
        return self.users(room_id)

    def remove(self, room_id: str, connection_id: str) -> tuple[User | None, list[User]]:
        members = self._by_room.get(room_id)
        if members is None:
            return None, []

        user = members.pop(connection_id, None)
        if user is not None:
            self._room_of.pop(connection_id, None)
        if not members:
            del self._by_room[room_id]
        return user, self.users(room_id)

    def is_empty(self, room_id: str) -> bool:
        return not self._by_room.get(room_id)

    def users(self, room_id: str) -> list[User]:
        return list(self._by_room.get(room_id, {}).values())

    def connection_ids(self, room_id: str) -> list[str]:
        return list(self._by_room.get(room_id, {}).keys())

    def room_of(self, connection_id: str) -> str | None:
        return self._room_of.get(connection_id)
