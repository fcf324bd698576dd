from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict

from watchwatch.core.errors import RoomNotFound
from watchwatch.runtime import playback
from watchwatch.runtime.playback import VideoState
from watchwatch.runtime.presence import PresenceTracker
from watchwatch.schemas.room import User, VideoSource
from watchwatch.schemas.ws import VideoAction

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_ms() -> int:
    return int(_utc_now().timestamp() * 1000)


@dataclass
class RoomInfo:
    room_id: str
    created_at: datetime = field(default_factory=_utc_now)


@dataclass(frozen=True)
class Departure:
    """Result of removing a connection from a room."""
    user: User | None
    users: list[User]
    closed: bool  # room state was deleted because nobody is left


class RoomStore:
    """
    All per-room state for the process: directory, video state and presence.

    The three structures for a room are created together on the first join and
    deleted together when the last member leaves. Methods never await, so a
    caller's read-mutate sequence cannot interleave with another event.
    """

    def __init__(
        self,
        *,
        debounce_ms: int = playback.DEBOUNCE_MS,
        clock: Callable[[], int] = now_ms,
    ):
        self.debounce_ms = debounce_ms
        self.clock = clock
        self._rooms: Dict[str, RoomInfo] = {}
        self._video: Dict[str, VideoState] = {}
        self._presence = PresenceTracker()

    # ---------- presence / lifecycle ----------

    def join(self, room_id: str, connection_id: str, user: User) -> list[User]:
        previous = self._presence.room_of(connection_id)
        if previous is not None and previous != room_id:
            raise ValueError(f"connection {connection_id} must leave room {previous} first")
        if room_id not in self._rooms:
            self._rooms[room_id] = RoomInfo(room_id=room_id)
            self._video[room_id] = VideoState()
            logger.info("room %s created", room_id)
        return self._presence.join(room_id, connection_id, user)

    def remove(self, room_id: str, connection_id: str) -> Departure:
        user, users = self._presence.remove(room_id, connection_id)
        closed = False
        if self._presence.is_empty(room_id) and room_id in self._rooms:
            self._rooms.pop(room_id, None)
            self._video.pop(room_id, None)
            closed = True
            logger.info("room %s cleaned up (no users)", room_id)
        return Departure(user=user, users=users, closed=closed)

    def is_empty(self, room_id: str) -> bool:
        return self._presence.is_empty(room_id)

    def has_room(self, room_id: str) -> bool:
        return room_id in self._rooms

    def users(self, room_id: str) -> list[User]:
        return self._presence.users(room_id)

    def connection_ids(self, room_id: str) -> list[str]:
        return self._presence.connection_ids(room_id)

    def room_of(self, connection_id: str) -> str | None:
        return self._presence.room_of(connection_id)

    # ---------- playback ----------

    def video_state(self, room_id: str) -> VideoState:
        state = self._video.get(room_id)
        if state is None:
            raise RoomNotFound(room_id)
        return state

    def load_video(
        self,
        room_id: str,
        *,
        source: VideoSource,
        video_id: str | None,
        video_url: str | None,
        user_id: str,
    ) -> VideoState:
        state = self.video_state(room_id)
        playback.load(
            state,
            source=source,
            video_id=video_id,
            video_url=video_url,
            user_id=user_id,
            now=self.clock(),
        )
        return state

    def apply_action(
        self,
        room_id: str,
        action: VideoAction,
        time: float | None,
        *,
        user_id: str,
    ) -> VideoState | None:
        """Returns the updated state, or None when the action fell inside the debounce window."""
        state = self.video_state(room_id)
        now = self.clock()
        if playback.is_debounced(state, now, self.debounce_ms):
            return None
        playback.apply_action(state, action, time, user_id=user_id, now=now)
        return state

    # ---------- inspection ----------

    def room(self, room_id: str) -> RoomInfo:
        info = self._rooms.get(room_id)
        if info is None:
            raise RoomNotFound(room_id)
        return info

    def rooms(self) -> list[RoomInfo]:
        return sorted(self._rooms.values(), key=lambda r: r.created_at, reverse=True)
