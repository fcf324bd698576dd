from __future__ import annotations

import json
import logging
from typing import Callable, Dict

from pydantic import ValidationError

from watchwatch.core.errors import EventValidationError, WatchError
from watchwatch.realtime.hub import Connection, ConnectionHub
from watchwatch.runtime.store import RoomStore
from watchwatch.schemas.ws import (
    CLIENT_EVENTS,
    SIGNAL_OUT,
    AnswerIn,
    ChatMessageIn,
    ChatMessageOut,
    ClientEvent,
    Envelope,
    ErrorOut,
    IceCandidateIn,
    JoinRoomIn,
    LeaveRoomIn,
    OfferIn,
    RoomJoinedOut,
    SignalIn,
    UserJoinedOut,
    UserLeftOut,
    VideoActionIn,
    VideoActionOut,
    VideoLoadIn,
    VideoLoadOut,
)

logger = logging.getLogger(__name__)


class RoomService:
    """
    Handles inbound websocket events for all rooms.

    Every handler is synchronous: it reads and mutates the store, then queues
    its fan-out, before the next event is looked at.
    """

    def __init__(self, store: RoomStore, hub: ConnectionHub):
        self.store = store
        self.hub = hub
        self._handlers: Dict[str, Callable[[Connection, ClientEvent], None]] = {
            JoinRoomIn.EVENT: self.join_room,
            VideoLoadIn.EVENT: self.load_video,
            VideoActionIn.EVENT: self.video_action,
            ChatMessageIn.EVENT: self.chat_message,
            OfferIn.EVENT: self.relay_signal,
            AnswerIn.EVENT: self.relay_signal,
            IceCandidateIn.EVENT: self.relay_signal,
            LeaveRoomIn.EVENT: self.leave_room,
        }

    # ---------- dispatch ----------

    def dispatch(self, conn: Connection, raw: str | bytes | None) -> None:
        """Parse one frame and run its handler. Never raises."""
        try:
            event = self._parse(raw)
            self._handlers[event.EVENT](conn, event)
        except WatchError as e:
            self.hub.to_sender(conn, ErrorOut(message=e.message))
        except Exception:
            logger.exception("error handling frame from %s", conn.id)

    def _parse(self, raw: str | bytes | None) -> ClientEvent:
        if not isinstance(raw, str):
            raise EventValidationError("Malformed message")
        try:
            envelope = Envelope.model_validate(json.loads(raw))
        except (json.JSONDecodeError, ValidationError):
            raise EventValidationError("Malformed message")

        model = CLIENT_EVENTS.get(envelope.event)
        if model is None:
            raise EventValidationError("Unknown event")

        try:
            return model.model_validate(envelope.data)
        except ValidationError as e:
            logger.debug("rejected %s: %s", envelope.event, _describe(e))
            raise EventValidationError(model.ERROR)

    # ---------- handlers ----------

    def join_room(self, conn: Connection, event: JoinRoomIn) -> None:
        room_id = event.room_id
        previous = self.store.room_of(conn.id)
        if previous is not None and previous != room_id:
            self._depart(conn, previous)

        user = event.user.model_copy(update={"socket_id": conn.id})
        users = self.store.join(room_id, conn.id, user)
        conn.room_id = room_id
        conn.user = user

        self.hub.to_sender(conn, RoomJoinedOut(
            room_id=room_id,
            user_count=len(users),
            current_video_state=self.store.video_state(room_id).to_out(),
            users=users,
        ))
        self.hub.to_others(self.store.connection_ids(room_id), conn.id, UserJoinedOut(
            user=user,
            user_count=len(users),
            users=users,
        ))
        logger.info("user %s joined room %s", user.name, room_id)

    def load_video(self, conn: Connection, event: VideoLoadIn) -> None:
        state = self.store.load_video(
            event.room_id,
            source=event.type,
            video_id=event.video_id,
            video_url=event.video_url,
            user_id=event.user_id,
        )
        self.hub.to_room(self.store.connection_ids(event.room_id), VideoLoadOut(
            type=event.type,
            video_id=event.video_id,
            video_url=event.video_url,
            user_id=event.user_id,
            timestamp=state.last_updated,
        ))
        logger.info(
            "video loaded in room %s: %s - %s by %s",
            event.room_id, event.type.value, event.video_id or event.video_url, event.user_id,
        )

    def video_action(self, conn: Connection, event: VideoActionIn) -> None:
        state = self.store.apply_action(event.room_id, event.action, event.time, user_id=event.user_id)
        if state is None:
            logger.debug("dropped %s in room %s from %s (debounce)", event.action, event.room_id, event.user_id)
            return

        # pass through whatever else the client attached, never its own timestamp
        extra = {k: v for k, v in (event.model_extra or {}).items() if k not in _VIDEO_ACTION_KEYS}
        self.hub.to_others(self.store.connection_ids(event.room_id), conn.id, VideoActionOut(
            **extra,
            room_id=event.room_id,
            action=event.action,
            time=event.time,
            user_id=event.user_id,
            timestamp=state.last_updated,
        ))
        logger.info("video action in room %s: %s at %ss by %s", event.room_id, event.action, event.time, event.user_id)

    def chat_message(self, conn: Connection, event: ChatMessageIn) -> None:
        self.hub.to_room(self.store.connection_ids(event.room_id), ChatMessageOut(
            user=event.user,
            message=event.message,
            timestamp=self.store.clock(),
        ))

    def relay_signal(self, conn: Connection, event: SignalIn) -> None:
        out = SIGNAL_OUT[event.EVENT](payload=event.payload, from_=conn.id, timestamp=self.store.clock())
        sent = self.hub.to_others(self.store.connection_ids(event.room_id), conn.id, out)
        logger.debug("relayed %s from %s to %d peer(s) in room %s", event.EVENT, conn.id, sent, event.room_id)

    def leave_room(self, conn: Connection, event: LeaveRoomIn) -> None:
        self._depart(conn, event.room_id)
        logger.info("user %s left room %s", event.user_id, event.room_id)

    def disconnect(self, conn: Connection) -> None:
        """Transport went away: same cleanup as an explicit leave, nothing sent to conn."""
        if conn.room_id is not None and conn.user is not None:
            self._depart(conn, conn.room_id)
        logger.info("connection %s disconnected", conn.id)

    # ---------- lifecycle ----------

    def _depart(self, conn: Connection, room_id: str) -> None:
        departure = self.store.remove(room_id, conn.id)
        if conn.room_id == room_id:
            conn.room_id = None
            conn.user = None
        if departure.user is None:
            return

        self.hub.to_others(self.store.connection_ids(room_id), conn.id, UserLeftOut(
            user_name=departure.user.name,
            user_count=len(departure.users),
            users=departure.users,
        ))


def _describe(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())


_VIDEO_ACTION_KEYS = {
    key
    for name, field in VideoActionOut.model_fields.items()
    for key in (name, field.alias)
    if key
}
