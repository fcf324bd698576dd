from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Literal, Type

from pydantic import BaseModel, ConfigDict, Field, model_validator

from watchwatch.schemas.base import CamelModel
from watchwatch.schemas.room import User, VideoSource, VideoStateOut


class Envelope(BaseModel):
    """Every frame in both directions: {"event": ..., "data": {...}}."""
    event: str = Field(..., min_length=1)
    data: Dict[str, Any] = {}


# ---- client -> server ----

class ClientEvent(CamelModel):
    EVENT: ClassVar[str]
    ERROR: ClassVar[str]


class JoinRoomIn(ClientEvent):
    EVENT: ClassVar[str] = "join-room"
    ERROR: ClassVar[str] = "Invalid join data"

    room_id: str = Field(..., min_length=1)
    user: User


class VideoLoadIn(ClientEvent):
    EVENT: ClassVar[str] = "video-load"
    ERROR: ClassVar[str] = "Invalid video load data"

    room_id: str = Field(..., min_length=1)
    type: VideoSource
    video_id: str | None = None
    video_url: str | None = None
    user_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _needs_reference(self) -> "VideoLoadIn":
        if not self.video_id and not self.video_url:
            raise ValueError("videoId or videoUrl is required")
        return self


VideoAction = Literal["play", "pause", "seek", "restart"]


class VideoActionIn(ClientEvent):
    # unknown fields are forwarded to peers unchanged
    model_config = ConfigDict(extra="allow")
    EVENT: ClassVar[str] = "video-action"
    ERROR: ClassVar[str] = "Invalid video action data"

    room_id: str = Field(..., min_length=1)
    action: VideoAction
    time: float | None = None
    user_id: str = Field(..., min_length=1)

    @model_validator(mode="after")
    def _seek_needs_time(self) -> "VideoActionIn":
        if self.action == "seek" and self.time is None:
            raise ValueError("seek requires time")
        return self


class ChatMessageIn(ClientEvent):
    EVENT: ClassVar[str] = "chat-message"
    ERROR: ClassVar[str] = "Invalid chat message"

    room_id: str = Field(..., min_length=1)
    user: User
    message: str = Field(..., min_length=1)


class SignalIn(ClientEvent):
    ERROR: ClassVar[str] = "Invalid signaling data"

    room_id: str = Field(..., min_length=1)
    payload: Any


class OfferIn(SignalIn):
    EVENT: ClassVar[str] = "offer"


class AnswerIn(SignalIn):
    EVENT: ClassVar[str] = "answer"


class IceCandidateIn(SignalIn):
    EVENT: ClassVar[str] = "ice-candidate"


class LeaveRoomIn(ClientEvent):
    EVENT: ClassVar[str] = "leave-room"
    ERROR: ClassVar[str] = "Invalid leave room data"

    room_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)


CLIENT_EVENTS: Dict[str, Type[ClientEvent]] = {
    m.EVENT: m
    for m in (JoinRoomIn, VideoLoadIn, VideoActionIn, ChatMessageIn, OfferIn, AnswerIn, IceCandidateIn, LeaveRoomIn)
}


# ---- server -> clients ----

class ServerEvent(CamelModel):
    EVENT: ClassVar[str]


class RoomJoinedOut(ServerEvent):
    EVENT: ClassVar[str] = "room-joined"
    room_id: str
    user_count: int
    current_video_state: VideoStateOut
    users: List[User] = []


class UserJoinedOut(ServerEvent):
    EVENT: ClassVar[str] = "user-joined"
    user: User
    user_count: int
    users: List[User] = []


class UserLeftOut(ServerEvent):
    EVENT: ClassVar[str] = "user-left"
    user_name: str
    user_count: int
    users: List[User] = []


class VideoLoadOut(ServerEvent):
    EVENT: ClassVar[str] = "video-load"
    type: VideoSource
    video_id: str | None = None
    video_url: str | None = None
    user_id: str
    timestamp: int


class VideoActionOut(ServerEvent):
    model_config = ConfigDict(extra="allow")
    EVENT: ClassVar[str] = "video-action"
    room_id: str
    action: VideoAction
    time: float | None = None
    user_id: str
    timestamp: int


class ChatMessageOut(ServerEvent):
    EVENT: ClassVar[str] = "chat-message"
    user: User
    message: str
    timestamp: int


class SignalOut(ServerEvent):
    payload: Any = None
    from_: str = Field(..., alias="from")
    timestamp: int


class OfferOut(SignalOut):
    EVENT: ClassVar[str] = "offer"


class AnswerOut(SignalOut):
    EVENT: ClassVar[str] = "answer"


class IceCandidateOut(SignalOut):
    EVENT: ClassVar[str] = "ice-candidate"


SIGNAL_OUT: Dict[str, Type[SignalOut]] = {m.EVENT: m for m in (OfferOut, AnswerOut, IceCandidateOut)}


class ErrorOut(ServerEvent):
    EVENT: ClassVar[str] = "error"
    message: str
