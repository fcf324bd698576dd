from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import List

from pydantic import ConfigDict, Field

from watchwatch.schemas.base import CamelModel


class VideoSource(str, Enum):
    YOUTUBE = "youtube"  # external reference id
    UPLOAD = "upload"    # url returned by POST /v1/upload


class User(CamelModel):
    # clients may attach extra profile fields (avatar, color); they travel with the user
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    # set by the server at join time, never taken from the client
    socket_id: str | None = None


class VideoStateOut(CamelModel):
    type: VideoSource | None = None
    video_id: str | None = None
    video_url: str | None = None
    current_time: float = 0
    is_playing: bool = False
    last_updated: int | None = None
    last_updated_by: str | None = None


class RoomOut(CamelModel):
    room_id: str
    created_at: datetime
    user_count: int = 0


class RoomDetailOut(RoomOut):
    users: List[User] = []
    current_video_state: VideoStateOut


class RoomListOut(CamelModel):
    rooms: List[RoomOut]
