from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from watchwatch.api.deps import get_store
from watchwatch.runtime.store import RoomInfo, RoomStore
from watchwatch.schemas.room import RoomDetailOut, RoomListOut, RoomOut

router = APIRouter()


def _build_room_out(store: RoomStore, room: RoomInfo) -> RoomOut:
    """Helper to build RoomOut with user count from presence."""
    return RoomOut(
        room_id=room.room_id,
        created_at=room.created_at,
        user_count=len(store.users(room.room_id)),
    )


@router.get("", response_model=RoomListOut)
async def list_rooms(store: RoomStore = Depends(get_store)) -> RoomListOut:
    return RoomListOut(rooms=[_build_room_out(store, room) for room in store.rooms()])


@router.get("/{room_id}", response_model=RoomDetailOut)
async def get_room(room_id: str, store: RoomStore = Depends(get_store)) -> RoomDetailOut:
    if not store.has_room(room_id):
        raise HTTPException(status_code=404, detail="room not found")

    room = store.room(room_id)
    users = store.users(room_id)
    return RoomDetailOut(
        room_id=room.room_id,
        created_at=room.created_at,
        user_count=len(users),
        users=users,
        current_video_state=store.video_state(room_id).to_out(),
    )
