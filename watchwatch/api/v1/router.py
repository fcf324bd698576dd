from fastapi import APIRouter
from watchwatch.api.v1 import rooms, uploads, ws_rooms

router = APIRouter()
router.include_router(rooms.router, prefix="/rooms", tags=["rooms"])
router.include_router(uploads.router, tags=["uploads"])
router.include_router(ws_rooms.router, tags=["rooms-ws"])
