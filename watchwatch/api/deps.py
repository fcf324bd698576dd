from fastapi import Request

from watchwatch.runtime.store import RoomStore
from watchwatch.services.storage_service import StorageService


def get_store(request: Request) -> RoomStore:
    return request.app.state.store


def get_storage(request: Request) -> StorageService:
    return request.app.state.storage
