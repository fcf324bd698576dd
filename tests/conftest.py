from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from watchwatch.core import Settings
from watchwatch.main import create_app
from watchwatch.realtime.hub import Connection, ConnectionHub, encode
from watchwatch.runtime.store import RoomStore
from watchwatch.services.room_service import RoomService


class FakeClock:
    """Epoch-ms clock the tests move by hand."""

    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class RecordingConnection(Connection):
    def __init__(self, connection_id: str):
        super().__init__(connection_id=connection_id)
        self.frames: list[dict] = []

    def send(self, event) -> None:
        self.frames.append(encode(event))

    def events(self) -> list[str]:
        return [f["event"] for f in self.frames]

    def last(self) -> dict:
        return self.frames[-1]


def frame(event: str, **data) -> str:
    return json.dumps({"event": event, "data": data})


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> RoomStore:
    return RoomStore(clock=clock)


@pytest.fixture
def hub() -> ConnectionHub:
    return ConnectionHub()


@pytest.fixture
def service(store: RoomStore, hub: ConnectionHub) -> RoomService:
    return RoomService(store, hub)


@pytest.fixture
def connect(hub: ConnectionHub):
    def _connect(connection_id: str) -> RecordingConnection:
        conn = RecordingConnection(connection_id)
        hub.register(conn)
        return conn

    return _connect


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        STORAGE_DIR=str(tmp_path / "uploads"),
        STATIC_DIR=str(tmp_path / "public"),
        MAX_UPLOAD_BYTES=1024,
    )


@pytest.fixture
def client(settings: Settings, store: RoomStore) -> TestClient:
    return TestClient(create_app(settings, store=store))
