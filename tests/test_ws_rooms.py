from conftest import frame


def _join(ws, uid: str, room_id: str = "r1") -> None:
    ws.send_text(frame("join-room", roomId=room_id, user={"id": uid, "name": uid.upper()}))


def test_watch_party_scenario(client) -> None:
    with client.websocket_connect("/v1/ws") as b:
        with client.websocket_connect("/v1/ws") as a:
            _join(a, "a")
            joined = a.receive_json()
            assert joined["event"] == "room-joined"
            assert joined["data"]["userCount"] == 1

            _join(b, "b")
            msg = b.receive_json()
            assert msg["event"] == "room-joined"
            assert msg["data"]["userCount"] == 2
            msg = a.receive_json()
            assert msg["event"] == "user-joined"
            assert msg["data"]["userCount"] == 2

            b.send_text(frame("video-action", roomId="r1", action="seek", time=42, userId="b"))
            msg = a.receive_json()
            assert msg["event"] == "video-action"
            assert msg["data"]["action"] == "seek"
            assert msg["data"]["time"] == 42
            assert isinstance(msg["data"]["timestamp"], int)

            # b's next frame is a's chat, so the seek was never echoed to b
            a.send_text(frame("chat-message", roomId="r1", user={"id": "a", "name": "A"}, message="hello"))
            assert a.receive_json()["event"] == "chat-message"
            msg = b.receive_json()
            assert msg["event"] == "chat-message"
            assert msg["data"]["message"] == "hello"

        # a disconnected
        msg = b.receive_json()
        assert msg["event"] == "user-left"
        assert msg["data"]["userName"] == "A"
        assert msg["data"]["userCount"] == 1

        resp = client.get("/v1/rooms/r1")
        assert resp.status_code == 200
        assert resp.json()["userCount"] == 1
        assert resp.json()["currentVideoState"]["currentTime"] == 42

        b.send_text(frame("leave-room", roomId="r1", userId="b"))
        # frames are handled in order, so once this error arrives the leave is done
        b.send_text(frame("leave-room", roomId="r1"))
        assert b.receive_json() == {"event": "error", "data": {"message": "Invalid leave room data"}}

        assert client.get("/v1/rooms/r1").status_code == 404
        assert client.get("/v1/rooms").json() == {"rooms": []}


def test_error_keeps_connection_usable(client) -> None:
    with client.websocket_connect("/v1/ws") as ws:
        ws.send_text(frame("video-action", roomId="nowhere", action="play", time=1, userId="u"))
        assert ws.receive_json() == {"event": "error", "data": {"message": "Room not found"}}

        _join(ws, "u")
        assert ws.receive_json()["event"] == "room-joined"

        ws.send_text(frame("video-load", roomId="r1", type="upload", videoUrl="/uploads/x.mp4", userId="u"))
        msg = ws.receive_json()
        assert msg["event"] == "video-load"
        assert msg["data"]["videoUrl"] == "/uploads/x.mp4"


def test_rooms_listing(client) -> None:
    assert client.get("/v1/rooms").json() == {"rooms": []}

    with client.websocket_connect("/v1/ws") as ws:
        _join(ws, "u", room_id="movie-night")
        ws.receive_json()

        rooms = client.get("/v1/rooms").json()["rooms"]
        assert [(r["roomId"], r["userCount"]) for r in rooms] == [("movie-night", 1)]

        detail = client.get("/v1/rooms/movie-night").json()
        assert detail["users"][0]["name"] == "U"
        assert detail["currentVideoState"]["type"] is None


def test_binary_frame_is_rejected_and_connection_survives(client) -> None:
    with client.websocket_connect("/v1/ws") as ws:
        ws.send_bytes(b"\x00")
        assert ws.receive_json() == {"event": "error", "data": {"message": "Malformed message"}}

        ws.send_bytes(frame("join-room", roomId="r1", user={"id": "u", "name": "U"}).encode())
        assert ws.receive_json() == {"event": "error", "data": {"message": "Malformed message"}}

        _join(ws, "u")
        msg = ws.receive_json()
        assert msg["event"] == "room-joined"
        assert msg["data"]["userCount"] == 1
