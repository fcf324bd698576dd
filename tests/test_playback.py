import pytest

from watchwatch.runtime import playback
from watchwatch.runtime.playback import VideoState
from watchwatch.schemas.room import VideoSource


def _loaded(now: int = 1000) -> VideoState:
    state = VideoState()
    playback.load(state, source=VideoSource.YOUTUBE, video_id="abc", video_url=None, user_id="u1", now=now)
    return state


def test_load_resets_position_and_pauses() -> None:
    state = VideoState(current_time=55.0, is_playing=True)
    playback.load(state, source=VideoSource.UPLOAD, video_id=None, video_url="/uploads/x.mp4", user_id="u2", now=42)

    assert state.type is VideoSource.UPLOAD
    assert state.video_url == "/uploads/x.mp4"
    assert state.current_time == 0
    assert state.is_playing is False
    assert state.last_updated == 42
    assert state.last_updated_by == "u2"


def test_play_keeps_position_without_time() -> None:
    state = _loaded()
    state.current_time = 12.5
    playback.apply_action(state, "play", None, user_id="u1", now=2000)
    assert state.is_playing is True
    assert state.current_time == 12.5


def test_play_with_zero_time_moves_to_zero() -> None:
    state = _loaded()
    state.current_time = 12.5
    playback.apply_action(state, "play", 0, user_id="u1", now=2000)
    assert state.current_time == 0


def test_pause_sets_time_when_given() -> None:
    state = _loaded()
    state.is_playing = True
    playback.apply_action(state, "pause", 30.0, user_id="u3", now=2000)
    assert state.is_playing is False
    assert state.current_time == 30.0
    assert state.last_updated_by == "u3"
    assert state.last_updated == 2000


def test_seek_leaves_playing_flag_alone() -> None:
    state = _loaded()
    state.is_playing = True
    playback.apply_action(state, "seek", 42, user_id="u1", now=2000)
    assert state.current_time == 42
    assert state.is_playing is True


def test_seek_without_time_is_rejected() -> None:
    with pytest.raises(ValueError):
        playback.apply_action(_loaded(), "seek", None, user_id="u1", now=2000)


@pytest.mark.parametrize("time", [None, 0, 99.9])
def test_restart_ignores_time(time) -> None:
    state = _loaded()
    state.current_time = 80
    playback.apply_action(state, "restart", time, user_id="u1", now=2000)
    assert state.current_time == 0
    assert state.is_playing is True


def test_debounce_window() -> None:
    state = _loaded(now=1000)
    assert playback.is_debounced(state, 1299)
    assert not playback.is_debounced(state, 1300)
    assert not playback.is_debounced(VideoState(), 1000)
