from __future__ import annotations

from dataclasses import dataclass

from watchwatch.schemas.room import VideoSource, VideoStateOut
from watchwatch.schemas.ws import VideoAction

DEBOUNCE_MS = 300


@dataclass
class VideoState:
    """The room's shared playback record. Positions are in seconds."""
    type: VideoSource | None = None
    video_id: str | None = None
    video_url: str | None = None
    current_time: float = 0.0
    is_playing: bool = False
    last_updated: int | None = None  # epoch ms of the last accepted mutation
    last_updated_by: str | None = None

    def to_out(self) -> VideoStateOut:
        return VideoStateOut(
            type=self.type,
            video_id=self.video_id,
            video_url=self.video_url,
            current_time=self.current_time,
            is_playing=self.is_playing,
            last_updated=self.last_updated,
            last_updated_by=self.last_updated_by,
        )


def load(
    state: VideoState,
    *,
    source: VideoSource,
    video_id: str | None,
    video_url: str | None,
    user_id: str,
    now: int,
) -> None:
    state.type = source
    state.video_id = video_id
    state.video_url = video_url
    state.current_time = 0.0
    state.is_playing = False
    state.last_updated = now
    state.last_updated_by = user_id


def is_debounced(state: VideoState, now: int, window_ms: int = DEBOUNCE_MS) -> bool:
    # Room-wide: any accepted change blocks every user for the window.
    return state.last_updated is not None and now - state.last_updated < window_ms


def apply_action(
    state: VideoState,
    action: VideoAction,
    time: float | None,
    *,
    user_id: str,
    now: int,
) -> None:
    """Apply one playback action. Callers check is_debounced() first."""
    if action == "play":
        if time is not None:
            state.current_time = time
        state.is_playing = True
    elif action == "pause":
        if time is not None:
            state.current_time = time
        state.is_playing = False
    elif action == "seek":
        if time is None:
            raise ValueError("seek requires a time")
        state.current_time = time
    elif action == "restart":
        # always from the beginning, whatever time was sent
        state.current_time = 0.0
        state.is_playing = True
    else:
        raise ValueError(f"unknown video action: {action!r}")

    state.last_updated = now
    state.last_updated_by = user_id
