"""Pydantic request/response schemas for the API.

Defines: PlaybackStartEvent, PlaybackStopEvent, RecordResponse,
HealthResponse, ErrorResponse.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field

# =============================================================================
# Request Schemas
# =============================================================================


class PlaybackStartEvent(BaseModel):
    """Playback-start notification from the media server.

    Fields are optional on purpose: anything missing is recorded
    under the "unknown" label.

    Attributes:
        item_type: Item kind, e.g. "Movie", "Episode", "Audio".
        play_mode: Jellyfin play method, e.g. "DirectPlay", "Transcode".
        session_id: Host session identifier, used for log correlation only.
    """

    item_type: Optional[str] = Field(default=None, max_length=256, description="Item type")
    play_mode: Optional[str] = Field(default=None, max_length=64, description="Play method")
    session_id: Optional[str] = Field(default=None, max_length=128, description="Host session ID")


class PlaybackStopEvent(PlaybackStartEvent):
    """Playback-stop notification from the media server.

    Only an explicit played duration feeds the histogram. Playback
    position is not a duration (resumed or seeked sessions stop far from
    zero), so stops without duration_seconds are counted but not observed.

    Attributes:
        duration_seconds: Played duration in seconds.
    """

    duration_seconds: Optional[float] = Field(default=None, description="Played duration (seconds)")


# =============================================================================
# Response Schemas
# =============================================================================


class RecordResponse(BaseModel):
    """Acknowledgement of a recorded playback event.

    Attributes:
        event: "start" or "stop".
        item_type: Normalized item type label.
        play_mode: Normalized play mode label.
        duration_recorded: Whether a duration observation was made.
        request_id: Correlation ID of the request.
    """

    event: str
    item_type: str
    play_mode: str
    duration_recorded: bool = False
    request_id: Optional[str] = None


class HealthResponse(BaseModel):
    """Service health snapshot."""

    status: str = "healthy"
    app_name: str
    uptime_s: float
    metric_families: int


class ErrorResponse(BaseModel):
    """Standard error body.

    Attributes:
        error: Human-readable error message.
        detail: Additional context.
        request_id: Correlation ID of the failing request.
    """

    error: str
    detail: Optional[Any] = None
    request_id: Optional[str] = None
