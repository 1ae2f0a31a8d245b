"""API route definitions for playback event ingestion.

Endpoints: playback start, playback stop, health check.
The scrape endpoint is mounted by the app factory at the configured path.
"""

from __future__ import annotations

import time

from fastapi import APIRouter, Request

from playback_metrics.api.schemas import (
    ErrorResponse,
    HealthResponse,
    PlaybackStartEvent,
    PlaybackStopEvent,
    RecordResponse,
)
from playback_metrics.metrics.labels import normalize_item_type, normalize_play_mode
from playback_metrics.metrics.recorder import is_observable_duration
from playback_metrics.metrics.registry import METRIC_FAMILIES
from playback_metrics.utils.logger import setup_logger

logger = setup_logger("api.routes")

router = APIRouter(prefix="/api/v1", tags=["Playback Metrics API v1"])


# =============================================================================
# Playback Events
# =============================================================================


@router.post(
    "/playback/start",
    response_model=RecordResponse,
    responses={403: {"model": ErrorResponse}},
    summary="Playback Start",
    description="Record that a playback session has started.",
)
async def playback_start(body: PlaybackStartEvent, request: Request) -> RecordResponse:
    """Record a playback start.

    Args:
        body: PlaybackStartEvent with item_type, play_mode, session_id.
        request: FastAPI request object (for recorder access).

    Returns:
        RecordResponse echoing the normalized labels.
    """
    recorder = request.app.state.recorder
    recorder.record_start(body.item_type, body.play_mode)

    logger.info("Playback start received", extra={"session_id": body.session_id})

    return RecordResponse(
        event="start",
        item_type=normalize_item_type(body.item_type),
        play_mode=normalize_play_mode(body.play_mode),
        request_id=getattr(request.state, "request_id", None),
    )


@router.post(
    "/playback/stop",
    response_model=RecordResponse,
    responses={403: {"model": ErrorResponse}},
    summary="Playback Stop",
    description="Record that a playback session has stopped, with its duration if known.",
)
async def playback_stop(body: PlaybackStopEvent, request: Request) -> RecordResponse:
    """Record a playback stop.

    Args:
        body: PlaybackStopEvent with labels and an optional duration_seconds.
        request: FastAPI request object (for recorder access).

    Returns:
        RecordResponse echoing the normalized labels and whether a
        duration was observed.
    """
    recorder = request.app.state.recorder
    duration = body.duration_seconds
    recorder.record_stop(body.item_type, body.play_mode, duration)

    logger.info(
        "Playback stop received",
        extra={"session_id": body.session_id, "duration_s": duration},
    )

    return RecordResponse(
        event="stop",
        item_type=normalize_item_type(body.item_type),
        play_mode=normalize_play_mode(body.play_mode),
        duration_recorded=is_observable_duration(duration),
        request_id=getattr(request.state, "request_id", None),
    )


# =============================================================================
# Health
# =============================================================================


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Report service uptime and the number of playback metric families.",
)
async def health_check(request: Request) -> HealthResponse:
    """Return service health information."""
    state = request.app.state
    return HealthResponse(
        app_name=state.config.app_name,
        uptime_s=round(time.monotonic() - state.started_at, 3),
        metric_families=len(METRIC_FAMILIES),
    )
