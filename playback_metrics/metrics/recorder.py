"""Playback start/stop recording.

The host calls record_start when a playback session begins and
record_stop when it ends. Both calls are synchronous, never block and
never raise: inputs are normalized rather than rejected.

Callers own the pairing. A stop without a matching start is accepted
and drives the active gauges below zero; that is left visible in the
data instead of being corrected here.
"""

from __future__ import annotations

from typing import Optional

from playback_metrics.metrics.labels import normalize_item_type, normalize_play_mode
from playback_metrics.metrics.registry import PlaybackMetricsRegistry
from playback_metrics.utils.logger import setup_logger

logger = setup_logger("metrics.recorder")


class PlaybackMetricsRecorder:
    """Apply playback lifecycle events to a PlaybackMetricsRegistry.

    Safe to share across threads and asyncio tasks; all synchronization
    happens inside the registry's series.

    Args:
        registry: The process-wide metrics registry.
    """

    def __init__(self, registry: PlaybackMetricsRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> PlaybackMetricsRegistry:
        return self._registry

    def record_start(self, item_type: Optional[str], play_mode: Optional[str]) -> None:
        """Count a playback start and mark it active.

        Args:
            item_type: Item type from the host (e.g. "Movie"), may be None.
            play_mode: Play method from the host (e.g. "Transcode"), may be None.
        """
        t, m = normalize_item_type(item_type), normalize_play_mode(play_mode)
        reg = self._registry

        reg.starts(t, m).inc()
        reg.active(t, m).inc()
        reg.mode_starts(m).inc()
        reg.active_by_mode(m).inc()

        logger.debug("Playback start recorded", extra={"item_type": t, "play_mode": m})

    def record_stop(
        self,
        item_type: Optional[str],
        play_mode: Optional[str],
        duration_seconds: Optional[float] = None,
    ) -> None:
        """Count a playback stop, release it from the active gauges and observe its duration.

        The duration is only observed when present and non-negative; a
        missing, negative or NaN duration still counts the stop.

        Args:
            item_type: Item type from the host, may be None.
            play_mode: Play method from the host, may be None.
            duration_seconds: How long the session played, in seconds.
        """
        t, m = normalize_item_type(item_type), normalize_play_mode(play_mode)
        reg = self._registry

        reg.stops(t, m).inc()
        reg.active(t, m).dec()
        reg.mode_stops(m).inc()
        reg.active_by_mode(m).dec()

        observed = is_observable_duration(duration_seconds)
        if observed:
            reg.duration.observe(duration_seconds)

        logger.debug(
            "Playback stop recorded",
            extra={
                "item_type": t,
                "play_mode": m,
                "duration_s": duration_seconds,
                "duration_observed": observed,
            },
        )


def is_observable_duration(duration_seconds: Optional[float]) -> bool:
    """Whether record_stop will put this duration into the histogram."""
    if duration_seconds is None:
        return False
    # NaN compares False
    return duration_seconds >= 0
