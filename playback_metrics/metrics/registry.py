"""Prometheus metric families for playback tracking.

Names, label sets and bucket bounds below are consumed by dashboards and
alerts downstream; treat them as a wire contract.
"""

from __future__ import annotations

from typing import Optional

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    GCCollector,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)

from playback_metrics.utils.exceptions import RegistryError
from playback_metrics.utils.logger import setup_logger

logger = setup_logger("metrics.registry")

ITEM_MODE_LABELS = ("item_type", "play_mode")
MODE_LABELS = ("play_mode",)

# Roughly 15s, 1m, 5m, 15m, 1h, 2h, 4h
DURATION_BUCKETS = (15, 60, 300, 900, 3600, 7200, 14400)

PLAYBACK_STARTS = "jellyfin_playback_starts_total"
PLAYBACK_STOPS = "jellyfin_playback_stops_total"
ACTIVE_PLAYBACKS = "jellyfin_active_playbacks"
MODE_STARTS = "jellyfin_playback_mode_starts_total"
MODE_STOPS = "jellyfin_playback_mode_stops_total"
ACTIVE_PLAYBACKS_BY_MODE = "jellyfin_active_playbacks_by_mode"
PLAYBACK_DURATION = "jellyfin_playback_duration_seconds"

# (name, type, labels)
METRIC_FAMILIES = (
    (PLAYBACK_STARTS, "counter", ITEM_MODE_LABELS),
    (PLAYBACK_STOPS, "counter", ITEM_MODE_LABELS),
    (ACTIVE_PLAYBACKS, "gauge", ITEM_MODE_LABELS),
    (MODE_STARTS, "counter", MODE_LABELS),
    (MODE_STOPS, "counter", MODE_LABELS),
    (ACTIVE_PLAYBACKS_BY_MODE, "gauge", MODE_LABELS),
    (PLAYBACK_DURATION, "histogram", ()),
)


class PlaybackMetricsRegistry:
    """Owns the playback metric families and the registry they live in.

    Construct one per process and hand it to PlaybackMetricsRecorder.
    Child series are created on first use of a label combination;
    prometheus_client creates each child exactly once under its own lock
    and guards every value update with a mutex.

    Args:
        registry: Target CollectorRegistry. A private one is created when omitted.
        include_process_metrics: Also register process, platform and GC collectors.
            Only meant for a private registry: prometheus_client does not
            name-check these, so enabling it on a registry that already has
            them (e.g. the global REGISTRY) duplicates the process_* and
            python_* series.

    Raises:
        RegistryError: If a family is already registered in ``registry``.
            Anything registered by this call is unregistered first.
    """

    def __init__(
        self,
        registry: Optional[CollectorRegistry] = None,
        include_process_metrics: bool = False,
    ) -> None:
        self.collector_registry = registry if registry is not None else CollectorRegistry()
        self.content_type = CONTENT_TYPE_LATEST

        # Built detached, then registered one by one so a failure can be rolled back
        self.playback_starts = Counter(
            PLAYBACK_STARTS,
            "Total number of playback starts.",
            labelnames=ITEM_MODE_LABELS,
            registry=None,
        )
        self.playback_stops = Counter(
            PLAYBACK_STOPS,
            "Total number of playback stops.",
            labelnames=ITEM_MODE_LABELS,
            registry=None,
        )
        self.active_playbacks = Gauge(
            ACTIVE_PLAYBACKS,
            "Current number of active playbacks.",
            labelnames=ITEM_MODE_LABELS,
            registry=None,
        )

        # Mode-only families for ratio dashboards
        self.mode_starts_total = Counter(
            MODE_STARTS,
            "Total number of playback starts by mode only.",
            labelnames=MODE_LABELS,
            registry=None,
        )
        self.mode_stops_total = Counter(
            MODE_STOPS,
            "Total number of playback stops by mode only.",
            labelnames=MODE_LABELS,
            registry=None,
        )
        self.active_playbacks_by_mode = Gauge(
            ACTIVE_PLAYBACKS_BY_MODE,
            "Current number of active playbacks (mode only).",
            labelnames=MODE_LABELS,
            registry=None,
        )

        # Label-free to keep cardinality flat
        self.duration = Histogram(
            PLAYBACK_DURATION,
            "Observed playback duration on stop in seconds.",
            buckets=DURATION_BUCKETS,
            registry=None,
        )

        collectors = [
            self.playback_starts,
            self.playback_stops,
            self.active_playbacks,
            self.mode_starts_total,
            self.mode_stops_total,
            self.active_playbacks_by_mode,
            self.duration,
        ]
        registered = []
        try:
            for collector in collectors:
                self.collector_registry.register(collector)
                registered.append(collector)
            if include_process_metrics:
                # These register themselves on construction
                for factory in (ProcessCollector, PlatformCollector, GCCollector):
                    registered.append(factory(registry=self.collector_registry))
        except ValueError as exc:
            for collector in registered:
                self.collector_registry.unregister(collector)
            raise RegistryError(
                "Failed to register playback metric families",
                detail={"families": [name for name, _, _ in METRIC_FAMILIES]},
                original_exception=exc,
            ) from exc

        logger.info(
            "Playback metric families registered",
            extra={
                "families": len(METRIC_FAMILIES),
                "process_metrics": include_process_metrics,
            },
        )

    # ── Label-tuple accessors ────────────────────────────────────────────

    def starts(self, item_type: str, play_mode: str) -> Counter:
        return self.playback_starts.labels(item_type=item_type, play_mode=play_mode)

    def stops(self, item_type: str, play_mode: str) -> Counter:
        return self.playback_stops.labels(item_type=item_type, play_mode=play_mode)

    def active(self, item_type: str, play_mode: str) -> Gauge:
        return self.active_playbacks.labels(item_type=item_type, play_mode=play_mode)

    def mode_starts(self, play_mode: str) -> Counter:
        return self.mode_starts_total.labels(play_mode=play_mode)

    def mode_stops(self, play_mode: str) -> Counter:
        return self.mode_stops_total.labels(play_mode=play_mode)

    def active_by_mode(self, play_mode: str) -> Gauge:
        return self.active_playbacks_by_mode.labels(play_mode=play_mode)

    # ── Reading ──────────────────────────────────────────────────────────

    def sample_value(self, name: str, labels: Optional[dict[str, str]] = None) -> float:
        """Read the current value of one exposed sample.

        Args:
            name: Sample name as scraped, e.g. "jellyfin_active_playbacks"
                or "jellyfin_playback_duration_seconds_count".
            labels: Label values identifying the series.

        Returns:
            The sample value, or 0.0 if the series has not been created yet.
        """
        value = self.collector_registry.get_sample_value(name, labels or {})
        return 0.0 if value is None else value

    def exposition(self) -> bytes:
        """Render every registered family in the Prometheus text format."""
        return generate_latest(self.collector_registry)
