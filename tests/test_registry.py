"""Tests for PlaybackMetricsRegistry: wire contract, exposition, registration."""

from __future__ import annotations

import pytest
from prometheus_client import CollectorRegistry, Gauge, generate_latest
from prometheus_client.parser import text_string_to_metric_families

from playback_metrics.metrics.registry import (
    DURATION_BUCKETS,
    METRIC_FAMILIES,
    PlaybackMetricsRegistry,
)
from playback_metrics.utils.exceptions import RegistryError


def _families(registry: PlaybackMetricsRegistry) -> dict:
    text = registry.exposition().decode("utf-8")
    return {family.name: family for family in text_string_to_metric_families(text)}


class TestWireContract:
    """Names, types, labels and buckets seen by the scraper."""

    EXPECTED = {
        # parser strips the _total suffix from counter family names
        "jellyfin_playback_starts": ("counter", "Total number of playback starts."),
        "jellyfin_playback_stops": ("counter", "Total number of playback stops."),
        "jellyfin_active_playbacks": ("gauge", "Current number of active playbacks."),
        "jellyfin_playback_mode_starts": ("counter", "Total number of playback starts by mode only."),
        "jellyfin_playback_mode_stops": ("counter", "Total number of playback stops by mode only."),
        "jellyfin_active_playbacks_by_mode": ("gauge", "Current number of active playbacks (mode only)."),
        "jellyfin_playback_duration_seconds": ("histogram", "Observed playback duration on stop in seconds."),
    }

    def test_family_table(self):
        """Seven families with the documented label sets."""
        assert len(METRIC_FAMILIES) == 7
        labels = {name: labels for name, _, labels in METRIC_FAMILIES}
        assert labels["jellyfin_playback_starts_total"] == ("item_type", "play_mode")
        assert labels["jellyfin_active_playbacks_by_mode"] == ("play_mode",)
        assert labels["jellyfin_playback_duration_seconds"] == ()

    def test_exposed_types_and_help(self, recorder, metrics_registry):
        """Every family is exposed with its type and help text."""
        recorder.record_start("Movie", "Transcode")
        recorder.record_stop("Movie", "Transcode", 42)

        families = _families(metrics_registry)
        for name, (kind, help_text) in self.EXPECTED.items():
            assert name in families, name
            assert families[name].type == kind
            assert families[name].documentation == help_text

    def test_bucket_bounds(self, metrics_registry):
        """Histogram buckets are exactly the documented bounds plus +Inf."""
        assert DURATION_BUCKETS == (15, 60, 300, 900, 3600, 7200, 14400)
        families = _families(metrics_registry)
        bounds = [
            s.labels["le"]
            for s in families["jellyfin_playback_duration_seconds"].samples
            if s.name.endswith("_bucket")
        ]
        assert bounds == ["15.0", "60.0", "300.0", "900.0", "3600.0", "7200.0", "14400.0", "+Inf"]

    def test_sample_names_in_text(self, recorder, metrics_registry):
        """Counter samples carry the _total suffix in the exposition text."""
        recorder.record_start("Movie", "Transcode")
        text = metrics_registry.exposition().decode("utf-8")
        assert 'jellyfin_playback_starts_total{item_type="movie",play_mode="transcode"} 1.0' in text
        assert 'jellyfin_playback_mode_starts_total{play_mode="transcode"} 1.0' in text
        assert 'jellyfin_active_playbacks{item_type="movie",play_mode="transcode"} 1.0' in text

    def test_histogram_has_no_labels(self, recorder, metrics_registry):
        """Duration samples carry only the bucket bound."""
        recorder.record_stop("Movie", "Transcode", 42)
        families = _families(metrics_registry)
        for sample in families["jellyfin_playback_duration_seconds"].samples:
            assert set(sample.labels) <= {"le"}

    def test_content_type(self, metrics_registry):
        """Exposition uses the Prometheus text media type."""
        assert metrics_registry.content_type.startswith("text/plain")


class TestRegistryConstruction:
    """Tests for explicit registry construction."""

    def test_instances_are_isolated(self):
        """Two registries never share series."""
        first = PlaybackMetricsRegistry()
        second = PlaybackMetricsRegistry()
        first.starts("movie", "direct").inc()
        assert first.sample_value("jellyfin_playback_starts_total", {"item_type": "movie", "play_mode": "direct"}) == 1
        assert second.sample_value("jellyfin_playback_starts_total", {"item_type": "movie", "play_mode": "direct"}) == 0

    def test_uses_supplied_collector_registry(self):
        """A caller-provided CollectorRegistry receives the families."""
        target = CollectorRegistry()
        registry = PlaybackMetricsRegistry(registry=target)
        assert registry.collector_registry is target
        assert target.get_sample_value("jellyfin_playback_duration_seconds_count") == 0

    def test_duplicate_registration_raises(self):
        """Registering twice into one CollectorRegistry is a RegistryError."""
        target = CollectorRegistry()
        PlaybackMetricsRegistry(registry=target)
        with pytest.raises(RegistryError) as exc_info:
            PlaybackMetricsRegistry(registry=target)
        assert isinstance(exc_info.value.original_exception, ValueError)
        assert "families" in exc_info.value.detail

    def test_failed_registration_is_rolled_back(self):
        """A late collision leaves no earlier family behind, so a retry succeeds."""
        target = CollectorRegistry()
        squatter = Gauge("jellyfin_playback_duration_seconds", "Conflicting family.", registry=target)

        with pytest.raises(RegistryError):
            PlaybackMetricsRegistry(registry=target)
        text = generate_latest(target).decode("utf-8")
        assert "jellyfin_playback_starts_total" not in text
        assert "jellyfin_active_playbacks" not in text

        target.unregister(squatter)
        registry = PlaybackMetricsRegistry(registry=target)
        registry.starts("movie", "direct").inc()
        assert target.get_sample_value(
            "jellyfin_playback_starts_total", {"item_type": "movie", "play_mode": "direct"}
        ) == 1

    def test_process_metrics_optional(self):
        """Process collectors are only present when requested."""
        bare = _families(PlaybackMetricsRegistry())
        full = _families(PlaybackMetricsRegistry(include_process_metrics=True))
        assert "python_info" not in bare
        assert "python_info" in full

    def test_accessors_return_same_child(self, metrics_registry):
        """Repeated access to a tuple returns the same child series."""
        assert metrics_registry.active("movie", "direct") is metrics_registry.active("movie", "direct")
        assert metrics_registry.mode_stops("direct") is metrics_registry.mode_stops("direct")

    def test_sample_value_unknown_series(self, metrics_registry):
        """Series that were never touched read as zero."""
        assert metrics_registry.sample_value("jellyfin_active_playbacks", {"item_type": "x", "play_mode": "y"}) == 0.0
