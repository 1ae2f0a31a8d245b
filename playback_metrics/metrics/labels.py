"""Label normalization for playback metrics.

Collapses raw host strings into a small, closed vocabulary so the number
of label combinations stays bounded no matter what the media server sends.
"""

from __future__ import annotations

from typing import Optional

UNKNOWN = "unknown"
DIRECT = "direct"
TRANSCODE = "transcode"

PLAY_MODES = frozenset({DIRECT, TRANSCODE, UNKNOWN})

# Jellyfin PlayMethod values plus already-normalized passthroughs
_PLAY_MODE_MAP = {
    "transcode": TRANSCODE,
    "directplay": DIRECT,
    "directstream": DIRECT,
    "direct": DIRECT,
}


def _is_blank(raw: Optional[str]) -> bool:
    return raw is None or not raw.strip()


def normalize_item_type(raw: Optional[str]) -> str:
    """Normalize an item type ("Movie", " EPISODE ") to a lowercase token.

    Args:
        raw: Item type as reported by the host, possibly None.

    Returns:
        The trimmed, lower-cased value, or "unknown" for blank input.
    """
    if _is_blank(raw):
        return UNKNOWN
    return raw.strip().lower()


def normalize_play_mode(raw: Optional[str]) -> str:
    """Map a play method to one of "direct", "transcode" or "unknown".

    Args:
        raw: Play method as reported by the host (e.g. "DirectStream").

    Returns:
        A value from PLAY_MODES.
    """
    if _is_blank(raw):
        return UNKNOWN
    return _PLAY_MODE_MAP.get(raw.strip().lower(), UNKNOWN)
