"""Video duration inference from the ``video_settings`` selection."""
from __future__ import annotations

from typing import FrozenSet, Iterable, Optional, Tuple

from backend.services.composer.types import DurationProposal

MIN_DURATION_SEC = 2
MAX_DURATION_SEC = 10
DEFAULT_DURATION_SEC = 5

# Checked top to bottom; the first rule with a matching option id wins.
_RULES: Tuple[Tuple[FrozenSet[str], int, str], ...] = (
    (frozenset({"timelapse", "hyperlapse"}), 10, "reason_timelapse"),
    (frozenset({"super_slow_mo", "slow_mo"}), 8, "reason_slow_motion"),
    (frozenset({"circular_tracking", "orbit", "drone_reveal"}), 7, "reason_complex_move"),
    (
        frozenset({"crash_zoom", "fast_zoom_in", "fast_zoom_out", "whip_pan", "glitch_transition"}),
        3,
        "reason_fast_action",
    ),
)


def infer_duration(option_ids: Iterable[str]) -> Optional[DurationProposal]:
    """Propose a clip length for the selected video-settings option ids.

    Returns None when no rule matches.
    """
    ids = set(option_ids)
    for trigger_ids, seconds, reason in _RULES:
        if ids & trigger_ids:
            return DurationProposal(seconds=seconds, reason=reason)
    return None


def clamp_duration(seconds: int) -> int:
    return max(MIN_DURATION_SEC, min(MAX_DURATION_SEC, int(seconds)))


class DurationControl:
    """Duration slider state: value plus whether the user pinned it by hand."""

    def __init__(self, default: int = DEFAULT_DURATION_SEC):
        self._default = clamp_duration(default)
        self.value = self._default
        self.pinned = False

    def set_manual(self, seconds: int) -> int:
        """User moved the slider: clamp, store, and stop automatic inference."""
        self.value = clamp_duration(seconds)
        self.pinned = True
        return self.value

    def apply(self, proposal: Optional[DurationProposal]) -> bool:
        """Adopt an inferred value unless pinned. Returns True if the value changed."""
        if self.pinned or proposal is None or proposal.seconds == self.value:
            return False
        self.value = clamp_duration(proposal.seconds)
        return True

    def reset(self) -> None:
        self.value = self._default
        self.pinned = False
