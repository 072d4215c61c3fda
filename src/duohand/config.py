from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TrackerConfig:
    """
    Tunables for the fusion and tracking layer.

    Defaults were picked empirically for 640-1280 px wide webcam frames.
    """

    duplicate_threshold_px: float = 100.0  # wrist-to-wrist distance below which two detections are one hand
    smoothing_factor: float = 0.4  # weight of the newest landmarks in the EMA
    cross_hand_stale_ms: float = 500.0  # opposite slot grace period when only one hand is seen
    track_stale_ms: float = 1000.0  # general slot expiry
    default_frame_width: int = 640  # used for the midpoint when the frame width is unknown
    region_timeout_s: float = 0.1  # per-pass deadline for the three region detections

    def __post_init__(self) -> None:
        if not (0.0 <= self.smoothing_factor <= 1.0):
            raise ValueError(f"smoothing_factor must be in [0, 1], got {self.smoothing_factor}")
        if self.duplicate_threshold_px < 0:
            raise ValueError(f"duplicate_threshold_px must be >= 0, got {self.duplicate_threshold_px}")
        if self.cross_hand_stale_ms < 0 or self.track_stale_ms < 0:
            raise ValueError("stale timeouts must be >= 0")
        if self.default_frame_width <= 0:
            raise ValueError(f"default_frame_width must be > 0, got {self.default_frame_width}")
        if self.region_timeout_s <= 0:
            raise ValueError(f"region_timeout_s must be > 0, got {self.region_timeout_s}")
