from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Protocol, Sequence, Tuple


NUM_LANDMARKS = 21
WRIST = 0

Landmark = Tuple[float, float, float]  # (x_px, y_px, z)
Point2 = Tuple[float, float]
BoundingBox = Tuple[Point2, Point2]  # (top_left, bottom_right)


class Region(str, Enum):
    """Which view of the frame a detection came from."""

    FULL = "full"
    LEFT = "left"
    RIGHT = "right"


class Slot(str, Enum):
    """Screen-space identity of a tracked hand."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def opposite(self) -> "Slot":
        return Slot.RIGHT if self is Slot.LEFT else Slot.LEFT


@dataclass(frozen=True)
class RawDetection:
    """One hand as returned by a detector, in the coordinates of the image it was given."""

    landmarks: Sequence[Sequence[float]]
    confidence: float
    bounding_box: BoundingBox


@dataclass(frozen=True)
class Candidate:
    """A detected hand in full-frame pixel coordinates, tagged with its source region."""

    landmarks: Tuple[Landmark, ...]  # length 21
    confidence: float
    bounding_box: BoundingBox
    source_region: Region

    @property
    def wrist(self) -> Optional[Landmark]:
        if not self.landmarks:
            return None
        return self.landmarks[WRIST]

    @property
    def is_complete(self) -> bool:
        return len(self.landmarks) == NUM_LANDMARKS


@dataclass
class Track:
    """Persistent slot state. Owned and mutated only by the track assigner."""

    slot: Slot
    prediction: Optional[Candidate]
    last_updated_at: float  # ms

    def clear(self) -> None:
        self.prediction = None


@dataclass(frozen=True)
class TrackSnapshot:
    """Read-only view of both slots after a completed pass."""

    left: Optional[Candidate]
    right: Optional[Candidate]
    timestamp_ms: float

    def get(self, slot: Slot) -> Optional[Candidate]:
        return self.left if slot is Slot.LEFT else self.right

    @property
    def hand_count(self) -> int:
        return int(self.left is not None) + int(self.right is not None)


class Detector(Protocol):
    """Anything that returns raw hand detections for an image."""

    def detect(self, image: Any) -> List[RawDetection]:
        ...
