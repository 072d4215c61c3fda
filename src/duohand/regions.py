from __future__ import annotations

import logging
from typing import Dict, Iterable, List

import numpy as np

from .types import NUM_LANDMARKS, BoundingBox, Candidate, RawDetection, Region


logger = logging.getLogger(__name__)

# Concatenation order for the deduplicator (first seen wins).
REGION_ORDER = (Region.FULL, Region.LEFT, Region.RIGHT)


def split_frame(frame: np.ndarray) -> Dict[Region, np.ndarray]:
    """
    Return the three views detection runs on: the full frame and its two half-width crops.

    Crops are numpy views into `frame`; detectors must treat them as read-only.
    """

    half = frame.shape[1] // 2
    return {
        Region.FULL: frame,
        Region.LEFT: frame[:, :half],
        Region.RIGHT: frame[:, half:],
    }


def region_offset(region: Region, frame_width: int) -> int:
    """Horizontal offset of a region's crop inside the full frame."""
    if region is Region.RIGHT:
        return frame_width // 2
    return 0


def _shift_box(box: BoundingBox, dx: float) -> BoundingBox:
    (x0, y0), (x1, y1) = box
    return ((float(x0) + dx, float(y0)), (float(x1) + dx, float(y1)))


def normalize(detections: Iterable[RawDetection], region: Region, frame_width: int) -> List[Candidate]:
    """
    Map raw detections from a region's crop into full-frame coordinates.

    Always builds new tuples, so detector output that shares storage across regions is never
    touched. Detections without exactly 21 landmarks are dropped.
    """

    dx = float(region_offset(region, frame_width))
    out: List[Candidate] = []
    for det in detections:
        if len(det.landmarks) != NUM_LANDMARKS:
            logger.debug(
                "Dropping malformed detection from %s region: %d landmarks", region.value, len(det.landmarks)
            )
            continue
        landmarks = tuple((float(lm[0]) + dx, float(lm[1]), float(lm[2])) for lm in det.landmarks)
        out.append(
            Candidate(
                landmarks=landmarks,
                confidence=float(det.confidence),
                bounding_box=_shift_box(det.bounding_box, dx),
                source_region=region,
            )
        )
    return out
