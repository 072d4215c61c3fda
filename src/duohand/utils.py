from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence, Tuple

from .types import BoundingBox, Candidate


def bbox_from_points(points: Iterable[Sequence[float]]) -> BoundingBox:
    xs = []
    ys = []
    for p in points:
        xs.append(float(p[0]))
        ys.append(float(p[1]))
    if not xs:
        return ((0.0, 0.0), (0.0, 0.0))
    return ((min(xs), min(ys)), (max(xs), max(ys)))


def wrist_x(candidate: Candidate) -> float:
    """Wrist x used for ordering; hands without landmarks sort first."""
    wrist = candidate.wrist
    return wrist[0] if wrist is not None else 0.0


def wrist_distance(a: Candidate, b: Candidate) -> Optional[float]:
    """2-D distance between the wrists of two candidates, None if either has no landmarks."""
    wa = a.wrist
    wb = b.wrist
    if wa is None or wb is None:
        return None
    return math.hypot(wa[0] - wb[0], wa[1] - wb[1])


def to_int_point(p: Sequence[float]) -> Tuple[int, int]:
    return (int(round(p[0])), int(round(p[1])))
