from __future__ import annotations

import logging
from typing import Iterable, List

from .types import Candidate
from .utils import wrist_distance


logger = logging.getLogger(__name__)


def deduplicate(candidates: Iterable[Candidate], threshold_px: float = 100.0) -> List[Candidate]:
    """
    Collapse detections of the same physical hand seen from several regions.

    Greedy and order dependent: candidates are visited in input order and the first one seen
    near a wrist position wins. This is not an optimal clustering; a pairwise clustering pass
    would be more accurate at a higher per-frame cost.

    A candidate with no landmarks has no wrist to compare, so it is always kept and never
    suppresses another candidate.
    """

    accepted: List[Candidate] = []
    for cand in candidates:
        duplicate = False
        for existing in accepted:
            dist = wrist_distance(cand, existing)
            if dist is not None and dist < threshold_px:
                duplicate = True
                break
        if duplicate:
            logger.debug("Dropping duplicate from %s region", cand.source_region.value)
            continue
        accepted.append(cand)
    return accepted
