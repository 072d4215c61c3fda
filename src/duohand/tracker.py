from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterable, List, Optional, Set

import numpy as np

from .config import TrackerConfig
from .types import Candidate, Slot, Track, TrackSnapshot
from .utils import wrist_x


logger = logging.getLogger(__name__)


class TrackerState:
    """The two persistent track slots of one tracking session."""

    def __init__(self, started_at: float = 0.0) -> None:
        self._tracks: Dict[Slot, Track] = {
            slot: Track(slot=slot, prediction=None, last_updated_at=started_at) for slot in Slot
        }

    def track(self, slot: Slot) -> Track:
        return self._tracks[slot]

    def reset(self, now: float) -> None:
        for track in self._tracks.values():
            track.prediction = None
            track.last_updated_at = now

    def snapshot(self, timestamp_ms: float) -> TrackSnapshot:
        return TrackSnapshot(
            left=self._tracks[Slot.LEFT].prediction,
            right=self._tracks[Slot.RIGHT].prediction,
            timestamp_ms=timestamp_ms,
        )


def smooth_candidate(new: Candidate, old: Optional[Candidate], factor: float) -> Candidate:
    """
    Blend `new` landmarks with the previous ones: new * factor + old * (1 - factor).

    Returns `new` unchanged when there is no compatible previous prediction.
    """

    if old is None or len(old.landmarks) != len(new.landmarks) or not new.landmarks:
        return new
    blended = np.asarray(new.landmarks, dtype=np.float64) * factor + np.asarray(
        old.landmarks, dtype=np.float64
    ) * (1.0 - factor)
    landmarks = tuple((float(x), float(y), float(z)) for x, y, z in blended)
    return dataclasses.replace(new, landmarks=landmarks)


class TrackAssigner:
    """
    Assigns deduplicated candidates to the left/right slots once per frame.

    Left and right are screen-space: the leftmost wrist in the image goes to the left slot,
    whatever the anatomical handedness is.
    """

    def __init__(self, config: Optional[TrackerConfig] = None, started_at: float = 0.0) -> None:
        self.config = config or TrackerConfig()
        self.state = TrackerState(started_at)
        self._last_now = started_at

    def reset(self, now: float) -> None:
        """Start a new session: both slots empty, timestamps at `now`."""
        self.state.reset(now)
        self._last_now = now

    def update(
        self, candidates: Iterable[Candidate], now: float, frame_width: Optional[int] = None
    ) -> TrackSnapshot:
        if now < self._last_now:
            logger.warning("Ignoring out-of-order frame at %.1f ms (last %.1f ms)", now, self._last_now)
            return self.state.snapshot(self._last_now)
        self._last_now = now

        complete: List[Candidate] = []
        for cand in candidates:
            if cand.is_complete:
                complete.append(cand)
            else:
                logger.debug("Skipping candidate with %d landmarks", len(cand.landmarks))

        updated: Set[Slot] = set()
        if complete:
            # sorted() is stable, ties keep input order
            ordered = sorted(complete, key=wrist_x)
            if len(ordered) >= 2:
                if len(ordered) > 2:
                    logger.debug("Discarding %d extra hand(s)", len(ordered) - 2)
                self._assign(Slot.LEFT, ordered[0], now)
                self._assign(Slot.RIGHT, ordered[1], now)
                updated.update((Slot.LEFT, Slot.RIGHT))
            else:
                cand = ordered[0]
                width = frame_width or self.config.default_frame_width
                slot = Slot.LEFT if wrist_x(cand) < width / 2 else Slot.RIGHT
                self._assign(slot, cand, now)
                updated.add(slot)

                other = self.state.track(slot.opposite)
                if other.prediction is not None and now - other.last_updated_at > self.config.cross_hand_stale_ms:
                    logger.debug("Clearing %s slot, single hand seen on the %s", other.slot.value, slot.value)
                    other.clear()

        self._sweep(now, updated)
        return self.state.snapshot(now)

    def _assign(self, slot: Slot, cand: Candidate, now: float) -> None:
        track = self.state.track(slot)
        track.prediction = smooth_candidate(cand, track.prediction, self.config.smoothing_factor)
        track.last_updated_at = now

    def _sweep(self, now: float, updated: Set[Slot]) -> None:
        for slot in Slot:
            if slot in updated:
                continue
            track = self.state.track(slot)
            if track.prediction is not None and now - track.last_updated_at > self.config.track_stale_ms:
                logger.debug("Track %s went stale after %.0f ms", slot.value, now - track.last_updated_at)
                track.clear()
