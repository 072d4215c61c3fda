from __future__ import annotations

import logging
import threading
import time
from collections import abc
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Dict, List, Mapping, Optional, Union

import numpy as np

from .config import TrackerConfig
from .dedup import deduplicate
from .regions import REGION_ORDER, normalize, split_frame
from .tracker import TrackAssigner
from .types import Candidate, Detector, RawDetection, Region, TrackSnapshot


logger = logging.getLogger(__name__)


def now_ms() -> float:
    """Monotonic clock in milliseconds, suitable for frame timestamps."""
    return time.monotonic() * 1000.0


class FramePipeline:
    """
    One detection and tracking pass per frame.

    Detection runs concurrently on the full frame and both half crops and is joined before
    deduplication. Only one pass runs at a time; a frame arriving while a pass is in flight is
    dropped. A region whose detector raises or misses the deadline contributes nothing.

    Readers should use `latest()`, which only ever returns a snapshot taken after a full pass.
    """

    def __init__(
        self,
        detectors: Union[Detector, Mapping[Region, Detector]],
        config: Optional[TrackerConfig] = None,
        started_at: Optional[float] = None,
    ) -> None:
        if isinstance(detectors, abc.Mapping):
            missing = [r.value for r in REGION_ORDER if r not in detectors]
            if missing:
                raise ValueError(f"No detector for region(s): {', '.join(missing)}")
            self._detectors: Dict[Region, Detector] = dict(detectors)
        else:
            self._detectors = {region: detectors for region in REGION_ORDER}

        self.config = config or TrackerConfig()
        start = now_ms() if started_at is None else started_at
        self._assigner = TrackAssigner(self.config, started_at=start)

        self._executor = ThreadPoolExecutor(max_workers=len(REGION_ORDER), thread_name_prefix="duohand-detect")
        self._in_flight: Dict[Region, Future] = {}
        self._pass_lock = threading.Lock()
        self._snapshot_lock = threading.Lock()
        self._stopped = threading.Event()
        self._latest = self._assigner.state.snapshot(start)

    def __enter__(self) -> "FramePipeline":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()

    def latest(self) -> TrackSnapshot:
        with self._snapshot_lock:
            return self._latest

    def process(self, frame: np.ndarray, timestamp_ms: Optional[float] = None) -> Optional[TrackSnapshot]:
        """
        Run one pass on a BGR frame and publish the resulting snapshot.

        Returns None when the frame was dropped (pass already running, or pipeline stopped).
        """

        if self.stopped:
            return None
        if not self._pass_lock.acquire(blocking=False):
            logger.debug("Dropping frame, previous pass still running")
            return None
        try:
            if self.stopped:
                return None
            now = now_ms() if timestamp_ms is None else timestamp_ms
            frame_width = int(frame.shape[1])

            per_region = self._detect_regions(split_frame(frame), frame_width)
            candidates: List[Candidate] = []
            for region in REGION_ORDER:
                candidates.extend(per_region.get(region, []))

            unique = deduplicate(candidates, self.config.duplicate_threshold_px)
            snapshot = self._assigner.update(unique, now, frame_width)
            with self._snapshot_lock:
                self._latest = snapshot
            return snapshot
        finally:
            self._pass_lock.release()

    def _detect_regions(self, crops: Mapping[Region, np.ndarray], frame_width: int) -> Dict[Region, List[Candidate]]:
        futures: Dict[Region, Future] = {}
        for region in REGION_ORDER:
            pending = self._in_flight.get(region)
            if pending is not None and not pending.done():
                logger.debug("Skipping %s region, detector still busy with an earlier frame", region.value)
                continue
            try:
                futures[region] = self._executor.submit(self._detectors[region].detect, crops[region])
            except RuntimeError:
                # executor shut down by stop() during this pass
                logger.debug("Pipeline stopped, not scheduling %s region", region.value)
                continue
            self._in_flight[region] = futures[region]

        deadline = time.monotonic() + self.config.region_timeout_s
        out: Dict[Region, List[Candidate]] = {}
        for region, fut in futures.items():
            remaining = max(0.0, deadline - time.monotonic())
            try:
                raw: List[RawDetection] = fut.result(timeout=remaining)
                out[region] = normalize(raw or [], region, frame_width)
            except FutureTimeoutError:
                logger.debug("Detection timed out for %s region", region.value)
            except Exception:
                logger.warning("Detection failed for %s region", region.value, exc_info=True)
        return out

    def reset(self, now: Optional[float] = None) -> None:
        """Start a new tracking session with both slots empty."""
        start = now_ms() if now is None else now
        with self._pass_lock:
            self._assigner.reset(start)
            snapshot = self._assigner.state.snapshot(start)
            with self._snapshot_lock:
                self._latest = snapshot

    def stop(self) -> None:
        """Cancel at the next frame boundary. A pass already running finishes normally."""
        if self._stopped.is_set():
            return
        self._stopped.set()
        self._executor.shutdown(wait=False, cancel_futures=True)

    def close(self) -> None:
        """Stop, wait for in-flight detections to return, then close the detectors."""
        self.stop()
        with self._pass_lock:
            self._executor.shutdown(wait=True)
        seen = set()
        for det in self._detectors.values():
            if id(det) in seen:
                continue
            seen.add(id(det))
            close = getattr(det, "close", None)
            if callable(close):
                close()
