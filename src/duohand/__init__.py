from .config import TrackerConfig
from .dedup import deduplicate
from .pipeline import FramePipeline, now_ms
from .regions import normalize, split_frame
from .tracker import TrackAssigner, TrackerState
from .types import Candidate, RawDetection, Region, Slot, Track, TrackSnapshot

__all__ = [
    "TrackerConfig",
    "deduplicate",
    "FramePipeline",
    "now_ms",
    "normalize",
    "split_frame",
    "TrackAssigner",
    "TrackerState",
    "Candidate",
    "RawDetection",
    "Region",
    "Slot",
    "Track",
    "TrackSnapshot",
]
