from __future__ import annotations

import argparse
import os
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from duohand.config import TrackerConfig  # noqa: E402
from duohand.detector import MediaPipeHandDetector  # noqa: E402
from duohand.drawing import draw_status, draw_tracks  # noqa: E402
from duohand.log import setup_logging  # noqa: E402
from duohand.pipeline import FramePipeline  # noqa: E402
from duohand.types import Region, Slot  # noqa: E402


def main() -> int:
    ap = argparse.ArgumentParser(description="Run one tracking pass on an image.")
    ap.add_argument("--image", required=True, help="Path to input image")
    ap.add_argument("--out", required=True, help="Path to output image (annotated)")
    ap.add_argument("--log-level", default="INFO")
    args = ap.parse_args()

    setup_logging(args.log_level)

    frame = cv2.imread(args.image)
    if frame is None:
        raise RuntimeError(f"Could not read image: {args.image}")

    # Static images have no deadline pressure.
    config = TrackerConfig(region_timeout_s=30.0)
    detectors = {region: MediaPipeHandDetector(static_image_mode=True) for region in Region}
    with FramePipeline(detectors, config=config, started_at=0.0) as pipeline:
        snapshot = pipeline.process(frame, 0.0)

    if snapshot is None:
        raise RuntimeError("Tracking pass did not run")

    out = draw_status(draw_tracks(frame.copy(), snapshot), snapshot)
    if not cv2.imwrite(args.out, out):
        raise RuntimeError(f"Could not write output image: {args.out}")

    print(f"hands: {snapshot.hand_count}")
    for slot in Slot:
        cand = snapshot.get(slot)
        if cand is None:
            print(f"[{slot.value}] -")
            continue
        (x0, y0), (x1, y1) = cand.bounding_box
        wx, wy, _ = cand.wrist
        print(
            f"[{slot.value}] region={cand.source_region.value} score={cand.confidence:.2f} "
            f"wrist=({wx:.0f}, {wy:.0f}) bbox=({x0:.0f}, {y0:.0f}, {x1:.0f}, {y1:.0f})"
        )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
