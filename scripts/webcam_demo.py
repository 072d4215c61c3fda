from __future__ import annotations

import argparse
import logging
import os
import platform
import sys

import cv2

# Allow running without installing the package (repo-local usage).
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC_ROOT = os.path.join(REPO_ROOT, "src")
if SRC_ROOT not in sys.path:
    sys.path.insert(0, SRC_ROOT)

from duohand.config import TrackerConfig  # noqa: E402
from duohand.detector import MediaPipeHandDetector  # noqa: E402
from duohand.drawing import draw_status, draw_text, draw_tracks  # noqa: E402
from duohand.log import setup_logging  # noqa: E402
from duohand.pipeline import FramePipeline, now_ms  # noqa: E402
from duohand.types import Region  # noqa: E402


logger = logging.getLogger("webcam_demo")


def main() -> int:
    defaults = TrackerConfig()
    ap = argparse.ArgumentParser(description="Live two-hand tracking overlay.")
    ap.add_argument("--camera", type=int, default=0, help="Camera index (default: 0)")
    ap.add_argument("--width", type=int, default=1280, help="Capture width (best effort)")
    ap.add_argument("--height", type=int, default=720, help="Capture height (best effort)")
    ap.add_argument(
        "--no-mirror",
        action="store_true",
        help="Disable horizontal mirroring (default is mirrored/selfie mode, applied before tracking)",
    )
    ap.add_argument("--duplicate-threshold", type=float, default=defaults.duplicate_threshold_px)
    ap.add_argument("--smoothing", type=float, default=defaults.smoothing_factor, help="Weight of the newest frame")
    ap.add_argument("--cross-hand-stale-ms", type=float, default=defaults.cross_hand_stale_ms)
    ap.add_argument("--track-stale-ms", type=float, default=defaults.track_stale_ms)
    ap.add_argument("--log-level", default="INFO")
    ap.add_argument("--log-file", default=None)
    args = ap.parse_args()

    setup_logging(args.log_level, args.log_file)
    config = TrackerConfig(
        duplicate_threshold_px=args.duplicate_threshold,
        smoothing_factor=args.smoothing,
        cross_hand_stale_ms=args.cross_hand_stale_ms,
        track_stale_ms=args.track_stale_ms,
    )

    if platform.system() == "Darwin":
        cap = cv2.VideoCapture(args.camera, cv2.CAP_AVFOUNDATION)
    else:
        cap = cv2.VideoCapture(args.camera)
    if not cap.isOpened():
        raise RuntimeError(
            f"Could not open camera index {args.camera}. "
            "On macOS: System Settings -> Privacy & Security -> Camera -> allow your terminal."
        )

    cap.set(cv2.CAP_PROP_FRAME_WIDTH, args.width)
    cap.set(cv2.CAP_PROP_FRAME_HEIGHT, args.height)

    detectors = {region: MediaPipeHandDetector(max_num_hands=2) for region in Region}
    logger.info("Tracking started on camera %d", args.camera)

    with FramePipeline(detectors, config=config) as pipeline:
        while True:
            ok, frame = cap.read()
            if not ok:
                logger.warning("Camera returned no frame, stopping")
                break

            # Slots are assigned in displayed space, so mirror first.
            if not args.no_mirror:
                frame = cv2.flip(frame, 1)

            pipeline.process(frame, now_ms())
            snapshot = pipeline.latest()

            display = frame.copy()
            draw_tracks(display, snapshot)
            draw_status(display, snapshot)
            draw_text(display, "press q to quit", (12, 28))

            cv2.imshow("duohand - two hand tracking", display)
            key = cv2.waitKey(1) & 0xFF
            if key in (ord("q"), 27):
                break

    cap.release()
    cv2.destroyAllWindows()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
