from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import cv2
import numpy as np

from .model_assets import ensure_hand_landmarker_task
from .types import RawDetection
from .utils import bbox_from_points


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _SolutionsBackend:
    mp: object
    hands: object


@dataclass(frozen=True)
class _TasksBackend:
    mp: object
    landmarker: object


def _try_create_solutions_backend(
    static_image_mode: bool,
    max_num_hands: int,
    model_complexity: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> Optional[_SolutionsBackend]:
    import mediapipe as mp  # type: ignore

    if not hasattr(mp, "solutions"):
        return None
    hands = mp.solutions.hands.Hands(
        static_image_mode=static_image_mode,
        max_num_hands=max_num_hands,
        model_complexity=model_complexity,
        min_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _SolutionsBackend(mp=mp, hands=hands)


def _try_create_tasks_backend(
    model_path: str,
    static_image_mode: bool,
    max_num_hands: int,
    min_detection_confidence: float,
    min_tracking_confidence: float,
) -> _TasksBackend:
    """
    Fallback for MediaPipe distributions that do not include `mp.solutions`.

    Uses the MediaPipe Tasks HandLandmarker API, which requires a `.task` model asset on disk.
    """

    import mediapipe as mp  # type: ignore
    from mediapipe.tasks.python import BaseOptions  # type: ignore
    from mediapipe.tasks.python.vision import HandLandmarker, HandLandmarkerOptions, RunningMode  # type: ignore

    model_path = ensure_hand_landmarker_task(model_path)

    options = HandLandmarkerOptions(
        base_options=BaseOptions(model_asset_path=model_path),
        running_mode=RunningMode.IMAGE if static_image_mode else RunningMode.VIDEO,
        num_hands=max_num_hands,
        min_hand_detection_confidence=min_detection_confidence,
        min_tracking_confidence=min_tracking_confidence,
    )
    return _TasksBackend(mp=mp, landmarker=HandLandmarker.create_from_options(options))


class MediaPipeHandDetector:
    """
    Candidate detector backed by MediaPipe Hands.

    Input images are expected as **BGR** (OpenCV default) and may be crops of a larger frame;
    returned coordinates are pixels of the image that was passed in. One instance is not safe
    to call from several threads at once, so the pipeline gets one detector per region.
    """

    def __init__(
        self,
        static_image_mode: bool = False,
        max_num_hands: int = 2,
        model_complexity: int = 1,
        min_detection_confidence: float = 0.5,
        min_tracking_confidence: float = 0.5,
        tasks_model_path: str = "models/hand_landmarker.task",
    ) -> None:
        self._solutions: Optional[_SolutionsBackend] = _try_create_solutions_backend(
            static_image_mode=static_image_mode,
            max_num_hands=max_num_hands,
            model_complexity=model_complexity,
            min_detection_confidence=min_detection_confidence,
            min_tracking_confidence=min_tracking_confidence,
        )
        self._tasks: Optional[_TasksBackend] = None
        self._tasks_timestamp_ms = 0
        self._static_image_mode = static_image_mode

        if self._solutions is None:
            logger.info("mediapipe has no `solutions` module, using the Tasks HandLandmarker")
            try:
                self._tasks = _try_create_tasks_backend(
                    model_path=tasks_model_path,
                    static_image_mode=static_image_mode,
                    max_num_hands=max_num_hands,
                    min_detection_confidence=min_detection_confidence,
                    min_tracking_confidence=min_tracking_confidence,
                )
            except FileNotFoundError as e:
                raise RuntimeError(
                    "MediaPipe does not provide `mp.solutions` in your environment and the Tasks\n"
                    f"HandLandmarker model file is missing: {tasks_model_path}"
                ) from e
            except ImportError as e:
                raise RuntimeError(
                    "Could not initialize MediaPipe Hands: neither `mp.solutions` nor the Tasks API is available.\n"
                    "Check the installed `mediapipe` version."
                ) from e

    def close(self) -> None:
        if self._solutions is not None:
            self._solutions.hands.close()
        if self._tasks is not None:
            self._tasks.landmarker.close()

    def __enter__(self) -> "MediaPipeHandDetector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def detect(self, image_bgr: np.ndarray) -> List[RawDetection]:
        h, w = image_bgr.shape[:2]
        if h == 0 or w == 0:
            return []
        image_rgb = cv2.cvtColor(image_bgr, cv2.COLOR_BGR2RGB)

        if self._solutions is not None:
            results = self._solutions.hands.process(image_rgb)
            if not results.multi_hand_landmarks:
                return []

            handedness_list = results.multi_handedness or []
            detections: List[RawDetection] = []
            for i, hand_landmarks in enumerate(results.multi_hand_landmarks):
                score = 1.0
                if i < len(handedness_list) and handedness_list[i].classification:
                    score = float(getattr(handedness_list[i].classification[0], "score", 1.0))
                # handedness score stands in for hand presence confidence
                detections.append(self._build_detection(hand_landmarks.landmark, score, w, h))
            return detections

        if self._tasks is None:
            return []

        mp = self._tasks.mp
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(image_rgb))
        if self._static_image_mode:
            result = self._tasks.landmarker.detect(mp_image)
        else:
            # VIDEO mode requires monotonically increasing timestamps.
            self._tasks_timestamp_ms += 33
            result = self._tasks.landmarker.detect_for_video(mp_image, self._tasks_timestamp_ms)

        hand_landmarks_list = getattr(result, "hand_landmarks", None) or []
        handedness_list = getattr(result, "handedness", None) or []

        detections = []
        for i, landmarks in enumerate(hand_landmarks_list):
            score = 1.0
            if i < len(handedness_list) and handedness_list[i]:
                score = float(getattr(handedness_list[i][0], "score", 1.0))
            # handedness score stands in for hand presence confidence
            detections.append(self._build_detection(landmarks, score, w, h))
        return detections

    @staticmethod
    def _build_detection(landmarks, score: float, w: int, h: int) -> RawDetection:
        # z is normalized roughly to the same scale as x
        pts = [(float(lm.x) * w, float(lm.y) * h, float(getattr(lm, "z", 0.0)) * w) for lm in landmarks]
        return RawDetection(landmarks=pts, confidence=score, bounding_box=bbox_from_points(pts))
