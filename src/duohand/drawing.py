from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import cv2

from .types import Landmark, Slot, TrackSnapshot
from .utils import to_int_point


Color = Tuple[int, int, int]  # BGR

HAND_CONNECTIONS: List[Tuple[int, int]] = [
    # thumb
    (0, 1),
    (1, 2),
    (2, 3),
    (3, 4),
    # index
    (0, 5),
    (5, 6),
    (6, 7),
    (7, 8),
    # middle
    (0, 9),
    (9, 10),
    (10, 11),
    (11, 12),
    # ring
    (0, 13),
    (13, 14),
    (14, 15),
    (15, 16),
    # pinky
    (0, 17),
    (17, 18),
    (18, 19),
    (19, 20),
    # palm
    (5, 9),
    (9, 13),
    (13, 17),
]

# (palm/wrist color, finger color)
SLOT_COLORS: Dict[Slot, Tuple[Color, Color]] = {
    Slot.LEFT: ((0, 255, 0), (0, 0, 255)),  # green / red
    Slot.RIGHT: ((255, 255, 0), (255, 0, 255)),  # cyan / magenta
}


def draw_text(frame, text: str, org: Tuple[int, int], color=(255, 255, 255), scale=0.6, thickness=2):
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, (0, 0, 0), thickness + 2, cv2.LINE_AA)
    cv2.putText(frame, text, org, cv2.FONT_HERSHEY_SIMPLEX, scale, color, thickness, cv2.LINE_AA)
    return frame


def draw_hand_skeleton(frame, landmarks: Sequence[Landmark], palm_color: Color, finger_color: Color):
    """Draw bones then joints; the wrist gets a larger dot in the palm color."""
    for a, b in HAND_CONNECTIONS:
        if a < len(landmarks) and b < len(landmarks):
            cv2.line(frame, to_int_point(landmarks[a]), to_int_point(landmarks[b]), finger_color, 2, cv2.LINE_AA)

    for i, lm in enumerate(landmarks):
        if i == 0:
            cv2.circle(frame, to_int_point(lm), 8, palm_color, -1, lineType=cv2.LINE_AA)
        else:
            cv2.circle(frame, to_int_point(lm), 4, finger_color, -1, lineType=cv2.LINE_AA)
    return frame


def draw_tracks(frame, snapshot: TrackSnapshot):
    for slot in Slot:
        cand = snapshot.get(slot)
        if cand is not None and cand.landmarks:
            palm, finger = SLOT_COLORS[slot]
            draw_hand_skeleton(frame, cand.landmarks, palm, finger)
    return frame


def draw_status(frame, snapshot: TrackSnapshot):
    """Bottom-left HUD with one line per slot."""
    h = frame.shape[0]
    for row, slot in enumerate((Slot.RIGHT, Slot.LEFT)):
        state = "DETECTED" if snapshot.get(slot) is not None else "NOT DETECTED"
        palm, _ = SLOT_COLORS[slot]
        draw_text(frame, f"{slot.value.upper()} HAND: {state}", (12, h - 16 - row * 26), color=palm)
    return frame
