import numpy as np
import pytest

from duohand.regions import REGION_ORDER, normalize, region_offset, split_frame
from duohand.types import RawDetection, Region

from hand_factory import hand_landmarks, make_raw


def test_split_frame_returns_full_and_half_crops():
    frame = np.zeros((480, 640, 3), dtype=np.uint8)
    views = split_frame(frame)

    assert views[Region.FULL].shape == (480, 640, 3)
    assert views[Region.LEFT].shape == (480, 320, 3)
    assert views[Region.RIGHT].shape == (480, 320, 3)


def test_split_frame_crops_cover_their_half():
    frame = np.zeros((10, 8, 3), dtype=np.uint8)
    frame[:, 4:] = 255
    views = split_frame(frame)

    assert views[Region.LEFT].max() == 0
    assert views[Region.RIGHT].min() == 255


@pytest.mark.parametrize(
    "region, expected",
    [(Region.FULL, 0), (Region.LEFT, 0), (Region.RIGHT, 320)],
)
def test_region_offset(region, expected):
    assert region_offset(region, 640) == expected


def test_right_crop_point_maps_into_full_frame():
    pts = hand_landmarks(10.0, 20.0)
    raw = RawDetection(landmarks=pts, confidence=0.8, bounding_box=((5.0, 1.0), (50.0, 40.0)))

    [cand] = normalize([raw], Region.RIGHT, 640)

    assert cand.landmarks[0] == (330.0, 20.0, 0.0)
    assert cand.bounding_box == ((325.0, 1.0), (370.0, 40.0))
    assert cand.source_region is Region.RIGHT
    assert cand.confidence == pytest.approx(0.8)


@pytest.mark.parametrize("region", [Region.FULL, Region.LEFT])
def test_full_and_left_pass_through(region):
    raw = make_raw(123.0, 45.0)

    [cand] = normalize([raw], region, 640)

    assert cand.landmarks == tuple(tuple(p) for p in raw.landmarks)
    assert cand.source_region is region


def test_normalize_does_not_mutate_detector_output():
    pts = [[float(i), 1.0, 0.0] for i in range(21)]
    raw = RawDetection(landmarks=pts, confidence=1.0, bounding_box=((0.0, 0.0), (20.0, 1.0)))

    normalize([raw], Region.RIGHT, 640)

    assert pts[0] == [0.0, 1.0, 0.0]
    assert raw.bounding_box == ((0.0, 0.0), (20.0, 1.0))


def test_normalize_empty_input():
    assert normalize([], Region.LEFT, 640) == []


def test_malformed_detection_is_dropped():
    short = RawDetection(landmarks=[(1.0, 2.0, 0.0)] * 5, confidence=0.9, bounding_box=((0.0, 0.0), (1.0, 1.0)))

    out = normalize([short, make_raw(200.0)], Region.FULL, 640)

    assert len(out) == 1
    assert out[0].landmarks[0][0] == 200.0


def test_region_order_is_full_left_right():
    assert REGION_ORDER == (Region.FULL, Region.LEFT, Region.RIGHT)
