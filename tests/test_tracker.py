import pytest

from duohand.config import TrackerConfig
from duohand.tracker import TrackAssigner, TrackerState, smooth_candidate
from duohand.types import Candidate, Region, Slot

from hand_factory import make_candidate


def wrist_of(cand):
    return cand.landmarks[0][:2]


def test_state_starts_empty():
    state = TrackerState(started_at=50.0)

    for slot in Slot:
        assert state.track(slot).prediction is None
        assert state.track(slot).last_updated_at == 50.0


def test_two_hands_sorted_into_left_and_right():
    assigner = TrackAssigner()

    snap = assigner.update([make_candidate(400.0), make_candidate(100.0)], now=10.0, frame_width=640)

    assert wrist_of(snap.left) == (100.0, 300.0)
    assert wrist_of(snap.right) == (400.0, 300.0)
    assert assigner.state.track(Slot.LEFT).last_updated_at == 10.0
    assert assigner.state.track(Slot.RIGHT).last_updated_at == 10.0


def test_extra_hands_are_discarded():
    assigner = TrackAssigner()

    snap = assigner.update([make_candidate(x) for x in (600.0, 100.0, 350.0)], now=1.0, frame_width=640)

    assert wrist_of(snap.left)[0] == 100.0
    assert wrist_of(snap.right)[0] == 350.0


def test_sort_is_stable_for_equal_wrists():
    assigner = TrackAssigner()
    a = make_candidate(200.0, region=Region.FULL)
    b = make_candidate(200.0, region=Region.LEFT)

    snap = assigner.update([a, b], now=1.0, frame_width=640)

    assert snap.left.source_region is Region.FULL
    assert snap.right.source_region is Region.LEFT


def test_single_hand_left_of_midpoint_goes_left():
    assigner = TrackAssigner()

    snap = assigner.update([make_candidate(50.0)], now=1.0, frame_width=640)

    assert snap.left is not None
    assert snap.right is None


def test_single_hand_right_of_midpoint_goes_right():
    assigner = TrackAssigner()

    snap = assigner.update([make_candidate(320.0)], now=1.0, frame_width=640)

    assert snap.left is None
    assert snap.right is not None


def test_unknown_width_uses_default_midpoint():
    assigner = TrackAssigner(TrackerConfig(default_frame_width=640))

    snap = assigner.update([make_candidate(330.0)], now=1.0, frame_width=None)

    assert snap.right is not None


def test_single_hand_clears_opposite_slot_after_grace_period():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0), make_candidate(500.0)], now=0.0, frame_width=640)

    snap = assigner.update([make_candidate(50.0)], now=400.0, frame_width=640)
    assert snap.right is not None

    snap = assigner.update([make_candidate(50.0)], now=600.0, frame_width=640)
    assert snap.left is not None
    assert snap.right is None


def test_opposite_slot_kept_at_exactly_the_grace_period():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0), make_candidate(500.0)], now=0.0, frame_width=640)

    snap = assigner.update([make_candidate(50.0)], now=500.0, frame_width=640)
    assert snap.right is not None

    snap = assigner.update([make_candidate(50.0)], now=501.0, frame_width=640)
    assert snap.right is None


def test_single_hand_on_the_right_clears_stale_left_slot():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0), make_candidate(500.0)], now=0.0, frame_width=640)

    snap = assigner.update([make_candidate(550.0)], now=400.0, frame_width=640)
    assert snap.left is not None
    assert snap.right is not None

    snap = assigner.update([make_candidate(550.0)], now=600.0, frame_width=640)
    assert snap.left is None
    assert snap.right is not None


def test_unassigned_slot_is_untouched_within_grace_period():
    assigner = TrackAssigner()
    first = assigner.update([make_candidate(100.0), make_candidate(500.0)], now=0.0, frame_width=640)

    snap = assigner.update([make_candidate(60.0)], now=100.0, frame_width=640)

    assert snap.right == first.right
    assert assigner.state.track(Slot.RIGHT).last_updated_at == 0.0


def test_empty_frames_keep_slots_until_stale():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0), make_candidate(500.0)], now=0.0, frame_width=640)

    snap = assigner.update([], now=1000.0, frame_width=640)
    assert snap.left is not None and snap.right is not None

    snap = assigner.update([], now=1001.0, frame_width=640)
    assert snap.left is None and snap.right is None

    snap = assigner.update([], now=5000.0, frame_width=640)
    assert snap.left is None and snap.right is None


def test_slot_goes_absent_after_1200ms_without_candidates():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0)], now=0.0, frame_width=640)

    snap = assigner.update([], now=1200.0, frame_width=640)

    assert snap.left is None


def test_smoothing_blends_forty_percent_new():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0, 300.0)], now=0.0, frame_width=640)

    snap = assigner.update([make_candidate(200.0, 300.0)], now=33.0, frame_width=640)

    x, y, _ = snap.left.landmarks[0]
    assert x == pytest.approx(200.0 * 0.4 + 100.0 * 0.6)
    assert y == pytest.approx(300.0)


def test_first_prediction_is_stored_unsmoothed():
    assigner = TrackAssigner()
    cand = make_candidate(100.0)

    snap = assigner.update([cand], now=0.0, frame_width=640)

    assert snap.left == cand


def test_constant_input_converges_to_input():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0, 300.0)], now=0.0, frame_width=640)

    target = make_candidate(150.0, 250.0)
    snap = None
    for i in range(1, 80):
        snap = assigner.update([target], now=i * 10.0, frame_width=640)

    for got, want in zip(snap.left.landmarks, target.landmarks):
        assert got == pytest.approx(want, abs=1e-6)


def test_smoothing_a_fixed_point_is_identity():
    cand = make_candidate(100.0)

    out = smooth_candidate(cand, cand, 0.4)

    for got, want in zip(out.landmarks, cand.landmarks):
        assert got == pytest.approx(want)


def test_smoothing_keeps_metadata_of_new_candidate():
    old = make_candidate(100.0, region=Region.LEFT, confidence=0.5)
    new = make_candidate(110.0, region=Region.FULL, confidence=0.9)

    out = smooth_candidate(new, old, 0.4)

    assert out.source_region is Region.FULL
    assert out.confidence == 0.9
    assert new.landmarks[0][0] == 110.0


def test_incomplete_candidates_are_ignored():
    assigner = TrackAssigner()
    broken = Candidate(landmarks=(), confidence=1.0, bounding_box=((0.0, 0.0), (0.0, 0.0)), source_region=Region.FULL)

    snap = assigner.update([broken], now=0.0, frame_width=640)

    assert snap.left is None and snap.right is None


def test_out_of_order_timestamp_is_ignored():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0)], now=500.0, frame_width=640)

    snap = assigner.update([make_candidate(500.0)], now=100.0, frame_width=640)

    assert snap.right is None
    assert assigner.state.track(Slot.LEFT).last_updated_at == 500.0


def test_reset_empties_both_slots():
    assigner = TrackAssigner()
    assigner.update([make_candidate(100.0), make_candidate(500.0)], now=0.0, frame_width=640)

    assigner.reset(now=50.0)

    snap = assigner.state.snapshot(50.0)
    assert snap.left is None and snap.right is None
    assert assigner.state.track(Slot.LEFT).last_updated_at == 50.0


def test_custom_timeouts():
    assigner = TrackAssigner(TrackerConfig(track_stale_ms=100.0))
    assigner.update([make_candidate(100.0)], now=0.0, frame_width=640)

    assert assigner.update([], now=101.0, frame_width=640).left is None
