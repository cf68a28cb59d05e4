"""
Tests for the Landmark Preprocessor
===================================
"""

from types import SimpleNamespace

import numpy as np

from handworlds.detection.landmarks import (
    as_landmark_array, hand_frame_from_records, split_hands,
)
from tests.conftest import make_open_hand, make_fist


def _mp_landmarks(arr):
    return SimpleNamespace(landmark=[SimpleNamespace(x=p[0], y=p[1], z=p[2]) for p in arr])


def _mp_results(*hands):
    """Mimic a MediaPipe Hands result from (label, array) pairs."""
    return SimpleNamespace(
        multi_hand_landmarks=[_mp_landmarks(arr) for _, arr in hands],
        multi_handedness=[
            SimpleNamespace(classification=[SimpleNamespace(label=label, score=0.9)])
            for label, _ in hands
        ],
    )


class TestAsLandmarkArray:

    def test_numpy_passthrough(self, open_hand):
        arr = as_landmark_array(open_hand)
        assert arr.shape == (21, 3)
        np.testing.assert_allclose(arr, open_hand)

    def test_two_column_input_gets_zero_depth(self, open_hand):
        arr = as_landmark_array(open_hand[:, :2])
        assert arr.shape == (21, 3)
        assert np.all(arr[:, 2] == 0.0)

    def test_landmark_objects(self, open_hand):
        arr = as_landmark_array(_mp_landmarks(open_hand))
        np.testing.assert_allclose(arr, open_hand)

    def test_short_hand(self, open_hand):
        assert as_landmark_array(open_hand[:20]) is None

    def test_nan(self, open_hand):
        open_hand[3, 0] = np.nan
        assert as_landmark_array(open_hand) is None


class TestHandFrameFromRecords:

    def test_split_by_label(self):
        left, right = make_fist(), make_open_hand()
        frame = hand_frame_from_records([
            {"handedness": "Left", "landmarks": left},
            {"handedness": "Right", "landmarks": right},
        ], timestamp=1.5)
        np.testing.assert_allclose(frame.left, left)
        np.testing.assert_allclose(frame.right, right)
        assert frame.hand_count == 2
        assert frame.timestamp == 1.5

    def test_empty_and_none(self):
        assert hand_frame_from_records(None).is_empty
        assert hand_frame_from_records([]).is_empty

    def test_malformed_hand_is_absent(self, open_hand):
        frame = hand_frame_from_records([
            {"handedness": "Left", "landmarks": open_hand[:10]},
            {"handedness": "Right", "landmarks": open_hand},
        ])
        assert frame.left is None
        assert frame.right is not None

    def test_unknown_label_ignored(self, open_hand):
        frame = hand_frame_from_records([{"handedness": "Both", "landmarks": open_hand}])
        assert frame.is_empty

    def test_label_case_insensitive(self, open_hand):
        frame = hand_frame_from_records([{"handedness": " left ", "landmarks": open_hand}])
        assert frame.left is not None

    def test_non_mapping_record_skipped(self, open_hand):
        frame = hand_frame_from_records(["junk", {"handedness": "Right", "landmarks": open_hand}])
        assert frame.right is not None
        assert frame.left is None

    def test_duplicate_label_keeps_one(self):
        first, second = make_open_hand(), make_fist()
        frame = hand_frame_from_records([
            {"handedness": "Right", "landmarks": first},
            {"handedness": "Right", "landmarks": second},
        ])
        assert frame.left is None
        np.testing.assert_allclose(frame.right, second)


class TestSplitHands:

    def test_mediapipe_results(self):
        left, right = make_fist(), make_open_hand()
        frame = split_hands(_mp_results(("Left", left), ("Right", right)), timestamp=2.0)
        np.testing.assert_allclose(frame.left, left)
        np.testing.assert_allclose(frame.right, right)

    def test_no_hands(self):
        assert split_hands(None).is_empty
        assert split_hands(SimpleNamespace(multi_hand_landmarks=None)).is_empty

    def test_missing_handedness_entry(self, open_hand):
        results = _mp_results(("Left", open_hand))
        results.multi_handedness = []
        assert split_hands(results).is_empty
