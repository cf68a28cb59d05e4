"""Hand landmark detection and handedness split."""
from .landmarks import as_landmark_array, hand_frame_from_records, split_hands

__all__ = ["as_landmark_array", "hand_frame_from_records", "split_hands"]
