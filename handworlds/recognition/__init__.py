"""Gesture classifiers."""
from .gestures import (
    is_ok_gesture, fist_strength, wrist_rotation_angle,
    shortest_angle_delta, pinch_distance_2d,
)

__all__ = [
    "is_ok_gesture",
    "fist_strength",
    "wrist_rotation_angle",
    "shortest_angle_delta",
    "pinch_distance_2d",
]
