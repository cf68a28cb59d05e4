"""
Single-hand gesture classifiers: OK pinch, fist strength, wrist rotation.

All classifiers are pure functions of one hand's 21 landmarks. Absent,
short or non-finite input yields the neutral value (False / 0.0 / None);
nothing here raises on bad landmarks.
"""

import math
import logging
from typing import Optional

import numpy as np

from handworlds.detection.landmarks import (
    as_landmark_array, FINGER_CHAINS, PALM_POINTS,
    WRIST, THUMB_TIP, INDEX_MCP, INDEX_TIP, MIDDLE_MCP, MIDDLE_PIP, MIDDLE_TIP,
    RING_PIP, RING_TIP, PINKY_MCP, PINKY_PIP, PINKY_TIP,
)

logger = logging.getLogger(__name__)

OK_PINCH_RATIO = 0.35

# Fist scoring weights
_TIP_WEIGHT = 0.5
_RATIO_WEIGHT = 0.3
_ANGLE_WEIGHT = 0.2
_FINGERS_WEIGHT = 0.85
_THUMB_WEIGHT = 0.15
_MIN_BONE_LENGTH = 1e-5


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _distance(a: np.ndarray, b: np.ndarray) -> float:
    """Euclidean distance between two 3D points."""
    return float(np.linalg.norm(a - b))


def _angle_at(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> Optional[float]:
    """Angle at b formed by a-b-c, in radians. None on degenerate bones."""
    ba = a - b
    bc = c - b
    norm_ba = np.linalg.norm(ba)
    norm_bc = np.linalg.norm(bc)
    if norm_ba <= _MIN_BONE_LENGTH or norm_bc <= _MIN_BONE_LENGTH:
        return None
    cos_angle = np.clip(np.dot(ba, bc) / (norm_ba * norm_bc), -1.0, 1.0)
    return float(np.arccos(cos_angle))


def _is_extended(hand: np.ndarray, tip: int, pip: int) -> bool:
    # Image y grows downward: an extended finger's tip sits above its PIP
    return bool(hand[tip, 1] < hand[pip, 1])


def is_ok_gesture(hand, pinch_ratio: float = OK_PINCH_RATIO) -> bool:
    """OK sign: thumb and index tips pinched, other three fingers up.

    The pinch must be strictly closer than `pinch_ratio` palm sizes, the
    palm size being wrist to middle knuckle.
    """
    arr = as_landmark_array(hand)
    if arr is None:
        return False

    palm_size = _distance(arr[WRIST], arr[MIDDLE_MCP]) or 1.0
    pinch = _distance(arr[THUMB_TIP], arr[INDEX_TIP]) < palm_size * pinch_ratio
    return (
        pinch
        and _is_extended(arr, MIDDLE_TIP, MIDDLE_PIP)
        and _is_extended(arr, RING_TIP, RING_PIP)
        and _is_extended(arr, PINKY_TIP, PINKY_PIP)
    )


def fist_strength(hand) -> float:
    """How closed the hand is, from 0.0 (open) to 1.0 (tight fist).

    Each long finger is scored on three cues: tip closeness to the palm
    centroid, tip-to-knuckle distance ratio, and PIP bend. The thumb adds
    a small bonus when tucked against the palm or index knuckle.
    """
    arr = as_landmark_array(hand)
    if arr is None:
        return 0.0

    palm_center = arr[list(PALM_POINTS)].mean(axis=0)
    palm_size = (_distance(arr[INDEX_MCP], arr[PINKY_MCP])
                 or _distance(arr[WRIST], arr[MIDDLE_MCP])
                 or 1.0)

    total = 0.0
    for tip_idx, pip_idx, mcp_idx in FINGER_CHAINS:
        tip, pip, mcp = arr[tip_idx], arr[pip_idx], arr[mcp_idx]
        tip_dist = _distance(tip, palm_center)
        mcp_dist = _distance(mcp, palm_center) or 1.0

        tip_score = _clamp01((palm_size * 0.95 - tip_dist) / (palm_size * 0.5))
        ratio_score = _clamp01((1.1 - tip_dist / mcp_dist) / 0.6)
        angle = _angle_at(mcp, pip, tip)
        angle_score = 0.0 if angle is None else _clamp01((math.pi - angle) / (math.pi * 0.7))

        total += (tip_score * _TIP_WEIGHT
                  + ratio_score * _RATIO_WEIGHT
                  + angle_score * _ANGLE_WEIGHT)

    thumb_tip = arr[THUMB_TIP]
    thumb_reach = min(_distance(thumb_tip, palm_center), _distance(thumb_tip, arr[INDEX_MCP]))
    thumb_score = _clamp01((palm_size * 0.65 - thumb_reach) / (palm_size * 0.65))

    combined = (total / len(FINGER_CHAINS)) * _FINGERS_WEIGHT + thumb_score * _THUMB_WEIGHT
    return _clamp01(combined)


def wrist_rotation_angle(hand) -> Optional[float]:
    """In-plane angle (radians) of the wrist -> middle knuckle vector."""
    arr = as_landmark_array(hand)
    if arr is None:
        return None
    dx = arr[MIDDLE_MCP, 0] - arr[WRIST, 0]
    dy = arr[MIDDLE_MCP, 1] - arr[WRIST, 1]
    angle = math.atan2(dy, dx)
    if not math.isfinite(angle):
        return None
    return angle


def shortest_angle_delta(current: float, previous: float) -> float:
    """Signed shortest-path difference, free of the +/-pi wraparound."""
    delta = current - previous
    return math.atan2(math.sin(delta), math.cos(delta))


def pinch_distance_2d(hand) -> Optional[float]:
    """Image-plane thumb tip to index tip distance, used for zoom."""
    arr = as_landmark_array(hand)
    if arr is None:
        return None
    return float(np.hypot(arr[THUMB_TIP, 0] - arr[INDEX_TIP, 0],
                          arr[THUMB_TIP, 1] - arr[INDEX_TIP, 1]))
