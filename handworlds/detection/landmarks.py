"""
21-point hand landmark conversion and the left/right handedness split.

Every camera frame is turned into a HandFrame holding at most one left
and one right landmark set. Malformed hands (short, non-numeric or
non-finite) are dropped so downstream code only ever sees "present and
valid" or "absent".
"""

import logging
from typing import Iterable, Optional

import numpy as np

from handworlds.core.types import HandFrame, LEFT, RIGHT, NUM_LANDMARKS

logger = logging.getLogger(__name__)

# MediaPipe hand landmark indices
WRIST = 0
THUMB_CMC = 1
THUMB_MCP = 2
THUMB_IP = 3
THUMB_TIP = 4
INDEX_MCP = 5
INDEX_PIP = 6
INDEX_DIP = 7
INDEX_TIP = 8
MIDDLE_MCP = 9
MIDDLE_PIP = 10
MIDDLE_DIP = 11
MIDDLE_TIP = 12
RING_MCP = 13
RING_PIP = 14
RING_DIP = 15
RING_TIP = 16
PINKY_MCP = 17
PINKY_PIP = 18
PINKY_DIP = 19
PINKY_TIP = 20

# (tip, pip, mcp) per long finger, index..pinky
FINGER_CHAINS = (
    (INDEX_TIP, INDEX_PIP, INDEX_MCP),
    (MIDDLE_TIP, MIDDLE_PIP, MIDDLE_MCP),
    (RING_TIP, RING_PIP, RING_MCP),
    (PINKY_TIP, PINKY_PIP, PINKY_MCP),
)

PALM_POINTS = (WRIST, INDEX_MCP, MIDDLE_MCP, RING_MCP, PINKY_MCP)


def as_landmark_array(hand, min_points: int = NUM_LANDMARKS) -> Optional[np.ndarray]:
    """Coerce a hand into a finite (N, 3) float array, or None.

    Accepts numpy arrays, nested sequences of (x, y, z) and objects
    exposing `.x`, `.y`, `.z` (MediaPipe NormalizedLandmark).
    """
    if hand is None:
        return None
    if hasattr(hand, "landmark"):
        hand = hand.landmark
    try:
        if len(hand) < min_points:
            return None
        first = hand[0]
        if hasattr(first, "x"):
            points = [(p.x, p.y, getattr(p, "z", 0.0)) for p in hand]
        else:
            points = hand
        arr = np.asarray(points, dtype=np.float64)
    except (TypeError, ValueError, AttributeError, IndexError):
        return None

    if arr.ndim != 2 or arr.shape[0] < min_points or arr.shape[1] < 2:
        return None
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((arr.shape[0], 1))])
    arr = arr[:, :3]
    if not np.isfinite(arr[:min_points]).all():
        return None
    return arr


def _normalize_label(label) -> Optional[str]:
    if label is None:
        return None
    text = str(label).strip().lower()
    if text == "left":
        return LEFT
    if text == "right":
        return RIGHT
    return None


def hand_frame_from_records(records: Optional[Iterable], timestamp: float = 0.0) -> HandFrame:
    """Build a HandFrame from plain `{"handedness", "landmarks"}` records.

    Unknown labels and malformed landmark sets are treated as absent.
    When a label repeats, the last record wins.
    """
    frame = HandFrame(timestamp=timestamp)
    if not records:
        return frame

    for record in records:
        try:
            label = _normalize_label(record.get("handedness"))
            landmarks = record.get("landmarks")
        except AttributeError:
            logger.debug("Skipping non-mapping hand record: %r", record)
            continue
        arr = as_landmark_array(landmarks)
        if label is None or arr is None:
            continue
        if label == LEFT:
            frame.left = arr
        else:
            frame.right = arr
    return frame


def split_hands(results, timestamp: float = 0.0) -> HandFrame:
    """Split a MediaPipe Hands result into a HandFrame by handedness label."""
    if results is None or not getattr(results, "multi_hand_landmarks", None):
        return HandFrame(timestamp=timestamp)

    handedness = getattr(results, "multi_handedness", None) or []
    records = []
    for i, hand_lm in enumerate(results.multi_hand_landmarks):
        if i >= len(handedness):
            continue
        try:
            label = handedness[i].classification[0].label
        except (AttributeError, IndexError):
            continue
        records.append({"handedness": label, "landmarks": hand_lm})
    return hand_frame_from_records(records, timestamp)
