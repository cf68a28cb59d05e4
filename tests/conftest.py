"""
Shared fixtures and synthetic hand builders.

Landmarks are in image coordinates (y grows downward), MediaPipe order.
"""

import pytest
import numpy as np

from handworlds.core.events import EventBus
from handworlds.core.types import HandFrame
from handworlds.utils.config import Config


def _hand(points):
    arr = np.zeros((21, 3))
    for idx, (x, y) in points.items():
        arr[idx, 0] = x
        arr[idx, 1] = y
    return arr


_OPEN = {
    0: (0.50, 0.80),                                                    # wrist
    1: (0.44, 0.76), 2: (0.40, 0.72), 3: (0.37, 0.68), 4: (0.34, 0.64),  # thumb
    5: (0.45, 0.60), 6: (0.45, 0.50), 7: (0.45, 0.45), 8: (0.45, 0.40),  # index
    9: (0.50, 0.60), 10: (0.50, 0.49), 11: (0.50, 0.43), 12: (0.50, 0.38),  # middle
    13: (0.55, 0.61), 14: (0.55, 0.51), 15: (0.55, 0.46), 16: (0.55, 0.41),  # ring
    17: (0.60, 0.63), 18: (0.60, 0.55), 19: (0.60, 0.51), 20: (0.60, 0.47),  # pinky
}


def make_open_hand(dx=0.0, dy=0.0):
    """Flat open palm, fingers up. Optionally shifted in the image."""
    arr = _hand(_OPEN)
    arr[:, 0] += dx
    arr[:, 1] += dy
    return arr


def make_fist():
    """Tight fist: fingertips folded onto the palm, thumb tucked."""
    points = dict(_OPEN)
    points.update({
        4: (0.47, 0.66),
        6: (0.45, 0.54), 7: (0.46, 0.58), 8: (0.48, 0.64),
        10: (0.50, 0.53), 11: (0.505, 0.58), 12: (0.51, 0.64),
        14: (0.55, 0.54), 15: (0.545, 0.59), 16: (0.54, 0.645),
        18: (0.60, 0.57), 19: (0.585, 0.61), 20: (0.57, 0.65),
    })
    return _hand(points)


def make_ok_hand():
    """OK sign: thumb tip touching the curled index tip, three fingers up."""
    points = dict(_OPEN)
    points.update({
        3: (0.40, 0.60), 4: (0.44, 0.53),
        6: (0.44, 0.50), 7: (0.43, 0.50), 8: (0.43, 0.52),
    })
    return _hand(points)


def make_pinch_hand(pinch, x=0.5, y=0.8):
    """Right hand with the thumb-index tip gap set to `pinch` (image plane)."""
    arr = make_open_hand(dx=x - 0.5, dy=y - 0.8)
    arr[8, :2] = arr[4, :2] + np.array([pinch, 0.0])
    return arr


def make_rotated_hand(angle):
    """Open hand whose wrist -> middle knuckle vector points at `angle`."""
    arr = make_open_hand()
    wrist = arr[0, :2].copy()
    arr[9, 0] = wrist[0] + 0.2 * np.cos(angle)
    arr[9, 1] = wrist[1] + 0.2 * np.sin(angle)
    return arr


@pytest.fixture
def open_hand():
    return make_open_hand()


@pytest.fixture
def fist_hand():
    return make_fist()


@pytest.fixture
def ok_hand():
    return make_ok_hand()


@pytest.fixture
def ok_frame(ok_hand):
    return HandFrame(left=ok_hand)


@pytest.fixture(autouse=True)
def bus():
    """Fresh event bus per test."""
    event_bus = EventBus()
    event_bus.reset()
    yield event_bus
    event_bus.reset()


@pytest.fixture(autouse=True)
def fresh_config():
    Config.reset()
    yield
    Config.reset()
