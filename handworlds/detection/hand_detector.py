"""
MediaPipe hand detection wrapper producing per-frame HandFrames.
"""

import logging
import numpy as np
import mediapipe as mp

from handworlds.core.types import HandFrame
from handworlds.detection.landmarks import split_hands
from handworlds.utils.logger import log_timing

logger = logging.getLogger(__name__)


class HandDetector:
    """MediaPipe Hands wrapper tuned for two-handed control."""

    def __init__(self, config: dict):
        self._model_complexity = config.get("model_complexity", 1)
        self._max_hands = config.get("max_num_hands", 2)
        self._min_detect_conf = config.get("min_detection_confidence", 0.5)
        self._min_track_conf = config.get("min_tracking_confidence", 0.5)

        self._mp_hands = mp.solutions.hands

        self._hands = None
        self._initialized = False

    def initialize(self):
        """Initialize MediaPipe Hands solution."""
        self._hands = self._mp_hands.Hands(
            static_image_mode=False,
            model_complexity=self._model_complexity,
            max_num_hands=self._max_hands,
            min_detection_confidence=self._min_detect_conf,
            min_tracking_confidence=self._min_track_conf,
        )
        self._initialized = True
        logger.info(
            "MediaPipe Hands initialized (complexity=%d, max_hands=%d, "
            "detect_conf=%.2f, track_conf=%.2f)",
            self._model_complexity, self._max_hands,
            self._min_detect_conf, self._min_track_conf,
        )

    def process(self, rgb_frame: np.ndarray):
        """Run hand detection on an RGB frame and return the raw results."""
        if not self._initialized:
            self.initialize()

        # Non-writable lets MediaPipe skip a copy
        rgb_frame.flags.writeable = False
        results = self._hands.process(rgb_frame)
        rgb_frame.flags.writeable = True
        return results

    @log_timing
    def detect(self, rgb_frame: np.ndarray, timestamp: float = 0.0) -> HandFrame:
        """Detect hands and split them into left/right landmark sets.

        The camera frame is expected to be mirrored (selfie view), so the
        reported labels match the user's own hands.
        """
        return split_hands(self.process(rgb_frame), timestamp)

    def close(self):
        """Release MediaPipe resources."""
        if self._hands:
            self._hands.close()
            self._hands = None
            self._initialized = False
            logger.info("MediaPipe Hands closed")

    def __enter__(self):
        self.initialize()
        return self

    def __exit__(self, *args):
        self.close()
