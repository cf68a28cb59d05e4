"""
Threaded webcam capture feeding the landmark callback.

The capture thread only ever keeps the newest frame; the control loop
pulls it with `read()` at its own pace. Opening the camera never raises:
a failure is reported once through `error` and the caller decides how to
surface it (the controller turns it into its single error state).
"""

import time
import threading
import logging
from typing import Optional, Tuple

import cv2
import numpy as np

logger = logging.getLogger(__name__)

_BACKENDS = {
    "v4l2": cv2.CAP_V4L2,
    "gstreamer": cv2.CAP_GSTREAMER,
    "auto": cv2.CAP_ANY,
}


class CameraManager:
    """Webcam source with a background grab thread."""

    def __init__(self, config: dict):
        self._device_id = config.get("device_id", 0)
        self._width = config.get("width", 320)
        self._height = config.get("height", 240)
        self._fps = config.get("fps", 30)
        self._backend = config.get("backend", "auto")
        self._buffer_size = config.get("buffer_size", 1)
        self._flip_h = config.get("flip_horizontal", True)
        self._warmup_frames = config.get("warmup_frames", 5)

        self._cap = None
        self._frame: Optional[np.ndarray] = None
        self._frame_time = 0.0
        self._frame_id = 0
        self._lock = threading.Lock()
        self._running = False
        self._thread = None
        self.error: Optional[str] = None

    def open(self) -> bool:
        """Open the device. Returns False (and sets `error`) on failure."""
        backend = _BACKENDS.get(self._backend, cv2.CAP_ANY)
        self._cap = cv2.VideoCapture(self._device_id, backend)
        if not self._cap.isOpened():
            self.error = f"could not open camera {self._device_id} ({self._backend})"
            logger.error("Failed to open camera %d with backend %s", self._device_id, self._backend)
            self._cap.release()
            self._cap = None
            return False

        self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._cap.set(cv2.CAP_PROP_FPS, self._fps)
        self._cap.set(cv2.CAP_PROP_BUFFERSIZE, self._buffer_size)

        logger.info(
            "Camera opened: %dx%d @ %.0f FPS (requested %dx%d @ %d)",
            int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
            int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT)),
            self._cap.get(cv2.CAP_PROP_FPS),
            self._width, self._height, self._fps,
        )

        # Let auto-exposure settle
        for _ in range(self._warmup_frames):
            self._cap.read()

        self.error = None
        return True

    def start_async(self):
        """Start the grab thread."""
        if self._running or self._cap is None:
            return
        self._running = True
        self._thread = threading.Thread(target=self._capture_loop, daemon=True,
                                        name="camera-capture")
        self._thread.start()
        logger.info("Async capture started")

    def _capture_loop(self):
        while self._running:
            ret, frame = self._cap.read()
            if ret and frame is not None:
                if self._flip_h:
                    frame = cv2.flip(frame, 1)
                with self._lock:
                    self._frame = frame
                    self._frame_time = time.monotonic()
                    self._frame_id += 1
            else:
                time.sleep(0.001)

    def read(self) -> Tuple[Optional[int], Optional[np.ndarray], float]:
        """Latest frame, non-blocking.

        Returns:
            (frame_id, BGR frame, monotonic capture time) or (None, None, 0.0)
        """
        with self._lock:
            if self._frame is None:
                return None, None, 0.0
            return self._frame_id, self._frame.copy(), self._frame_time

    @property
    def resolution(self) -> tuple:
        return (self._width, self._height)

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    def stop(self):
        """Stop the grab thread and release the device."""
        self._running = False
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=2.0)
        self._thread = None
        if self._cap:
            self._cap.release()
            self._cap = None
        with self._lock:
            self._frame = None
        logger.info("Camera stopped")

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *args):
        self.stop()
