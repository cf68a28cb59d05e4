#!/usr/bin/env python3
"""
Hand Worlds
Main application entry point.

Camera frames go through MediaPipe into the controller's landmark
callback; the display loop runs the render tick and draws the HUD.

Usage:
    python main.py                    # Default camera, HUD on
    python main.py --camera 1         # Another camera device
    python main.py --no-hud           # Headless control loop
    python main.py --config my.yaml   # Custom configuration

Keys (HUD window):
    q  quit
    h  toggle hand control
    r  reinitialize the scene
"""

import time
import signal
import argparse
import logging

import cv2
import numpy as np

from handworlds.capture.camera_manager import CameraManager
from handworlds.core.controller import HandWorldsController
from handworlds.core.events import EventBus, Events
from handworlds.detection.hand_detector import HandDetector
from handworlds.utils.config import Config
from handworlds.utils.logger import setup_logging, TransitionLogger
from handworlds.visualization.hud import Hud
from handworlds.world.assets import AssetRegistry
from handworlds.world.scene import OrbitRig

logger = logging.getLogger(__name__)


class HandWorldsApp:
    """Wires camera, detector, controller and HUD into one loop."""

    def __init__(self, config: Config, show_hud: bool = True):
        self._config = config
        self._show_hud = show_hud and config.get("visualization.enabled", True)
        self._running = False

        self._bus = EventBus()
        self._transitions = TransitionLogger(self._bus)

        self._camera = CameraManager(config.camera)
        self._detector = HandDetector(config.mediapipe)
        self._controller = HandWorldsController(
            rig=OrbitRig.from_config(config.zones),
            assets=AssetRegistry(),
            config=config.as_dict(),
            event_bus=self._bus,
        )
        self._hud = Hud(config.visualization)
        self._last_frame_id = None

        logger.info("HandWorldsApp initialized")

    # -------------------------------------------------------------------------
    # Landmark source
    # -------------------------------------------------------------------------

    def _start_source(self) -> bool:
        if not self._camera.open():
            self._controller.report_camera_error(self._camera.error)
            return False
        self._camera.start_async()
        self._detector.initialize()
        self._last_frame_id = None
        return True

    def _stop_source(self):
        self._camera.stop()
        self._detector.close()

    def toggle_hand_control(self):
        if self._controller.hand_control_enabled:
            self._controller.disable_hand_control()
            self._stop_source()
        else:
            self._controller.enable_hand_control()
            self._start_source()

    # -------------------------------------------------------------------------
    # Main loop
    # -------------------------------------------------------------------------

    def run(self):
        """Run until quit or signal."""
        self._start_source()
        self._running = True
        self._bus.emit(Events.SYSTEM_STARTED)
        window_name = self._config.get("visualization.window_name", "Hand Worlds")

        while self._running:
            frame = self._poll_camera()
            self._controller.on_tick(time.monotonic())

            if not self._show_hud:
                time.sleep(0.005)
                continue

            if frame is None:
                w, h = self._camera.resolution
                frame = _blank(w, h)
            frame = self._hud.render(frame, self._controller.observables())
            cv2.imshow(window_name, frame)

            key = cv2.waitKey(1) & 0xFF
            if key == ord("q"):
                self._running = False
            elif key == ord("h"):
                self.toggle_hand_control()
            elif key == ord("r"):
                self._controller.reinitialize()

        self._shutdown()

    def _poll_camera(self):
        """Feed the newest camera frame (if any) to the landmark callback."""
        if not self._controller.hand_control_enabled:
            return None
        frame_id, frame, captured_at = self._camera.read()
        if frame is None:
            return None
        if frame_id != self._last_frame_id:
            self._last_frame_id = frame_id
            rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
            hands = self._detector.detect(rgb, captured_at)
            self._controller.on_landmarks(hands, captured_at)
        return frame

    def _shutdown(self):
        logger.info("Shutting down...")
        self._running = False
        self._stop_source()
        self._controller.assets.shutdown()
        if self._show_hud:
            cv2.destroyAllWindows()
        self._bus.emit(Events.SYSTEM_SHUTDOWN)
        logger.info("Shutdown complete (%d world switches).", self._transitions.total_switches)

    def handle_signal(self, signum, frame):
        """Handle SIGINT/SIGTERM for graceful shutdown."""
        logger.info("Signal %d received, shutting down...", signum)
        self._running = False


def _blank(width, height):
    return np.zeros((height, width, 3), dtype=np.uint8)


def parse_args():
    parser = argparse.ArgumentParser(
        description="Hand Worlds - gesture navigation through four linked worlds"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to config.yaml"
    )
    parser.add_argument(
        "--camera", type=int, default=None,
        help="Camera device ID"
    )
    parser.add_argument(
        "--no-hud", action="store_true",
        help="Run without the preview window"
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override logging.level"
    )
    return parser.parse_args()


def main():
    args = parse_args()

    config = Config()
    config.load(config_path=args.config)

    overrides = {}
    if args.camera is not None:
        overrides["camera"] = {"device_id": args.camera}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    if overrides:
        config.load_dict(_merged(config.as_dict(), overrides))

    log_cfg = config.logging
    setup_logging(
        level=log_cfg.get("level", "INFO"),
        log_file=log_cfg.get("file"),
        max_size_mb=log_cfg.get("max_size_mb", 10),
        backup_count=log_cfg.get("backup_count", 3),
    )

    logger.info("=" * 60)
    logger.info("  HAND WORLDS")
    logger.info("  Version: %s", config.get("system.version", "1.0.0"))
    logger.info("=" * 60)

    app = HandWorldsApp(config, show_hud=not args.no_hud)

    signal.signal(signal.SIGINT, app.handle_signal)
    signal.signal(signal.SIGTERM, app.handle_signal)

    app.run()


def _merged(base: dict, override: dict) -> dict:
    for section, values in override.items():
        base.setdefault(section, {}).update(values)
    return base


if __name__ == "__main__":
    main()
