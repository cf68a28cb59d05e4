"""
OpenCV heads-up display over the camera preview: current world, unlock
gate progress, world-D puzzle bars and the camera error banner.
"""

import logging
import cv2
import numpy as np

logger = logging.getLogger(__name__)

_FONT = cv2.FONT_HERSHEY_SIMPLEX


class Hud:
    """Draws the controller's observables onto a BGR frame."""

    def __init__(self, config: dict = None):
        config = config or {}
        self._opacity = config.get("opacity", 0.7)
        self._bar_height = config.get("bar_height", 60)

        colors = config.get("colors", {})
        self._color_text = tuple(colors.get("text", [255, 255, 255]))
        self._color_locked = tuple(colors.get("locked", [90, 90, 90]))
        self._color_progress = tuple(colors.get("progress", [0, 200, 255]))
        self._color_unlocked = tuple(colors.get("unlocked", [0, 255, 0]))
        self._color_stress = tuple(colors.get("stress", [0, 0, 255]))
        self._color_error = tuple(colors.get("error", [0, 150, 255]))

    def render(self, frame: np.ndarray, state: dict) -> np.ndarray:
        """Render the overlay in place.

        Args:
            frame: BGR frame to draw on
            state: HandWorldsController.observables()

        Returns:
            The same frame
        """
        h, w = frame.shape[:2]

        self._draw_top_bar(frame, w, state)
        self._draw_gates(frame, state.get("gates", {}))

        if state.get("current_world") == "D":
            self._draw_world_d(frame, w, state)

        if state.get("error"):
            self._draw_banner(frame, w, h, f"Camera error: {state['error']}")
        elif not state.get("hand_control_enabled", True):
            self._draw_banner(frame, w, h, "Hand control off (press h)")

        return frame

    def _draw_top_bar(self, frame, w, state):
        overlay = frame.copy()
        cv2.rectangle(overlay, (0, 0), (w, self._bar_height), (20, 20, 20), -1)
        cv2.addWeighted(overlay, self._opacity, frame, 1 - self._opacity, 0, frame)

        world = state.get("current_world", "?")
        cv2.putText(frame, f"World {world}", (15, 35), _FONT, 0.9, self._color_text, 2)

        distance = state.get("distance", 0.0)
        deep = state.get("deep_zone_active", False)
        color = self._color_unlocked if deep else self._color_text
        cv2.putText(frame, f"Dist: {distance:.0f}{' DEEP' if deep else ''}",
                    (w - 190, 25), _FONT, 0.55, color, 1)

        pending = state.get("pending")
        if pending:
            cv2.putText(frame, f"Loading {pending}...", (w - 190, 50),
                        _FONT, 0.5, self._color_progress, 1)

    def _draw_gates(self, frame, gates):
        x = 15
        y = self._bar_height + 15
        for name in sorted(gates):
            gate = gates[name]
            self._draw_bar(frame, x, y, gate.get("progress", 0.0), name,
                           done=gate.get("unlocked", False))
            y += 25

    def _draw_world_d(self, frame, w, state):
        x = w - 175
        y = self._bar_height + 15
        self._draw_bar(frame, x, y, state.get("world_d_rotation_progress", 0.0), "Rot",
                       done=state.get("world_d_rotation_progress", 0.0) >= 1.0)
        stress_color = self._color_stress if state.get("world_d_stress_active") else None
        self._draw_bar(frame, x, y + 25, state.get("world_d_stress_progress", 0.0), "Str",
                       done=state.get("world_d_stress_progress", 0.0) >= 1.0,
                       fill_color=stress_color)

    def _draw_bar(self, frame, x, y, progress, label, done=False, fill_color=None):
        """Horizontal progress bar with a short label on its left."""
        bar_w = 120
        bar_h = 14
        bx = x + 40

        cv2.putText(frame, label, (x, y + bar_h - 2), _FONT, 0.45, self._color_text, 1)
        cv2.rectangle(frame, (bx, y), (bx + bar_w, y + bar_h), self._color_locked, -1)

        if done:
            color = self._color_unlocked
            fill = bar_w
        else:
            color = fill_color or self._color_progress
            fill = int(max(0.0, min(progress, 1.0)) * bar_w)
        if fill > 0:
            cv2.rectangle(frame, (bx, y), (bx + fill, y + bar_h), color, -1)
        cv2.rectangle(frame, (bx, y), (bx + bar_w, y + bar_h), (200, 200, 200), 1)

    def _draw_banner(self, frame, w, h, text):
        text_size = cv2.getTextSize(text, _FONT, 0.6, 2)[0]
        x = max((w - text_size[0]) // 2, 5)
        cv2.putText(frame, text, (x, h - 20), _FONT, 0.6, self._color_error, 2)
