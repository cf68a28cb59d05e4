"""
Hand Worlds
===========

Gesture-driven navigation through four linked 3D worlds.

Modules:
    - core: Shared types, session controller and event bus
    - capture: Camera frame acquisition
    - detection: MediaPipe hand landmarks and handedness split
    - recognition: OK-pinch, fist-strength and wrist-rotation classifiers
    - control: Continuous pan/zoom filter and hold-to-confirm gates
    - world: Zone/world state machine, world-D puzzle, camera rig, assets
    - visualization: HUD overlay for gate and puzzle progress
    - utils: Configuration and logging
"""

__version__ = "1.0.0"
__author__ = "HCI Team"
