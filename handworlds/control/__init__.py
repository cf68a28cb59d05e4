"""Continuous camera control and hold-to-confirm gates."""
from .continuous import ContinuousControlFilter, ControlConfig
from .hold_gate import HoldTimer, HoldGate

__all__ = ["ContinuousControlFilter", "ControlConfig", "HoldTimer", "HoldGate"]
