"""Configuration and logging utilities."""
from .config import Config
from .logger import setup_logging, TransitionLogger, log_timing

__all__ = ["Config", "setup_logging", "TransitionLogger", "log_timing"]
