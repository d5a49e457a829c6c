"""Windowed head-motion activity recognition with a stateful recurrent classifier."""

__version__ = "0.1.0"
