"""Fixed-size, non-overlapping prediction windows over 6-channel motion samples."""

import logging
from typing import Callable, Optional

import numpy as np

from headmotion.classifier import Classifier, Prediction
from headmotion.config import WINDOW_SIZE
from headmotion.sensors import CHANNELS, MotionSample

logger = logging.getLogger(__name__)


class PredictionWindow:
    """One fixed-length array per channel plus the next write position."""

    def __init__(self, size: int = WINDOW_SIZE):
        if size < 1:
            raise ValueError("Window size must be positive.")
        self.size = size
        self.position = 0
        self._channels = {name: np.zeros(size, dtype=np.float64) for name in CHANNELS}

    @property
    def is_full(self) -> bool:
        return self.position == self.size

    def write(self, sample: MotionSample) -> None:
        for name, value in zip(CHANNELS, sample.channel_values()):
            self._channels[name][self.position] = value
        self.position += 1

    def channel(self, name: str) -> np.ndarray:
        return self._channels[name].copy()

    def as_array(self) -> np.ndarray:
        """(size, 6) copy in CHANNELS order."""
        return np.stack([self._channels[name] for name in CHANNELS], axis=1)

    def reset(self) -> None:
        self.position = 0


class WindowAggregator:
    """
    Accepts one motion sample at a time. When the window fills, the classifier
    runs synchronously with the recurrent state from the previous window, and
    the window starts again at position 0. Samples never carry over between
    windows.

    A failed classification leaves the recurrent state untouched and publishes
    nothing; the failure is logged and counted.
    """

    def __init__(
        self,
        classifier: Classifier,
        window_size: int = WINDOW_SIZE,
        on_prediction: Optional[Callable[[Prediction], None]] = None,
    ):
        self.classifier = classifier
        self.window = PredictionWindow(window_size)
        self.on_prediction = on_prediction
        self.state: Optional[np.ndarray] = None
        self.windows_completed = 0
        self.failed_predictions = 0

    @property
    def position(self) -> int:
        return self.window.position

    @property
    def window_size(self) -> int:
        return self.window.size

    def add_sample(self, sample: MotionSample) -> Optional[Prediction]:
        self.window.write(sample)

        if not self.window.is_full:
            return None

        prediction = self._predict()
        # Start a new prediction window from scratch
        self.window.reset()
        return prediction

    def reset(self) -> None:
        """Drop the partial window and forget the recurrent state."""
        self.window.reset()
        self.state = None

    def _predict(self) -> Optional[Prediction]:
        self.windows_completed += 1
        try:
            prediction = self.classifier.classify(self.window.as_array(), self.state)
        except Exception as exc:  # noqa: BLE001
            self.failed_predictions += 1
            logger.warning(
                "Prediction failed for window %d; keeping previous state: %s",
                self.windows_completed,
                exc,
            )
            return None

        self.state = prediction.state
        logger.debug(
            "Window %d -> %s (%.2f)",
            self.windows_completed,
            prediction.label,
            prediction.confidence,
        )
        if self.on_prediction is not None:
            self.on_prediction(prediction)
        return prediction
