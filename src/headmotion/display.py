"""Label/confidence display state and fire-and-forget update dispatch."""

import logging
import queue
import threading
from typing import Callable, Dict, Optional

from headmotion.classifier import Prediction

logger = logging.getLogger(__name__)

_STOP = object()


def format_confidence(probability: float) -> str:
    return "%.0f" % (probability * 100) + "%"


class DisplayState:
    """Latest label text and confidence text, safe to read from any thread."""

    def __init__(self):
        self._lock = threading.Lock()
        self.label: Optional[str] = None
        self.confidence: Optional[str] = None
        self.updates = 0

    def show(self, label: str, confidence: str) -> None:
        with self._lock:
            self.label = label
            self.confidence = confidence
            self.updates += 1

    def snapshot(self) -> Dict[str, object]:
        with self._lock:
            return {
                "label": self.label,
                "confidence": self.confidence,
                "updates": self.updates,
            }


class LabelDispatcher:
    """
    Deliver predictions to a display sink on one background worker.
    publish() never blocks the caller; updates are applied in FIFO order
    and a queued update cannot be cancelled.
    """

    def __init__(self, sink: DisplayState, show: Optional[Callable[[str, str], None]] = None):
        self.sink = sink
        self._show = show or sink.show
        self._queue: "queue.Queue[object]" = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    def publish(self, prediction: Prediction) -> None:
        self._start_worker_if_needed()
        self._queue.put((prediction.label, format_confidence(prediction.confidence)))

    def flush(self) -> None:
        """Block until every queued update has reached the sink."""
        if self._worker is not None:
            self._queue.join()

    def close(self) -> None:
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is None:
            return
        self._queue.put(_STOP)
        worker.join()

    def _start_worker_if_needed(self) -> None:
        with self._lock:
            if self._worker is not None:
                return
            self._worker = threading.Thread(target=self._worker_loop, daemon=True)
            self._worker.start()

    def _worker_loop(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                label, confidence = item
                self._show(label, confidence)
            except Exception as exc:  # noqa: BLE001
                logger.error("Display update failed for %r: %s", item, exc)
            finally:
                self._queue.task_done()
