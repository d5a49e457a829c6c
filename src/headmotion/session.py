"""Routes motion-source callbacks into the window aggregator and pose tracker."""

import enum
import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from headmotion.classifier import Prediction
from headmotion.display import LabelDispatcher
from headmotion.pose import HeadPoseTracker
from headmotion.sensors import MotionSample
from headmotion.window import WindowAggregator

logger = logging.getLogger(__name__)


class AuthorizationStatus(enum.Enum):
    AUTHORIZED = "authorized"
    RESTRICTED = "restricted"
    DENIED = "denied"
    NOT_DETERMINED = "not_determined"


class MotionSession:
    def __init__(
        self,
        aggregator: WindowAggregator,
        pose_tracker: Optional[HeadPoseTracker] = None,
        dispatcher: Optional[LabelDispatcher] = None,
    ):
        self.aggregator = aggregator
        self.pose_tracker = pose_tracker or HeadPoseTracker()
        self.dispatcher = dispatcher
        self.active = False
        self.last_error: Optional[BaseException] = None
        # Motion callbacks and HTTP requests may arrive on different threads;
        # the window and recurrent state are only touched under this lock.
        self._state_lock = threading.RLock()

    def handle_update(
        self,
        sample: Optional[MotionSample] = None,
        error: Optional[BaseException] = None,
    ) -> Optional[Prediction]:
        """Motion callback: exactly one of sample / error is expected."""
        with self._state_lock:
            if sample is None:
                if error is not None:
                    self.last_error = error
                    logger.error("Motion updates failed: %s", error)
                return None
            return self._apply(sample)

    def handle_samples(self, samples: Sequence[MotionSample]) -> Tuple[List[Prediction], int]:
        """Feed a batch without interleaving other callers; returns predictions and final position."""
        with self._state_lock:
            predictions = []
            for sample in samples:
                prediction = self._apply(sample)
                if prediction is not None:
                    predictions.append(prediction)
            return predictions, self.aggregator.position

    def _apply(self, sample: MotionSample) -> Optional[Prediction]:
        # Pose first: a misshapen attitude raises before the window is touched.
        if sample.rotation_matrix is not None:
            self.pose_tracker.update(sample.rotation_matrix)
        prediction = self.aggregator.add_sample(sample)
        if prediction is not None and self.dispatcher is not None:
            self.dispatcher.publish(prediction)
        return prediction

    def start(self, status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED) -> bool:
        if status is AuthorizationStatus.AUTHORIZED:
            logger.info("User previously allowed motion tracking")
        elif status is AuthorizationStatus.RESTRICTED:
            logger.info("User access to motion updates is restricted")
        elif status is AuthorizationStatus.DENIED:
            logger.warning("User denied access to motion updates; will not start motion tracking")
            return False
        elif status is AuthorizationStatus.NOT_DETERMINED:
            logger.info("Permission for device motion tracking unknown; will prompt for access")

        with self._state_lock:
            if not self.active:
                self.active = True
                logger.info("Started device motion updates")
        return True

    def stop(self) -> None:
        with self._state_lock:
            if self.active:
                self.active = False
                self.aggregator.reset()
                logger.info("Stopped device motion updates")

    def toggle(self, status: AuthorizationStatus = AuthorizationStatus.AUTHORIZED) -> bool:
        """Start when idle, stop when active. Returns whether tracking is active."""
        with self._state_lock:
            if self.active:
                self.stop()
            else:
                self.start(status)
            return self.active

    def connected(self) -> None:
        logger.info("Headphones did connect")

    def disconnected(self) -> None:
        logger.info("Headphones did disconnect")

    def controls(self, available: bool, status: AuthorizationStatus) -> Dict[str, object]:
        """Tracking can be enabled only when motion is available and not denied."""
        return {
            "tracking_enabled": available and status is not AuthorizationStatus.DENIED,
            "tracking_title": "Stop Tracking" if self.active else "Start Tracking",
            "reference_hidden": not self.active,
        }

    def recenter(self) -> bool:
        with self._state_lock:
            rotation = self.pose_tracker.last_rotation
            if rotation is None:
                return False
            self.pose_tracker.set_reference(rotation)
            return True
