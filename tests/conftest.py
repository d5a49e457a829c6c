"""Shared fixtures: a scripted classifier that records every call."""

from __future__ import annotations

import numpy as np
import pytest

from headmotion.classifier import Prediction
from headmotion.sensors import MotionSample


class RecordingClassifier:
    """Returns a new state per call; raises on the call numbers listed in fail_on."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    def classify(self, window, prior_state):
        self.calls.append((np.array(window, copy=True), prior_state))
        call_number = len(self.calls)
        if call_number in self.fail_on:
            raise RuntimeError(f"boom on call {call_number}")
        return Prediction(
            label="nodding",
            probabilities={"nodding": 0.75, "still": 0.25},
            state=np.full(4, float(call_number)),
        )


def make_sample(acc=(0.0, 0.0, 0.0), rot=(0.0, 0.0, 0.0), rotation_matrix=None):
    return MotionSample(rotation_rate=rot, user_acceleration=acc, rotation_matrix=rotation_matrix)


@pytest.fixture
def classifier():
    return RecordingClassifier()
