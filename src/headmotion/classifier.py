"""Recurrent activity classifier called once per full prediction window."""

import json
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Protocol

import numpy as np
import torch

from headmotion.config import HIDDEN_SIZE, NUM_FEATURES
from headmotion.model import HeadActivityLSTM, pack_state, unpack_state

logger = logging.getLogger(__name__)

DEVICE = torch.device("cuda" if torch.cuda.is_available() else "cpu")


class ClassificationError(ValueError):
    """Raised when a window or state vector does not fit the network."""


@dataclass
class Prediction:
    label: str
    probabilities: Dict[str, float]
    state: np.ndarray

    @property
    def confidence(self) -> float:
        return self.probabilities[self.label]


class Classifier(Protocol):
    def classify(self, window: np.ndarray, prior_state: Optional[np.ndarray]) -> Prediction:
        ...


def load_label_map(path: str) -> Dict[int, str]:
    with open(path, "r") as f:
        label_map = json.load(f)
    return {int(k): v for k, v in label_map.items()}


class TorchActivityClassifier:
    """
    Wraps HeadActivityLSTM with the window calling convention:

    - `window` is a NumPy array of shape (window_size, 6) in CHANNELS order
    - `prior_state` is the flat state returned by the previous call, or None
    - returns the argmax label, a label->probability map and the new state
    """

    def __init__(self, model: HeadActivityLSTM, idx_to_label: Mapping[int, str], device=DEVICE):
        self.device = device
        self.model = model.to(device)
        self.model.eval()
        self.idx_to_label = dict(idx_to_label)

    @classmethod
    def from_files(cls, model_path: str, label_map_path: str, hidden_size=HIDDEN_SIZE, device=DEVICE):
        idx_to_label = load_label_map(label_map_path)
        model = HeadActivityLSTM(
            input_size=NUM_FEATURES, hidden_size=hidden_size, num_classes=len(idx_to_label)
        )
        model.load_state_dict(torch.load(model_path, map_location=device))
        logger.info("Loaded classifier from %s (%d labels)", model_path, len(idx_to_label))
        return cls(model, idx_to_label, device=device)

    @torch.no_grad()
    def classify(self, window: np.ndarray, prior_state: Optional[np.ndarray]) -> Prediction:
        window = np.asarray(window, dtype=np.float32)
        if window.ndim != 2 or window.shape[1] != NUM_FEATURES:
            raise ClassificationError(
                f"Expected window shape (N, {NUM_FEATURES}), got {window.shape!r}"
            )

        state = None
        if prior_state is not None:
            try:
                state = unpack_state(prior_state, self.model.hidden_size, self.device)
            except ValueError as exc:
                raise ClassificationError(str(exc)) from exc

        seq = torch.from_numpy(window).unsqueeze(0).to(self.device)
        logits, (hn, cn) = self.model(seq, state)
        probs = torch.softmax(logits, dim=1)[0].cpu().tolist()

        probabilities = {self.idx_to_label[i]: float(p) for i, p in enumerate(probs)}
        pred_idx = int(np.argmax(probs))
        return Prediction(
            label=self.idx_to_label[pred_idx],
            probabilities=probabilities,
            state=pack_state(hn, cn),
        )
