"""Tests for the torch-backed classifier and state packing."""

from __future__ import annotations

import json

import numpy as np
import pytest
import torch

from headmotion.classifier import ClassificationError, TorchActivityClassifier, load_label_map
from headmotion.model import HeadActivityLSTM, pack_state, unpack_state

LABELS = {0: "still", 1: "nodding", 2: "shaking"}


@pytest.fixture
def torch_classifier():
    torch.manual_seed(0)
    model = HeadActivityLSTM(hidden_size=8, num_classes=len(LABELS))
    return TorchActivityClassifier(model, LABELS, device=torch.device("cpu"))


def test_classify_returns_label_distribution_and_state(torch_classifier):
    window = np.random.default_rng(1).normal(size=(20, 6))
    prediction = torch_classifier.classify(window, None)

    assert prediction.label in LABELS.values()
    assert set(prediction.probabilities) == set(LABELS.values())
    assert sum(prediction.probabilities.values()) == pytest.approx(1.0, abs=1e-5)
    assert prediction.confidence == max(prediction.probabilities.values())
    assert prediction.state.shape == (16,)


def test_prior_state_changes_the_output(torch_classifier):
    window = np.random.default_rng(2).normal(size=(20, 6))
    first = torch_classifier.classify(window, None)
    again_fresh = torch_classifier.classify(window, None)
    carried = torch_classifier.classify(window, first.state)

    assert np.allclose(first.state, again_fresh.state)
    assert not np.allclose(first.state, carried.state)


def test_bad_window_shape_is_rejected(torch_classifier):
    with pytest.raises(ClassificationError):
        torch_classifier.classify(np.zeros((20, 5)), None)


def test_bad_state_length_is_rejected(torch_classifier):
    with pytest.raises(ClassificationError):
        torch_classifier.classify(np.zeros((20, 6)), np.zeros(3))


def test_pack_unpack_state_roundtrip():
    h = torch.arange(4, dtype=torch.float32).view(1, 1, 4)
    c = torch.arange(4, 8, dtype=torch.float32).view(1, 1, 4)
    vector = pack_state(h, c)
    assert list(vector) == [0, 1, 2, 3, 4, 5, 6, 7]

    h2, c2 = unpack_state(vector, hidden_size=4)
    assert torch.equal(h, h2)
    assert torch.equal(c, c2)

    with pytest.raises(ValueError):
        unpack_state(vector, hidden_size=3)


def test_from_files_loads_weights_and_labels(tmp_path):
    label_path = tmp_path / "label_map.json"
    label_path.write_text(json.dumps({"0": "still", "1": "walking"}))
    model = HeadActivityLSTM(hidden_size=8, num_classes=2)
    model_path = tmp_path / "classifier.pth"
    torch.save(model.state_dict(), model_path)

    assert load_label_map(str(label_path)) == {0: "still", 1: "walking"}

    classifier = TorchActivityClassifier.from_files(
        str(model_path), str(label_path), hidden_size=8, device=torch.device("cpu")
    )
    prediction = classifier.classify(np.zeros((20, 6)), None)
    assert prediction.label in ("still", "walking")
