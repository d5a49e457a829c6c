# src/headmotion/infer.py
"""Replay a recorded motion stream through the windowed classifier."""

import argparse
import logging
import os

import numpy as np

from headmotion.classifier import TorchActivityClassifier
from headmotion.config import LABEL_MAP_PATH, LOG_LEVEL, MODEL_PATH, NUM_FEATURES, WINDOW_SIZE
from headmotion.display import format_confidence
from headmotion.sensors import MotionSample
from headmotion.window import WindowAggregator


def load_recording(path):
    """Load an (N, 6) recording; columns follow CHANNELS order."""
    if path.endswith(".npy"):
        data = np.load(path)
    elif path.endswith(".csv"):
        data = np.loadtxt(path, delimiter=",", ndmin=2)
    else:
        raise ValueError(f"Unsupported recording format: {path}")

    data = np.asarray(data, dtype=np.float64)
    if data.ndim != 2 or data.shape[1] != NUM_FEATURES:
        raise ValueError(f"Expected recording shape (N, {NUM_FEATURES}), got {data.shape!r}")
    return data


def samples_from_rows(rows):
    for row in rows:
        ax, ay, az, rx, ry, rz = (float(v) for v in row)
        yield MotionSample(rotation_rate=(rx, ry, rz), user_acceleration=(ax, ay, az))


def replay(rows, aggregator):
    """Feed rows in order; return the (window index, prediction) pairs produced."""
    results = []
    for sample in samples_from_rows(rows):
        prediction = aggregator.add_sample(sample)
        if prediction is not None:
            results.append((aggregator.windows_completed, prediction))
    return results


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Classify a recorded head-motion stream window by window.")
    parser.add_argument("recording", help="Path to an (N, 6) .npy or .csv recording.")
    parser.add_argument(
        "--window-size",
        type=int,
        default=WINDOW_SIZE,
        help=f"Samples per prediction window (default {WINDOW_SIZE}).",
    )
    parser.add_argument("--model", default=MODEL_PATH, help="Path to the classifier state_dict.")
    parser.add_argument("--labels", default=LABEL_MAP_PATH, help="Path to label_map.json.")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(level=LOG_LEVEL)

    if args.window_size < 1:
        print("Window size must be positive.")
        return 1
    if not os.path.exists(args.recording):
        print(f"Recording not found: {args.recording}")
        return 1

    try:
        rows = load_recording(args.recording)
    except ValueError as exc:
        print(exc)
        return 1

    classifier = TorchActivityClassifier.from_files(args.model, args.labels)
    aggregator = WindowAggregator(classifier, args.window_size)

    for window_idx, prediction in replay(rows, aggregator):
        print(f"Window {window_idx:04d}: {prediction.label} {format_confidence(prediction.confidence)}")

    leftover = aggregator.position
    print(
        f"Replay complete: {aggregator.windows_completed} windows, "
        f"{aggregator.failed_predictions} failed, {leftover} trailing samples ignored."
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
