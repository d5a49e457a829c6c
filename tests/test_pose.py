"""Tests for head pose transforms and recentering."""

from __future__ import annotations

import numpy as np
import pytest

from headmotion.pose import MIRROR_TRANSFORM, HeadPoseTracker, rotation_to_transform


def _rot_z(angle):
    c, s = np.cos(angle), np.sin(angle)
    return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])


def test_identity_attitude_negates_x_axis():
    transform = rotation_to_transform(np.eye(3))
    expected = np.diag([-1.0, 1.0, 1.0, 1.0])
    assert np.allclose(transform, expected)


def test_transform_rejects_wrong_shape():
    with pytest.raises(ValueError):
        rotation_to_transform(np.eye(4))


def test_recentering_makes_current_pose_neutral():
    tracker = HeadPoseTracker()
    attitude = _rot_z(0.4)
    tracker.update(attitude)
    tracker.set_reference(attitude)

    pose = tracker.update(attitude)

    assert np.allclose(pose, MIRROR_TRANSFORM)


def test_reset_reference_restores_identity():
    tracker = HeadPoseTracker()
    tracker.set_reference(_rot_z(1.0))
    tracker.reset_reference()
    pose = tracker.update(np.eye(3))
    assert np.allclose(pose, MIRROR_TRANSFORM @ rotation_to_transform(np.eye(3)))


def test_axis_remap_swaps_device_y_and_z():
    # Device attitude with only m12 set maps into the third row of column 0.
    r = np.zeros((3, 3))
    r[0, 1] = 1.0
    transform = rotation_to_transform(r)
    assert transform[2, 0] == 1.0
    assert np.count_nonzero(transform[:3, :3]) == 1
