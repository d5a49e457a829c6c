"""Head pose relative to a user-chosen reference orientation."""

import numpy as np

# Flip x so the rendered head mirrors the wearer.
MIRROR_TRANSFORM = np.diag([-1.0, 1.0, 1.0, 1.0])


def rotation_to_transform(r):
    """
    Convert a 3x3 attitude rotation matrix into a 4x4 scene transform.
    Columns are built from the remapped device axes (x negated, y/z swapped).
    """
    r = np.asarray(r, dtype=np.float64)
    if r.shape != (3, 3):
        raise ValueError(f"Expected a 3x3 rotation matrix, got shape {r.shape!r}")

    columns = np.array([
        [-r[0, 0], r[0, 2], r[0, 1], 0.0],
        [-r[2, 0], r[2, 2], r[2, 1], 0.0],
        [-r[1, 0], r[1, 2], r[1, 1], 0.0],
        [0.0, 0.0, 0.0, 1.0],
    ])
    return columns.T


class HeadPoseTracker:
    def __init__(self):
        self.reference = np.eye(4)
        self.pose = np.eye(4)
        self.last_rotation = None

    def update(self, r):
        transform = rotation_to_transform(r)
        self.last_rotation = np.asarray(r, dtype=np.float64)
        self.pose = MIRROR_TRANSFORM @ transform @ self.reference
        return self.pose

    def set_reference(self, r):
        """Treat orientation `r` as the neutral head pose from now on."""
        self.reference = np.linalg.inv(rotation_to_transform(r))

    def reset_reference(self):
        self.reference = np.eye(4)
