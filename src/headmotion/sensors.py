"""Motion samples delivered by the headphone motion source."""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple

import numpy as np

# Channel order shared by the prediction window and the network input.
CHANNELS = ("acc_x", "acc_y", "acc_z", "rot_x", "rot_y", "rot_z")

Vector3 = Tuple[float, float, float]


class SampleFormatError(ValueError):
    """Raised when a sample payload is missing or has misshapen vectors."""


@dataclass
class MotionSample:
    rotation_rate: Vector3
    user_acceleration: Vector3
    rotation_matrix: Optional[np.ndarray] = None
    timestamp: Optional[float] = None

    def channel_values(self) -> Tuple[float, ...]:
        """Six values in CHANNELS order: acceleration (x, y, z) then rotation (x, y, z)."""
        ax, ay, az = self.user_acceleration
        rx, ry, rz = self.rotation_rate
        return (ax, ay, az, rx, ry, rz)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "MotionSample":
        """
        Build a sample from the JSON shape posted by motion clients:
          {"rotation_rate": [x, y, z], "user_acceleration": [x, y, z],
           "rotation_matrix": [[...], [...], [...]], "timestamp": 12.5}
        rotation_matrix and timestamp are optional.
        """
        if not isinstance(payload, Mapping):
            raise SampleFormatError(f"Sample must be an object, got {type(payload).__name__}")

        rotation_rate = _vector3(payload, "rotation_rate")
        user_acceleration = _vector3(payload, "user_acceleration")

        matrix = payload.get("rotation_matrix")
        if matrix is not None:
            matrix = np.asarray(matrix, dtype=np.float64)
            if matrix.shape != (3, 3):
                raise SampleFormatError(
                    f"rotation_matrix must be 3x3, got shape {matrix.shape!r}"
                )

        timestamp = payload.get("timestamp")
        return cls(
            rotation_rate=rotation_rate,
            user_acceleration=user_acceleration,
            rotation_matrix=matrix,
            timestamp=float(timestamp) if timestamp is not None else None,
        )


def _vector3(payload: Mapping[str, Any], key: str) -> Vector3:
    values: Optional[Sequence[Any]] = payload.get(key)
    if values is None:
        raise SampleFormatError(f"Missing '{key}'")
    try:
        x, y, z = (float(v) for v in values)
    except (TypeError, ValueError) as exc:
        raise SampleFormatError(f"'{key}' must hold three numbers: {exc}") from exc
    return (x, y, z)
