"""
Kalman Filter for bounding-box tracking in image space.

State vector:  [cx, cy, aspect_ratio, height, vx, vy, va, vh]
Measurement:   [cx, cy, aspect_ratio, height]

Constant velocity model as used in SORT / DeepSORT. Process and measurement
noise are scaled by the box height from two fixed weights.
"""

from __future__ import annotations

import math

import numpy as np
import scipy.linalg

from ..errors import InvalidGeometry

# Floor applied to aspect ratio and height so the state never describes an empty box
MIN_SIZE = 1e-3


class KalmanFilter:
    """
    Constant velocity Kalman filter in (cx, cy, a, h) box space.

    Standard deviations of the position and velocity components are
    `std_weight_position * h` and `std_weight_velocity * h`; the aspect
    ratio components use small fixed deviations.
    """

    ndim = 4

    # Fixed deviations for aspect ratio: (initial, process, process-velocity, measurement)
    _aspect_std = (1e-2, 1e-2, 1e-5, 1e-1)

    def __init__(self, std_weight_position: float = 1.0 / 20,
                 std_weight_velocity: float = 1.0 / 160, dt: float = 1.0):
        self.std_weight_position = std_weight_position
        self.std_weight_velocity = std_weight_velocity

        # x' = x + dt * v for each observed component
        self.F = np.eye(2 * self.ndim)
        self.F[:self.ndim, self.ndim:] = dt * np.eye(self.ndim)
        # Only the box itself is observed, never its velocity
        self.H = np.hstack([np.eye(self.ndim), np.zeros((self.ndim, self.ndim))])

    def _box_std(self, weight: float, h: float, aspect: float) -> np.ndarray:
        return np.array([weight * h, weight * h, aspect, weight * h])

    def initiate(self, measurement: np.ndarray):
        """Create a track state from an unassociated measurement.

        Parameters
        ----------
        measurement : ndarray (4,)
            [cx, cy, aspect_ratio, height]

        Returns
        -------
        mean : ndarray (8,)
        covariance : ndarray (8, 8)
        """
        z = np.asarray(measurement, dtype=float)
        h = z[3]
        mean = np.concatenate([z, np.zeros(self.ndim)])

        std = np.concatenate([
            self._box_std(2 * self.std_weight_position, h, self._aspect_std[0]),
            self._box_std(10 * self.std_weight_velocity, h, self._aspect_std[2]),
        ])
        return mean, np.diag(std ** 2)

    def process_noise(self, h: float) -> np.ndarray:
        """Q for a box of height h."""
        std = np.concatenate([
            self._box_std(self.std_weight_position, h, self._aspect_std[1]),
            self._box_std(self.std_weight_velocity, h, self._aspect_std[2]),
        ])
        return np.diag(std ** 2)

    def measurement_noise(self, h: float) -> np.ndarray:
        """R for a box of height h."""
        std = self._box_std(self.std_weight_position, h, self._aspect_std[3])
        return np.diag(std ** 2)

    def predict(self, mean: np.ndarray, covariance: np.ndarray):
        """Propagate one step: x = F x, P = F P F^T + Q."""
        Q = self.process_noise(mean[3])
        mean = self.F @ mean
        covariance = self.F @ covariance @ self.F.T + Q
        return _clamp_size(mean), covariance

    def project(self, mean: np.ndarray, covariance: np.ndarray):
        """Measurement-space mean H x and innovation covariance H P H^T + R."""
        S = self.H @ covariance @ self.H.T + self.measurement_noise(mean[3])
        return self.H @ mean, S

    def update(self, mean: np.ndarray, covariance: np.ndarray, measurement: np.ndarray):
        """Correct the state with an observed [cx, cy, a, h]."""
        z_pred, S = self.project(mean, covariance)

        # K = P H^T S^-1, via a Cholesky solve of S K^T = H P
        PHt = covariance @ self.H.T
        gain = scipy.linalg.cho_solve(
            scipy.linalg.cho_factor(S, lower=True, check_finite=False),
            PHt.T,
            check_finite=False,
        ).T

        residual = np.asarray(measurement, dtype=float) - z_pred
        mean = mean + gain @ residual
        covariance = covariance - gain @ S @ gain.T
        return _clamp_size(mean), covariance


def _clamp_size(mean: np.ndarray) -> np.ndarray:
    mean[2] = max(mean[2], MIN_SIZE)
    mean[3] = max(mean[3], MIN_SIZE)
    return mean


def check_bbox(bbox) -> None:
    """Raise InvalidGeometry unless bbox is a finite (x, y, w, h) with w, h > 0."""
    if len(bbox) != 4 or not all(math.isfinite(v) for v in bbox):
        raise InvalidGeometry(f"Non-finite bounding box: {bbox}", bbox=tuple(bbox))
    _, _, w, h = bbox
    if w <= 0 or h <= 0:
        raise InvalidGeometry(f"Bounding box has non-positive size: {bbox}", bbox=tuple(bbox))


def bbox_to_xyah(bbox) -> np.ndarray:
    """
    Convert bounding box from (x, y, w, h) to (cx, cy, aspect_ratio, h).
    """
    x, y, w, h = bbox
    cx = x + w / 2
    cy = y + h / 2
    a = w / h if h > 0 else 0
    return np.array([cx, cy, a, h], dtype=float)


def xyah_to_bbox(xyah: np.ndarray):
    """
    Convert from (cx, cy, aspect_ratio, h) to (x, y, w, h).
    """
    cx, cy, a, h = xyah
    w = a * h
    x = cx - w / 2
    y = cy - h / 2
    return (float(x), float(y), float(w), float(h))


def bbox_to_tlbr(bbox) -> np.ndarray:
    """Convert (x, y, w, h) to [x1, y1, x2, y2]."""
    x, y, w, h = bbox
    return np.array([x, y, x + w, y + h], dtype=float)
