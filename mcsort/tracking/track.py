"""
Single-object track with Tentative / Confirmed / Deleted lifecycle.
"""

from enum import Enum

import numpy as np

from .kalman import KalmanFilter, bbox_to_tlbr, bbox_to_xyah, check_bbox, xyah_to_bbox
from .types import BBox, Detection, TrackingRecord


class TrackState(Enum):
    """Track lifecycle states."""
    TENTATIVE = 1  # Newly created, not yet confirmed
    CONFIRMED = 2  # Reported in output
    DELETED = 3    # Terminal; removed from the active set


class Track:
    """
    One object identity and its Kalman state.

    A track is born Tentative from an unmatched detection, which counts as
    its first hit. It becomes Confirmed once `hits` reaches `min_hits`
    consecutive matches and is Deleted once `time_since_update` exceeds
    `tentative_max_age` (while Tentative) or `max_age` (while Confirmed).
    """

    def __init__(
        self,
        track_id: int,
        detection: Detection,
        kalman: KalmanFilter,
        min_hits: int = 3,
        max_age: int = 3,
        tentative_max_age: int = 0,
    ):
        check_bbox(detection.bbox)

        self.track_id = track_id
        self.label = detection.label
        self.state = TrackState.TENTATIVE

        self.min_hits = min_hits
        self.max_age = max_age
        self.tentative_max_age = tentative_max_age

        self.kalman = kalman
        self.mean, self.covariance = kalman.initiate(bbox_to_xyah(detection.bbox))

        self.hits = 1
        self.age = 0
        self.time_since_update = 0

        self._maybe_confirm()

    def __repr__(self):
        return (f"Track(id={self.track_id}, label={self.label!r}, "
                f"state={self.state.name}, hits={self.hits}, "
                f"time_since_update={self.time_since_update})")

    @property
    def bbox(self) -> BBox:
        """Current (x, y, w, h) estimate."""
        return xyah_to_bbox(self.mean[:4])

    @property
    def tlbr(self) -> np.ndarray:
        """Current estimate as [x1, y1, x2, y2]."""
        return bbox_to_tlbr(self.bbox)

    def predict(self) -> BBox:
        """Propagate the state one frame ahead and return the predicted box."""
        self.mean, self.covariance = self.kalman.predict(self.mean, self.covariance)
        self.age += 1
        self.time_since_update += 1
        return self.bbox

    def update(self, detection: Detection):
        """Correct the state with a matched detection."""
        if self.state == TrackState.DELETED:
            raise RuntimeError(f"Cannot update deleted track {self.track_id}")
        check_bbox(detection.bbox)

        self.mean, self.covariance = self.kalman.update(
            self.mean, self.covariance, bbox_to_xyah(detection.bbox)
        )
        self.hits += 1
        self.time_since_update = 0
        self._maybe_confirm()

    def mark_missed(self):
        """Record a frame without a match; delete the track past its horizon."""
        self.hits = 0
        if self.state == TrackState.TENTATIVE:
            horizon = self.tentative_max_age
        else:
            horizon = self.max_age
        if self.time_since_update > horizon:
            self.state = TrackState.DELETED

    def _maybe_confirm(self):
        if self.state == TrackState.TENTATIVE and self.hits >= self.min_hits:
            self.state = TrackState.CONFIRMED

    def is_tentative(self) -> bool:
        return self.state == TrackState.TENTATIVE

    def is_confirmed(self) -> bool:
        return self.state == TrackState.CONFIRMED

    def is_deleted(self) -> bool:
        return self.state == TrackState.DELETED

    def to_record(self, frame_index: int) -> TrackingRecord:
        return TrackingRecord(
            frame_index=frame_index,
            label=self.label,
            track_id=self.track_id,
            bbox=self.bbox,
        )
