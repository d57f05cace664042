"""
MCSORT: multi-class SORT.

Per frame: predict every track with a constant-velocity Kalman filter,
associate predictions to detections with per-label Hungarian matching on
IoU, update matched tracks, age unmatched ones and spawn new tracks for
unmatched detections.
"""

import logging
from typing import List, Sequence

import numpy as np

from .assignment import associate
from .kalman import KalmanFilter, bbox_to_tlbr
from .track import Track
from .types import Detection, TrackingRecord

logger = logging.getLogger(__name__)

class MCSORT:
    """
    Multi-class multi-object tracker.

    One instance tracks one sequence; it holds no state shared with other
    instances.
    """

    def __init__(
        self,
        min_hits: int = 3,
        max_age: int = 3,
        tentative_max_age: int = 0,
        iou_threshold: float = 0.3,
        std_weight_position: float = 1.0 / 20,
        std_weight_velocity: float = 1.0 / 160,
    ):
        """
        Initialize MCSORT.

        Args:
            min_hits: Consecutive matches needed to confirm a track
            max_age: Missed frames tolerated by a confirmed track
            tentative_max_age: Missed frames tolerated by a tentative track
            iou_threshold: Minimum IoU for a detection to match a track
            std_weight_position: Kalman position noise weight (scaled by height)
            std_weight_velocity: Kalman velocity noise weight (scaled by height)
        """
        if min_hits < 1:
            raise ValueError(f"min_hits must be >= 1, got {min_hits}")
        if max_age < 0 or tentative_max_age < 0:
            raise ValueError("max_age and tentative_max_age must be >= 0")
        if not 0.0 <= iou_threshold <= 1.0:
            raise ValueError(f"iou_threshold must be in [0, 1], got {iou_threshold}")

        self.min_hits = min_hits
        self.max_age = max_age
        self.tentative_max_age = tentative_max_age
        self.iou_threshold = iou_threshold

        self.kalman = KalmanFilter(std_weight_position, std_weight_velocity)

        self._tracks: List[Track] = []
        self._next_id = 1
        self.frame_index = 0

    @property
    def tracks(self) -> List[Track]:
        """Active (non-deleted) tracks in creation order."""
        return list(self._tracks)

    @property
    def next_id(self) -> int:
        return self._next_id

    def step(self, detections: Sequence[Detection]) -> List[TrackingRecord]:
        """
        Process one frame of detections.

        Args:
            detections: Detections for the current frame

        Returns:
            Records for every confirmed track after this frame
        """
        valid = [d for d in detections if d.is_valid()]
        if len(valid) != len(detections):
            logger.debug(
                f"frame {self.frame_index}: dropped {len(detections) - len(valid)} invalid detections"
            )

        for track in self._tracks:
            track.predict()

        result = associate(
            np.array([t.tlbr for t in self._tracks]),
            [t.label for t in self._tracks],
            np.array([bbox_to_tlbr(d.bbox) for d in valid]),
            [d.label for d in valid],
            iou_threshold=self.iou_threshold,
        )

        for itrack, idet in result.matches:
            self._tracks[itrack].update(valid[idet])

        for itrack in result.unmatched_tracks:
            self._tracks[itrack].mark_missed()

        for idet in result.unmatched_detections:
            self._initiate_track(valid[idet])

        removed = [t for t in self._tracks if t.is_deleted()]
        if removed:
            logger.debug(
                f"frame {self.frame_index}: removed tracks {[t.track_id for t in removed]}"
            )
        self._tracks = [t for t in self._tracks if not t.is_deleted()]

        records = [
            t.to_record(self.frame_index) for t in self._tracks if t.is_confirmed()
        ]
        self.frame_index += 1
        return records

    def _initiate_track(self, detection: Detection) -> Track:
        track = Track(
            self._next_id,
            detection,
            self.kalman,
            min_hits=self.min_hits,
            max_age=self.max_age,
            tentative_max_age=self.tentative_max_age,
        )
        self._next_id += 1
        self._tracks.append(track)
        return track

    def reset(self):
        """Reset tracker state."""
        self._tracks = []
        self._next_id = 1
        self.frame_index = 0
