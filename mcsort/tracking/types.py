"""
Value types exchanged between the detector, the tracker and the output sink.
"""

import math
from dataclasses import dataclass
from typing import Tuple

BBox = Tuple[float, float, float, float]  # (x, y, w, h)


@dataclass(frozen=True)
class Detection:
    """A single object detection for the current frame."""
    label: str
    bbox: BBox
    confidence: float = 1.0

    def is_valid(self) -> bool:
        """True if the box is finite and has positive width and height."""
        if len(self.bbox) != 4:
            return False
        if not all(math.isfinite(v) for v in self.bbox):
            return False
        _, _, w, h = self.bbox
        return w > 0 and h > 0


@dataclass(frozen=True)
class TrackingRecord:
    """One confirmed track in one frame."""
    frame_index: int
    label: str
    track_id: int
    bbox: BBox

    def to_line(self) -> str:
        """Render as a result line; trailing fields are constant fill."""
        x, y, w, h = self.bbox
        return f"{self.frame_index},{self.label},{self.track_id},{x:.2f},{y:.2f},{w:.2f},{h:.2f},1,-1,-1,-1"
